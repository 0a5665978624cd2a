"""The interactive read-parse-execute loop."""

from __future__ import annotations

import os
import signal
import sys
from collections.abc import Callable, Mapping

from .builtins import ShellExit, builtin_export, parse_long
from .environment import Environment
from .executor import execute_pipeline
from .heredoc import read_heredoc
from .model import Command, ParseError
from .parser import parse_line

try:
    import readline
except ImportError:
    readline = None  # type: ignore[assignment]

RESET = "\033[0m"
RED = "\033[1;31m"
GREEN = "\033[1;32m"
BLUE = "\033[1;34m"
MAGENTA = "\033[1;35m"

INTERRUPTED_STATUS = 130

LineReader = Callable[[str], "str | None"]


def build_prompt(user: str, cwd: str) -> str:
    """Return the coloured prompt showing *user* and *cwd*."""
    return f"{GREEN}{user}{BLUE} [at] {MAGENTA}{cwd}{RED} $> {RESET}"


def _read_input(prompt: str) -> str | None:
    try:
        return input(prompt)
    except EOFError:
        return None


def _current_prompt() -> str:
    user = os.environ.get("USER", "unknown")
    try:
        cwd = os.getcwd()
    except OSError:
        cwd = ""
    return build_prompt(user, cwd)


class Shell:
    """A shell session: its environment, exit status and streams."""

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        if environ is None:
            environ = os.environ
        self.env = Environment(f"{name}={value}" for name, value in environ.items())
        self.stdin = sys.stdin
        self.stdout = sys.stdout
        self.stderr = sys.stderr

    def update_shlvl(self) -> None:
        """Increase SHLVL by one, setting it to 1 if it is unset."""
        current = self.env.lookup("SHLVL")
        level = parse_long(current) + 1 if current is not None else 1
        command = Command(filename="export", argv=["export", f"SHLVL={level}"])
        builtin_export(self.env, command, self.stderr)

    def _read_heredoc(self, delimiter: str) -> str:
        return read_heredoc(delimiter, self.stdin, self.stderr)

    def handle_line(self, line: str) -> None:
        """Parse and run one input line; ShellExit ends the session."""
        if not line:
            return
        if readline is not None:
            readline.add_history(line)
        try:
            commands = parse_line(line, self.env, self._read_heredoc)
        except ParseError:
            self.stdout.write("Error: Invalid syntax\n")
            self.env.exit_value = 1
            return
        if commands:
            execute_pipeline(commands, self.env, self.stdin, self.stdout, self.stderr)

    def _interrupted(self) -> None:
        self.stdout.write("\n")
        self.stdout.flush()
        self.env.exit_value = INTERRUPTED_STATUS

    def run(self, read_line: LineReader | None = None) -> int:
        """Read and run lines until end of input or exit; return the status."""
        reader = read_line if read_line is not None else _read_input
        while True:
            try:
                line = reader(_current_prompt())
            except KeyboardInterrupt:
                self._interrupted()
                continue
            if line is None:
                return 0
            try:
                self.handle_line(line)
            except ShellExit as exc:
                return exc.status
            except KeyboardInterrupt:
                self._interrupted()


def main(argv: list[str] | None = None) -> int:
    """Start an interactive shell and return its exit status."""
    shell = Shell()
    previous = None
    if hasattr(signal, "SIGQUIT"):
        previous = signal.signal(signal.SIGQUIT, signal.SIG_IGN)
    try:
        shell.update_shlvl()
        return shell.run()
    finally:
        if previous is not None:
            signal.signal(signal.SIGQUIT, previous)