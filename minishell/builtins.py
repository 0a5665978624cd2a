"""Commands that run inside the shell itself."""

from __future__ import annotations

import os
import sys
from typing import TextIO

from .environment import Environment, env_header
from .model import Command

_ATOI_SPACES = "\t\n\r\v\f "


class ShellExit(Exception):
    """Raised when the shell, or one process of it, has to exit."""

    def __init__(self, status: int) -> None:
        super().__init__(status)
        self.status = status & 0xFF


def _is_digit(char: str) -> bool:
    return "0" <= char <= "9"


def _is_alpha(char: str) -> bool:
    return char.isascii() and char.isalpha()


def is_numeric(text: str | None) -> bool:
    """Return True for an optionally signed integer, with spaces around it."""
    if text is None:
        return False
    stripped = text.strip(" ")
    if stripped[:1] in ("+", "-"):
        stripped = stripped[1:]
    return bool(stripped) and all(_is_digit(c) for c in stripped)


def parse_long(text: str) -> int:
    """Read a leading integer the way atoi does; garbage after it is ignored."""
    pos = 0
    while pos < len(text) and text[pos] in _ATOI_SPACES:
        pos += 1
    negative = False
    if pos < len(text) and text[pos] in "+-":
        negative = text[pos] == "-"
        pos += 1
    end = pos
    while end < len(text) and _is_digit(text[end]):
        end += 1
    value = int(text[pos:end]) if end > pos else 0
    return -value if negative else value


def is_echo_n_flag(arg: str) -> bool:
    """Return True for "-n", "-nn" and so on."""
    return len(arg) > 1 and arg[0] == "-" and set(arg[1:]) == {"n"}


def builtin_echo(command: Command, out: TextIO | None = None) -> int:
    """Print the arguments; any -n flag suppresses the final newline."""
    if out is None:
        out = sys.stdout
    newline = True
    words: list[str] = []
    for arg in command.argv[1:]:
        if is_echo_n_flag(arg):
            newline = False
        else:
            words.append(arg)
    out.write(" ".join(words))
    if newline:
        out.write("\n")
    return 0


def builtin_pwd(out: TextIO | None = None, err: TextIO | None = None) -> int:
    """Print the working directory."""
    if out is None:
        out = sys.stdout
    if err is None:
        err = sys.stderr
    try:
        cwd = os.getcwd()
    except OSError as exc:
        err.write(f"getcwd: {exc.strerror}\n")
        return 1
    out.write(f"{cwd}\n")
    return 0


def builtin_cd(command: Command, env: Environment, err: TextIO | None = None) -> int:
    """Change directory to the argument, or to HOME, and update PWD."""
    if err is None:
        err = sys.stderr
    if command.argc > 1:
        target = command.argv[1]
    else:
        home = env.lookup("HOME")
        if home is None:
            err.write("cd: HOME not set\n")
            return 1
        target = home
    try:
        os.chdir(target)
    except OSError:
        err.write("Invalid path!\n")
        return 1
    update_pwds(env)
    return 0


def builtin_env(env: Environment, out: TextIO | None = None) -> int:
    """Print every environment entry."""
    if out is None:
        out = sys.stdout
    for entry in env:
        out.write(f"{entry}\n")
    return 0


def builtin_export(
    env: Environment, command: Command, err: TextIO | None = None
) -> int:
    """Set variables from NAME=value arguments.

    Arguments without "=" or starting with it are ignored. The status is
    that of the last NAME=value argument.
    """
    if err is None:
        err = sys.stderr
    exit_code = 0
    added: list[str] = []
    for arg in command.argv[1:]:
        if "=" not in arg or arg.startswith("="):
            continue
        name = env_header(arg)
        if not _is_alpha(name[0]):
            err.write(f'export: "{arg}" not a valid identifier\n')
            exit_code = 1
            continue
        exit_code = 0
        index = env.index_of(name)
        if index is None:
            added.append(arg)
        else:
            env.entries[index] = arg
    env.entries.extend(added)
    return exit_code


def builtin_unset(env: Environment, command: Command) -> int:
    """Remove each named variable."""
    env.remove(command.argv)
    return 0


def builtin_exit(
    command: Command, ncommands: int, err: TextIO | None = None
) -> int:
    """Leave the shell by raising ShellExit.

    With too many arguments in a lone command it only reports the error
    and returns 1.
    """
    if err is None:
        err = sys.stderr
    if ncommands == 1:
        err.write("exit\n")
    if command.argc <= 1:
        raise ShellExit(0)
    arg = command.argv[1]
    if not is_numeric(arg):
        err.write(f"minishell: exit: {arg}: numeric argument required\n")
        raise ShellExit(2)
    if command.argc > 2:
        err.write("minishell: exit: too many arguments\n")
        if ncommands == 1:
            return 1
        raise ShellExit(1)
    raise ShellExit(parse_long(arg))


def update_pwds(env: Environment) -> None:
    """Move PWD to OLDPWD and set PWD to the working directory."""
    old = env.lookup("PWD")
    if old is not None:
        env.update("OLDPWD", old)
    elif env.contains("OLDPWD"):
        env.remove(["OLDPWD"])
    try:
        cwd = os.getcwd()
    except OSError:
        return
    env.update("PWD", cwd)