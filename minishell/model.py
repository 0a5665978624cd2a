"""Core data types shared by the parser and the executor."""

from __future__ import annotations

from dataclasses import dataclass, field

BUILTINS = frozenset({"echo", "cd", "pwd", "export", "unset", "env", "exit"})


class ParseError(Exception):
    """Raised when an input line has invalid syntax."""


def is_builtin(name: str | None) -> bool:
    """Return True if *name* is a shell builtin.

    A command without a name counts as a builtin: it runs in the shell
    itself and does nothing.
    """
    return name is None or name in BUILTINS


@dataclass
class Command:
    """One simple command of a pipeline, with its redirections."""

    filename: str | None = None
    argv: list[str] = field(default_factory=list)
    redirect_input: str | None = None
    redirect_output: str | None = None
    heredoc_delimiter: str | None = None
    append_output: str | None = None
    pid: int | None = None

    @property
    def argc(self) -> int:
        return len(self.argv)

    def add_argument(self, word: str) -> None:
        """Append *word* to the argument vector."""
        self.argv.append(word)