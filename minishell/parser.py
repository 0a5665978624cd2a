"""Turning an input line into a list of commands."""

from __future__ import annotations

import os
import sys
from collections.abc import Callable

from .environment import Environment
from .heredoc import read_heredoc
from .model import Command, ParseError
from .paths import resolve_command
from .words import parse_word, skip_spaces

HeredocReader = Callable[[str], object]


def _discard_heredoc(delimiter: str) -> None:
    read_heredoc(delimiter)


def _open_and_close(path: str, flags: int) -> bool:
    try:
        fd = os.open(path, flags, 0o644)
    except OSError:
        sys.stderr.write(f"Error: Unable to open {path}\n")
        return False
    os.close(fd)
    return True


def touch_append(path: str) -> bool:
    """Create *path* for appending if needed; report failure on stderr."""
    return _open_and_close(path, os.O_CREAT | os.O_RDWR | os.O_APPEND)


def touch_redirect(path: str, create: bool) -> bool:
    """Truncate or create *path* when *create*, else only check it opens."""
    if create:
        flags = os.O_WRONLY | os.O_CREAT | os.O_TRUNC
    else:
        flags = os.O_WRONLY
    return _open_and_close(path, flags)


def _apply_redirect(
    command: Command, operator: str, target: str, reader: HeredocReader
) -> None:
    if operator == ">>":
        touch_append(target)
        command.append_output = target
    elif operator == "<<":
        if command.heredoc_delimiter is not None:
            reader(command.heredoc_delimiter)
        command.heredoc_delimiter = target
    elif operator == ">":
        touch_redirect(target, True)
        command.redirect_output = target
    elif operator == "<":
        touch_redirect(target, False)
        command.redirect_input = target


def parse_command(
    text: str,
    pos: int,
    env: Environment,
    heredoc_reader: HeredocReader | None = None,
) -> tuple[Command, int]:
    """Parse one command up to the next pipe or the end of *text*.

    Returns the command and the position where parsing stopped.
    """
    reader = heredoc_reader if heredoc_reader is not None else _discard_heredoc
    command = Command()
    first = True
    while pos < len(text) and text[pos] != "|":
        word, pos = parse_word(text, pos, env)
        if word is None:
            raise ParseError("unexpected end of command")
        if word.startswith(("<", ">")):
            target, pos = parse_word(text, pos, env)
            if target is None or target.startswith(("<", ">")):
                raise ParseError("missing redirection target")
            _apply_redirect(command, word, target, reader)
        elif first:
            resolved = resolve_command(word, env)
            name = resolved if resolved is not None else word
            command.filename = name
            command.add_argument(name)
            first = False
        else:
            command.add_argument(word)
    return command, pos


def parse_line(
    text: str,
    env: Environment,
    heredoc_reader: HeredocReader | None = None,
) -> list[Command]:
    """Parse a whole line into the commands of a pipeline."""
    reader = heredoc_reader if heredoc_reader is not None else _discard_heredoc
    commands: list[Command] = []
    pos = 0
    pending_pipe = False
    while pos < len(text):
        pending_pipe = False
        pos = skip_spaces(text, pos)
        if pos < len(text) and text[pos] == "|":
            raise ParseError("unexpected pipe")
        if pos < len(text):
            command, pos = parse_command(text, pos, env, reader)
            if command.heredoc_delimiter is not None and command.filename is None:
                reader(command.heredoc_delimiter)
            commands.append(command)
            if pos < len(text) and text[pos] == "|":
                pos += 1
                pending_pipe = True
        pos = skip_spaces(text, pos)
    if pending_pipe:
        raise ParseError("pipe without a command")
    return commands