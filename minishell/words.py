"""Splitting an input line into words, with variable and quote handling."""

from __future__ import annotations

from .environment import Environment
from .model import ParseError

_QUOTES = "'\""


def is_special_char(char: str) -> bool:
    """Return True for characters that end a word."""
    return char in (" ", "|", ">", "<")


def skip_spaces(text: str, pos: int) -> int:
    """Return the first position at or after *pos* that is not a space."""
    while pos < len(text) and text[pos] == " ":
        pos += 1
    return pos


def skip_quoted(text: str, pos: int) -> int:
    """Return the position of the quote closing the one at *pos*."""
    close = text.find(text[pos], pos + 1)
    if close < 0:
        raise ParseError("unclosed quote")
    return close


def _is_name_char(char: str) -> bool:
    return char.isascii() and char.isalnum()


def _substitute(word: str, dollar: int, env: Environment) -> tuple[str, int]:
    start = dollar + 1
    end = start
    while end < len(word) and _is_name_char(word[end]):
        end += 1
    if end > start:
        name = word[start:end]
    elif end < len(word) and word[end] == "?":
        name = "?"
        end += 1
    else:
        return word, start
    value = env.lookup(name) or ""
    return word[:dollar] + value + word[end:], dollar + len(value)


def expand_variables(word: str, env: Environment) -> str:
    """Replace $NAME and $? outside single quotes.

    After a substitution the character that follows the inserted value is
    passed over, so "$A$B" expands only the first variable.
    """
    pos = 0
    in_double = False
    while pos < len(word):
        if word[pos] == "'" and not in_double:
            close = word.find("'", pos + 1)
            if close < 0:
                break
            pos = close
        if word[pos] == "$":
            word, pos = _substitute(word, pos, env)
        if pos < len(word) and word[pos] == '"':
            in_double = not in_double
        if pos < len(word):
            pos += 1
    return word


def remove_quotes(word: str) -> str:
    """Drop quote pairs, keeping the text they enclose."""
    parts: list[str] = []
    pos = 0
    while pos < len(word):
        char = word[pos]
        if char in _QUOTES:
            close = word.find(char, pos + 1)
            if close < 0:
                parts.append(word[pos + 1:])
                break
            parts.append(word[pos + 1:close])
            pos = close + 1
        else:
            parts.append(char)
            pos += 1
    return "".join(parts)


def parse_word(text: str, pos: int, env: Environment) -> tuple[str | None, int]:
    """Read one word starting at *pos*.

    Returns the expanded, unquoted word and the position of the next word.
    The word is None when the line ends or a pipe comes first. A trailing
    "<", ">", "<<" or ">>" is kept as part of the word.
    """
    pos = skip_spaces(text, pos)
    if pos >= len(text):
        return None, pos
    start = pos
    while pos < len(text) and not is_special_char(text[pos]):
        if text[pos] in _QUOTES:
            pos = skip_quoted(text, pos)
        pos += 1
    for _ in range(2):
        if pos < len(text) and text[pos] in "<>":
            pos += 1
    if pos == start:
        return None, pos
    word = text[start:pos]
    pos = skip_spaces(text, pos)
    return remove_quotes(expand_variables(word, env)), pos