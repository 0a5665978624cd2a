"""Reading here-document bodies."""

from __future__ import annotations

import sys
from typing import TextIO

PROMPT = "> "


def read_heredoc(
    delimiter: str,
    stream: TextIO | None = None,
    prompt_stream: TextIO | None = None,
) -> str:
    """Read lines until one equals *delimiter* and return what came before.

    A prompt is written before every line is read. Reading also stops at
    end of input; a last line without a newline never ends the document.
    """
    if stream is None:
        stream = sys.stdin
    if prompt_stream is None:
        prompt_stream = sys.stderr
    terminator = delimiter + "\n"
    lines: list[str] = []
    while True:
        prompt_stream.write(PROMPT)
        prompt_stream.flush()
        line = stream.readline()
        if not line or line == terminator:
            break
        lines.append(line)
    return "".join(lines)