"""Newline-delimited key=value text format used for booter files."""

from __future__ import annotations

import re
from collections.abc import Iterable

from fork_booter.errors import FormatError

KEY_PATTERN = re.compile(r"[A-Za-z0-9_.]+")
COMMENT_PREFIX = "#"

_ESCAPES = {"\\": "\\\\", "\n": "\\n", "\r": "\\r"}
_UNESCAPES = {"\\": "\\", "n": "\n", "r": "\r"}


def is_valid_key(key: str) -> bool:
    """Return True when the key can be written to the line format."""
    return KEY_PATTERN.fullmatch(key) is not None


def escape_value(value: str) -> str:
    return "".join(_ESCAPES.get(char, char) for char in value)


def unescape_value(raw: str, *, line_number: int | None = None) -> str:
    chars: list[str] = []
    index = 0
    while index < len(raw):
        char = raw[index]
        if char != "\\":
            chars.append(char)
            index += 1
            continue
        if index + 1 >= len(raw):
            raise FormatError("Dangling escape at end of value.", line_number=line_number)
        escaped = raw[index + 1]
        if escaped not in _UNESCAPES:
            raise FormatError(f"Unknown escape sequence '\\{escaped}'.", line_number=line_number)
        chars.append(_UNESCAPES[escaped])
        index += 2
    return "".join(chars)


def render_lines(entries: Iterable[tuple[str, str]]) -> str:
    """Render entries in the given order, one escaped ``key=value`` line each."""
    return "".join(f"{key}={escape_value(value)}\n" for key, value in entries)


def parse_lines(text: str) -> dict[str, str]:
    """Parse rendered text back into an insertion-ordered mapping.

    Blank lines and ``#`` comments are skipped. A trailing carriage return left
    by CRLF line endings is dropped; real carriage returns in values are escaped.

    Raises:
      FormatError: On a line without ``=``, an invalid key, a bad escape or a
        duplicate key.
    """
    entries: dict[str, str] = {}
    for line_number, line in enumerate(text.split("\n"), start=1):
        if line.endswith("\r"):
            line = line[:-1]
        if not line.strip() or line.startswith(COMMENT_PREFIX):
            continue
        key, separator, raw_value = line.partition("=")
        if not separator:
            raise FormatError("Expected a key=value entry.", line_number=line_number)
        if not is_valid_key(key):
            raise FormatError(f"Invalid key {key!r}.", line_number=line_number)
        if key in entries:
            raise FormatError(f"Duplicate key {key}.", line_number=line_number)
        entries[key] = unescape_value(raw_value, line_number=line_number)
    return entries
