"""Quoting rules for string literals in `.klore` files.

`escape_literal` and `unescape_literal` are exact inverses: any text survives
`unescape_literal(escape_literal(text))` unchanged, including quotes,
backslashes and line breaks. Replacement originals depend on this to keep
matching the source files they were taken from.
"""

from __future__ import annotations

import re
from typing import List, Optional

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
}

_UNESCAPES = {
    "n": "\n",
    "r": "\r",
    '"': '"',
    "'": "'",
    "\\": "\\",
}

TOKEN_RE = re.compile(
    r'"(?:[^"\\]|\\.)*"'  # double quoted, backslash escapes
    r"|'(?:[^'\\]|\\.)*'"  # single quoted
    r"|\[[^\]]*\]"  # bracketed array
    r"|\S+"
)


def escape_literal(text: str) -> str:
    return "".join(_ESCAPES.get(char, char) for char in text)


def unescape_literal(text: str) -> str:
    """Undo `escape_literal` in a single left-to-right pass.

    Unknown escape pairs such as `\\d` are kept as written.
    """
    out: List[str] = []
    i = 0
    while i < len(text):
        char = text[i]
        if char == "\\" and i + 1 < len(text):
            nxt = text[i + 1]
            if nxt in _UNESCAPES:
                out.append(_UNESCAPES[nxt])
            else:
                out.append(char + nxt)
            i += 2
            continue
        out.append(char)
        i += 1
    return "".join(out)


def quote(text: str) -> str:
    return f'"{escape_literal(text)}"'


def tokenize(line: str) -> List[str]:
    """Split a definition line into quoted strings, arrays and bare words."""
    return TOKEN_RE.findall(line)


def is_quoted(token: str) -> bool:
    return len(token) >= 2 and token[0] == token[-1] and token[0] in "\"'"


def unquote(token: str) -> str:
    """Strip the quotes of a quoted token and unescape it; bare words pass through."""
    if is_quoted(token):
        return unescape_literal(token[1:-1])
    return token


def scan_quoted(text: str, start: int = 0) -> Optional[tuple[str, int]]:
    """Read a double-quoted literal beginning at `text[start]`.

    Returns the raw (still escaped) body and the index just past the closing
    quote, or None when `text[start]` is not a quote or the literal never ends.
    """
    if start >= len(text) or text[start] != '"':
        return None
    escaped = False
    for i in range(start + 1, len(text)):
        char = text[i]
        if escaped:
            escaped = False
            continue
        if char == "\\":
            escaped = True
            continue
        if char == '"':
            return text[start + 1 : i], i + 1
    return None


def first_quoted(line: str) -> str:
    """Unescaped content of the first quoted string on the line, or ''."""
    for token in tokenize(line):
        if is_quoted(token):
            return unquote(token)
    return ""


def parse_array(text: str) -> List[str]:
    """Items of the first `[a, "b", c]` array in text, trimmed and unquoted."""
    match = re.search(r"\[([^\]]*)\]", text)
    if not match:
        return []
    items = (item.strip().strip("\"'") for item in match.group(1).split(","))
    return [item for item in items if item]
