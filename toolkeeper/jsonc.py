"""Lenient JSON parsing for hand-edited config files.

Agent config files are frequently edited by hand and end up with comments or
trailing commas. ``parse_jsonc`` accepts those and never raises.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional

_CLOSERS = frozenset("]}")
_WHITESPACE = frozenset(" \t\r\n")


@dataclass(frozen=True)
class JsonParseResult:
    success: bool
    data: Any = None
    error: Optional[str] = None


def strip_comments(text: str) -> str:
    """Remove ``//`` and ``/* */`` comments outside of string literals."""
    out: list[str] = []
    in_string = False
    escaped = False
    i = 0
    length = len(text)

    while i < length:
        ch = text[i]

        if in_string:
            out.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            i += 1
            continue

        if ch == '"':
            in_string = True
            out.append(ch)
            i += 1
            continue

        nxt = text[i + 1] if i + 1 < length else ""
        if ch == "/" and nxt == "/":
            end = text.find("\n", i + 2)
            if end == -1:
                break
            # keep the newline so line numbers in later errors still line up
            i = end
            continue
        if ch == "/" and nxt == "*":
            end = text.find("*/", i + 2)
            if end == -1:
                break
            i = end + 2
            continue

        out.append(ch)
        i += 1

    return "".join(out)


def strip_trailing_commas(text: str) -> str:
    """Drop commas that directly precede a closing bracket or brace."""
    out: list[str] = []
    in_string = False
    escaped = False
    length = len(text)

    for i, ch in enumerate(text):
        if in_string:
            out.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
            out.append(ch)
            continue

        if ch == ",":
            j = i + 1
            while j < length and text[j] in _WHITESPACE:
                j += 1
            if j < length and text[j] in _CLOSERS:
                continue

        out.append(ch)

    return "".join(out)


def parse_jsonc(text: str) -> JsonParseResult:
    try:
        return JsonParseResult(success=True, data=json.loads(text))
    except (json.JSONDecodeError, TypeError):
        pass

    try:
        cleaned = strip_trailing_commas(strip_comments(text))
        return JsonParseResult(success=True, data=json.loads(cleaned))
    except (json.JSONDecodeError, TypeError) as exc:
        return JsonParseResult(success=False, error=f"Invalid JSON: {exc}")
