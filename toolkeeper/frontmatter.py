"""Split markdown files into YAML front matter and body."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Optional

import yaml

_FRONTMATTER_RE = re.compile(r"^---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|$)", re.DOTALL)


@dataclass(frozen=True)
class Frontmatter:
    data: dict[str, Any]
    body: str
    error: Optional[str] = None

    @property
    def valid(self) -> bool:
        return self.error is None


def extract_frontmatter(text: str) -> Optional[Frontmatter]:
    """Return ``None`` when the text has no (or an empty) front matter block.

    Malformed YAML, or YAML that is not a mapping, yields a ``Frontmatter``
    with ``error`` set so callers can report it instead of guessing.
    """
    match = _FRONTMATTER_RE.match(text)
    if not match:
        return None

    block = match.group(1)
    body = text[match.end() :].strip()
    if not block.strip():
        return None

    try:
        raw = yaml.safe_load(block)
    except yaml.YAMLError as exc:
        detail = str(exc).splitlines()[0] if str(exc) else "invalid YAML"
        return Frontmatter(data={}, body=body, error=detail)

    if raw is None:
        return None
    if not isinstance(raw, dict):
        return Frontmatter(data={}, body=body, error="front matter must be a mapping")
    return Frontmatter(data={str(key): value for key, value in raw.items()}, body=body)


def optional_str(data: dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, list):
        return ", ".join(str(item) for item in value)
    return str(value)
