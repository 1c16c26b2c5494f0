import importlib
import math
import re
from datetime import date, datetime, time
from types import ModuleType
from typing import Any, Callable, Optional

_BARE_KEY_RE = re.compile(r"^[A-Za-z0-9_-]+$")
_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\b": "\\b",
    "\t": "\\t",
    "\n": "\\n",
    "\f": "\\f",
    "\r": "\\r",
}


def _load_tomllib() -> ModuleType:
    return importlib.import_module("tomllib")


def _dump_key(key: str) -> str:
    if _BARE_KEY_RE.match(key):
        return key
    return _dump_string(key)


def _dump_string(value: str) -> str:
    chars: list[str] = []
    for ch in value:
        if ch in _ESCAPES:
            chars.append(_ESCAPES[ch])
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            chars.append(f"\\u{ord(ch):04x}")
        else:
            chars.append(ch)
    return '"' + "".join(chars) + '"'


def _dump_toml_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value):
            return "nan"
        if math.isinf(value):
            return "inf" if value > 0 else "-inf"
        return repr(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(_dump_toml_value(item) for item in value) + "]"
    if isinstance(value, dict):
        items = [
            f"{_dump_key(str(key))} = {_dump_toml_value(item)}"
            for key, item in value.items()
            if item is not None
        ]
        return "{ " + ", ".join(items) + " }" if items else "{}"
    return _dump_string(str(value))


class TomlCodec:
    """TOML reader/writer whose parser module is imported on first use.

    Construct one per object graph and inject it; pass ``loader`` to
    substitute the parser in tests.
    """

    def __init__(self, loader: Optional[Callable[[], ModuleType]] = None) -> None:
        self._loader = loader or _load_tomllib
        self._parser: Optional[ModuleType] = None

    @property
    def parser(self) -> ModuleType:
        if self._parser is None:
            self._parser = self._loader()
        return self._parser

    @property
    def loaded(self) -> bool:
        return self._parser is not None

    def loads(self, text: str) -> dict[str, Any]:
        return self.parser.loads(text)

    def dumps(self, payload: dict[str, Any]) -> str:
        lines: list[str] = []
        self._dump_table(lines, (), payload)
        return "\n".join(lines).strip() + "\n"

    def _dump_table(
        self, lines: list[str], prefix: tuple[str, ...], table: dict[str, Any]
    ) -> None:
        scalars = [
            (key, value)
            for key, value in table.items()
            if not isinstance(value, dict) and value is not None
        ]
        tables = [(key, value) for key, value in table.items() if isinstance(value, dict)]

        if prefix and (scalars or not tables):
            lines.append("[" + ".".join(_dump_key(part) for part in prefix) + "]")
        for key, value in scalars:
            lines.append(f"{_dump_key(str(key))} = {_dump_toml_value(value)}")
        if scalars or (prefix and not tables):
            lines.append("")

        for key, value in tables:
            self._dump_table(lines, prefix + (str(key),), value)
