"""Filesystem primitives for config files.

Reads distinguish "absent" (a valid, not-yet-configured state) from
"unreadable or corrupt". Writes create parent directories and go through a
temp file in the target directory followed by ``os.replace`` so an
interrupted write never leaves a truncated file behind.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from toolkeeper.jsonc import parse_jsonc
from toolkeeper.models import ConfigReadResult
from toolkeeper.toml_codec import TomlCodec

logger = logging.getLogger(__name__)


def serialize_json(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"


def atomic_write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        if path.exists():
            os.chmod(tmp_path, path.stat().st_mode & 0o777)
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


class FileStore:
    def __init__(self, toml: Optional[TomlCodec] = None) -> None:
        self.toml = toml or TomlCodec()

    def read_json(self, path: Path) -> ConfigReadResult[Any]:
        content = self._read_raw(path)
        if isinstance(content, ConfigReadResult):
            return content
        if not content.strip():
            return ConfigReadResult.missing()

        parsed = parse_jsonc(content)
        if not parsed.success:
            return ConfigReadResult.failure(parsed.error or "Invalid JSON", path)
        return ConfigReadResult.ok(parsed.data)

    def write_json(self, path: Path, payload: Any) -> None:
        atomic_write_text(path, serialize_json(payload))
        logger.debug("wrote %s", path)

    def read_toml(self, path: Path) -> ConfigReadResult[dict[str, Any]]:
        content = self._read_raw(path)
        if isinstance(content, ConfigReadResult):
            return content
        if not content.strip():
            return ConfigReadResult.missing()

        try:
            return ConfigReadResult.ok(self.toml.loads(content))
        except ValueError as exc:
            return ConfigReadResult.failure(f"Invalid TOML: {exc}", path)

    def write_toml(self, path: Path, payload: dict[str, Any]) -> None:
        atomic_write_text(path, self.toml.dumps(payload))
        logger.debug("wrote %s", path)

    def read_text(self, path: Path) -> ConfigReadResult[str]:
        content = self._read_raw(path)
        if isinstance(content, ConfigReadResult):
            return content
        return ConfigReadResult.ok(content)

    def write_text(self, path: Path, content: str) -> None:
        atomic_write_text(path, content)
        logger.debug("wrote %s", path)

    @staticmethod
    def exists(path: Path) -> bool:
        return path.exists() or path.is_symlink()

    @staticmethod
    def list_directories(path: Path) -> list[str]:
        try:
            entries = sorted(path.iterdir())
        except (FileNotFoundError, NotADirectoryError):
            return []
        return [entry.name for entry in entries if entry.is_dir()]

    @staticmethod
    def list_files(path: Path, *suffixes: str) -> list[str]:
        try:
            entries = sorted(path.iterdir())
        except (FileNotFoundError, NotADirectoryError):
            return []
        return [
            entry.name
            for entry in entries
            if entry.is_file() and (not suffixes or entry.name.endswith(suffixes))
        ]

    @staticmethod
    def _read_raw(path: Path) -> "str | ConfigReadResult[Any]":
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return ConfigReadResult.missing()
        except (OSError, UnicodeDecodeError) as exc:
            return ConfigReadResult.failure(str(exc), path)
