"""Whole-entry operations for file-backed tools (skills, commands, prompts).

These bypass the mutation pipeline: the unit of change is a file or a
directory, not a field inside a structured document.
"""

import logging
import shutil
from pathlib import Path

from toolkeeper.backup import BackupService
from toolkeeper.models import DISABLED_SUFFIX, Tool

logger = logging.getLogger(__name__)


def toggled_path(path: Path, disable: bool) -> Path:
    if disable:
        return path if path.name.endswith(DISABLED_SUFFIX) else Path(f"{path}{DISABLED_SUFFIX}")
    if path.name.endswith(DISABLED_SUFFIX):
        return path.with_name(path.name[: -len(DISABLED_SUFFIX)])
    return path


def rename_entry(source: Path, target: Path) -> None:
    if source == target:
        return
    if target.exists():
        raise FileExistsError(f"Cannot rename {source}: {target} already exists")
    source.rename(target)
    logger.info("renamed %s -> %s", source, target)


def toggle_entry(tool: Tool, disable: bool) -> None:
    entry = tool.source.entry_path
    rename_entry(entry, toggled_path(entry, disable))


def copy_entry(backup: BackupService, source: Path, target: Path) -> None:
    """Copy a file or directory, snapshotting whatever it replaces.

    A replaced directory is removed before the copy so none of its files
    outlive the overwrite.
    """
    target.parent.mkdir(parents=True, exist_ok=True)
    if target.exists():
        backup.create_backup(target)
        if target.is_dir() and not target.is_symlink():
            shutil.rmtree(target)
    if source.is_dir():
        shutil.copytree(source, target)
    else:
        shutil.copy2(source, target)
    logger.info("copied %s -> %s", source, target)


def remove_entry(backup: BackupService, path: Path) -> None:
    backup.create_backup(path)
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()
    logger.info("removed %s", path)
