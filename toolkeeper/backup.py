import logging
import shutil
from pathlib import Path
from typing import Optional

from toolkeeper.errors import BackupError

logger = logging.getLogger(__name__)

MAX_BACKUPS = 5


def backup_path(path: Path, number: int, directory: bool = False) -> Path:
    if directory:
        # Hidden sibling so directory listers never mistake it for a live entry.
        return path.parent / f".{path.name}.bak.{number}"
    return Path(f"{path}.bak.{number}")


def _discard(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink(missing_ok=True)


class BackupService:
    """Rolling ``.bak.1`` (newest) .. ``.bak.N`` (oldest) copies of a file.

    Directory-backed entries are copied whole to hidden ``.<name>.bak.N``
    siblings so the snapshot survives deletion of the directory itself.
    """

    def __init__(self, max_backups: int = MAX_BACKUPS) -> None:
        if max_backups < 1:
            raise ValueError("max_backups must be at least 1")
        self.max_backups = max_backups

    def create_backup(self, path: Path) -> Optional[Path]:
        directory = path.is_dir()
        if not directory and not path.is_file():
            return None

        try:
            _discard(backup_path(path, self.max_backups, directory))
            for number in range(self.max_backups - 1, 0, -1):
                older = backup_path(path, number, directory)
                if older.exists():
                    older.replace(backup_path(path, number + 1, directory))
            target = backup_path(path, 1, directory)
            if directory:
                shutil.copytree(path, target, symlinks=True)
            else:
                shutil.copy2(path, target)
        except OSError as exc:
            raise BackupError(path, str(exc)) from exc

        logger.debug("backed up %s to %s", path, target)
        return target

    def list_backups(self, path: Path) -> list[Path]:
        found: list[Path] = []
        for number in range(1, self.max_backups + 1):
            for directory in (False, True):
                candidate = backup_path(path, number, directory)
                if candidate.exists():
                    found.append(candidate)
        return found
