from pathlib import Path
from typing import Iterable


class ToolkeeperError(Exception):
    """Base user-facing application error."""


class ConfigFileError(ToolkeeperError):
    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"{message}: {path}")


class ConfigReadError(ConfigFileError):
    def __init__(self, path: Path, detail: str) -> None:
        self.detail = detail
        super().__init__(path=path, message=f"Failed to read config ({detail})")


class ConfigFileNotFoundError(ConfigFileError):
    def __init__(self, path: Path) -> None:
        super().__init__(path=path, message="Missing required config file")


class ConfigValidationError(ConfigFileError):
    def __init__(self, path: Path, kind: str, issues: Iterable[str]) -> None:
        self.kind = kind
        self.issues = list(issues)
        joined = "; ".join(self.issues) or "unknown validation error"
        super().__init__(
            path=path, message=f"Schema validation failed for {kind} ({joined})"
        )


class ConfigEntryNotFoundError(ConfigFileError):
    def __init__(self, path: Path, entry: str) -> None:
        self.entry = entry
        super().__init__(path=path, message=f"No entry \"{entry}\" in config")


class BackupError(ConfigFileError):
    def __init__(self, path: Path, detail: str) -> None:
        self.detail = detail
        super().__init__(path=path, message=f"Backup failed ({detail})")


class OverlayIndexError(ToolkeeperError):
    def __init__(self, container: str, event_name: str, index: int) -> None:
        self.container = container
        self.event_name = event_name
        self.index = index
        super().__init__(
            f"No matcher group at index {index} for {event_name} in {container}"
        )


class PolicyError(ToolkeeperError):
    """Operation refused by scope policy rather than by a data or I/O problem."""


class ManagedScopeError(PolicyError):
    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Cannot {operation} managed tools (read-only scope)")


class AdapterError(ToolkeeperError):
    def __init__(self, adapter: str, message: str) -> None:
        self.adapter = adapter
        super().__init__(f"{adapter}: {message}")


class ScopeNotSupportedError(AdapterError):
    def __init__(self, adapter: str, scope: str, operation: str) -> None:
        self.scope = scope
        super().__init__(adapter, f'scope "{scope}" is not supported for {operation}')


class UnsupportedToolKindError(AdapterError):
    def __init__(self, adapter: str, kind: str, operation: str) -> None:
        self.kind = kind
        super().__init__(adapter, f'tool kind "{kind}" is not supported for {operation}')


class NoActiveAdapterError(ToolkeeperError):
    def __init__(self) -> None:
        super().__init__("No active platform adapter")


class ProfileError(ToolkeeperError):
    """A profile is missing, duplicated or belongs to another agent."""
