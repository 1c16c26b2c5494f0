"""User preferences for toolkeeper itself, and wiring of the service graph.

Preferences live in ``$XDG_CONFIG_HOME/toolkeeper/config.json``. The file is
optional and read leniently: a missing file, a parse error or a bad value
falls back to the default for that key. ``TOOLKEEPER_*`` environment
variables override the file.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

from toolkeeper.adapters.base import AdapterId
from toolkeeper.adapters.claude_code import ClaudeCodeAdapter
from toolkeeper.adapters.codex import CodexAdapter
from toolkeeper.adapters.copilot import CopilotAdapter
from toolkeeper.adapters.registry import AdapterRegistry
from toolkeeper.backup import MAX_BACKUPS, BackupService
from toolkeeper.config_service import ConfigService
from toolkeeper.fileio import FileStore
from toolkeeper.models import ConfigScope
from toolkeeper.platform import home_dir
from toolkeeper.profiles import ProfileService
from toolkeeper.schema import SchemaService
from toolkeeper.scopes import DEFAULT_SCOPE_PRECEDENCE, ScopePolicy
from toolkeeper.tool_manager import ToolManagerService
from toolkeeper.toml_codec import TomlCodec

logger = logging.getLogger(__name__)

ENV_SCOPE_PRECEDENCE = "TOOLKEEPER_SCOPE_PRECEDENCE"
ENV_MAX_BACKUPS = "TOOLKEEPER_MAX_BACKUPS"
ENV_ADAPTER = "TOOLKEEPER_ADAPTER"
ENV_MANAGED_DIR = "TOOLKEEPER_MANAGED_DIR"
ENV_VSCODE_USER_DIR = "TOOLKEEPER_VSCODE_USER_DIR"


def settings_path(environ: Optional[Mapping[str, str]] = None) -> Path:
    env = os.environ if environ is None else environ
    base = env.get("XDG_CONFIG_HOME")
    root = Path(base).expanduser() if base else home_dir() / ".config"
    return root / "toolkeeper" / "config.json"


def profiles_path(environ: Optional[Mapping[str, str]] = None) -> Path:
    return settings_path(environ).parent / "profiles.json"


def _precedence(value: Any) -> Optional[tuple[ConfigScope, ...]]:
    if isinstance(value, str):
        value = [item for item in value.split(",") if item.strip()]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        return None
    try:
        return ScopePolicy.from_names(value).precedence
    except ValueError as exc:
        logger.warning("ignoring scope precedence %r: %s", value, exc)
        return None


def _max_backups(value: Any) -> Optional[int]:
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        return None
    return value


def _adapter(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    try:
        return AdapterId(value.strip().lower()).value
    except ValueError:
        logger.warning("ignoring unknown adapter %r", value)
        return None


def _directory(value: Any) -> Optional[Path]:
    if not isinstance(value, str) or not value.strip():
        return None
    return Path(value).expanduser()


@dataclass(frozen=True)
class Settings:
    scope_precedence: tuple[ConfigScope, ...] = field(
        default_factory=lambda: DEFAULT_SCOPE_PRECEDENCE
    )
    max_backups: int = MAX_BACKUPS
    active_adapter: Optional[str] = None
    managed_config_dir: Optional[Path] = None
    vscode_user_dir: Optional[Path] = None

    @classmethod
    def load(
        cls,
        path: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
        file_store: Optional[FileStore] = None,
    ) -> "Settings":
        env = os.environ if environ is None else environ
        config_path = path or settings_path(env)
        result = (file_store or FileStore()).read_json(config_path)
        payload: dict[str, Any] = {}
        if not result.success:
            logger.warning("ignoring %s: %s", config_path, result.error)
        elif isinstance(result.data, dict):
            payload = result.data

        raw = {
            "scope_precedence": payload.get("scopePrecedence"),
            "max_backups": payload.get("maxBackups"),
            "active_adapter": payload.get("activeAdapter"),
            "managed_config_dir": payload.get("managedConfigDir"),
            "vscode_user_dir": payload.get("vscodeUserDir"),
        }
        overrides = {
            "scope_precedence": ENV_SCOPE_PRECEDENCE,
            "max_backups": ENV_MAX_BACKUPS,
            "active_adapter": ENV_ADAPTER,
            "managed_config_dir": ENV_MANAGED_DIR,
            "vscode_user_dir": ENV_VSCODE_USER_DIR,
        }
        for key, env_name in overrides.items():
            if env.get(env_name):
                raw[key] = env[env_name]

        defaults = cls()
        return cls(
            scope_precedence=_precedence(raw["scope_precedence"]) or defaults.scope_precedence,
            max_backups=_max_backups(raw["max_backups"]) or defaults.max_backups,
            active_adapter=_adapter(raw["active_adapter"]),
            managed_config_dir=_directory(raw["managed_config_dir"]),
            vscode_user_dir=_directory(raw["vscode_user_dir"]),
        )

    @property
    def scope_policy(self) -> ScopePolicy:
        return ScopePolicy(precedence=self.scope_precedence)

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "scopePrecedence": [scope.value for scope in self.scope_precedence],
            "maxBackups": self.max_backups,
        }
        if self.active_adapter is not None:
            payload["activeAdapter"] = self.active_adapter
        if self.managed_config_dir is not None:
            payload["managedConfigDir"] = str(self.managed_config_dir)
        if self.vscode_user_dir is not None:
            payload["vscodeUserDir"] = str(self.vscode_user_dir)
        return payload


@dataclass(frozen=True)
class Services:
    file_store: FileStore
    backup: BackupService
    schemas: SchemaService
    registry: AdapterRegistry
    config_service: ConfigService
    tool_manager: ToolManagerService
    profiles: ProfileService


def build_services(
    settings: Settings,
    workspace_root: Optional[Path] = None,
    profiles_file: Optional[Path] = None,
) -> Services:
    file_store = FileStore(toml=TomlCodec())
    backup = BackupService(max_backups=settings.max_backups)
    schemas = SchemaService.create_default()
    registry = AdapterRegistry()
    config_service = ConfigService(
        file_store=file_store,
        backup=backup,
        schemas=schemas,
        registry=registry,
        scope_policy=settings.scope_policy,
    )

    registry.register(
        ClaudeCodeAdapter.create_default(
            config_service,
            workspace_root=workspace_root,
            managed_dir=settings.managed_config_dir,
        )
    )
    registry.register(CodexAdapter.create_default(config_service, workspace_root=workspace_root))
    registry.register(
        CopilotAdapter.create_default(
            config_service, workspace_root=workspace_root, user_dir=settings.vscode_user_dir
        )
    )
    if settings.active_adapter is not None:
        registry.set_active(settings.active_adapter)
    else:
        registry.detect_active()

    tool_manager = ToolManagerService(config_service, registry)
    return Services(
        file_store=file_store,
        backup=backup,
        schemas=schemas,
        registry=registry,
        config_service=config_service,
        tool_manager=tool_manager,
        profiles=ProfileService(config_service, tool_manager, profiles_file or profiles_path()),
    )
