from pathlib import Path
from typing import Any, Iterable

from toolkeeper.fileio import FileStore
from toolkeeper.models import (
    ConfigScope,
    HookTool,
    McpServerTool,
    Tool,
    ToolKind,
    ToolStatus,
    ToolSource,
    error_tool,
)
from toolkeeper.overlay import ACTIVE_KEY, LEGACY_DISABLED_MARKER, STASH_KEY
from toolkeeper.schema import SchemaService

SETTINGS_SCHEMA = "settings-file"

# Fields the MCP model owns; everything else is carried through moves untouched.
_MCP_OWNED_FIELDS = {"command", "args", "env", "url", "disabled"}


def _load(
    file_store: FileStore, schemas: SchemaService, path: Path, schema_kind: str
) -> tuple[dict[str, Any] | None, str | None]:
    result = file_store.read_json(path)
    if not result.success:
        return None, result.error or "unknown error"
    if result.data is None:
        return None, None

    validation = schemas.validate(schema_kind, result.data)
    if not validation.success:
        return None, validation.message
    return result.data, None


def _config_error(kind: ToolKind, label: str, path: Path, scope: ConfigScope, detail: str) -> Tool:
    prefix = "mcp-error" if kind == ToolKind.MCP_SERVER else "settings-error"
    return error_tool(
        kind,
        tool_id=f"{prefix}:{scope.value}:{path}",
        name=f"{label} ({scope.value})",
        scope=scope,
        detail=detail,
        file_path=path,
    )


def mcp_server_tool(
    name: str, config: dict[str, Any], scope: ConfigScope, path: Path, disabled: bool
) -> McpServerTool:
    return McpServerTool(
        id=f"mcp:{scope.value}:{name}",
        name=name,
        scope=scope,
        status=ToolStatus.DISABLED if disabled else ToolStatus.ENABLED,
        source=ToolSource(file_path=path),
        command=config.get("command"),
        args=list(config.get("args") or []),
        env=dict(config.get("env") or {}),
        transport=config.get("transport") or config.get("type"),
        url=config.get("url"),
        extra={key: value for key, value in config.items() if key not in _MCP_OWNED_FIELDS},
    )


def parse_mcp_file(
    file_store: FileStore,
    schemas: SchemaService,
    path: Path,
    scope: ConfigScope,
    schema_kind: str,
    disabled_servers: Iterable[str] = (),
) -> list[Tool]:
    """Servers from ``.mcp.json``, ``~/.claude.json`` or ``managed-mcp.json``."""
    data, error = _load(file_store, schemas, path, schema_kind)
    if error is not None:
        return [_config_error(ToolKind.MCP_SERVER, "MCP config error", path, scope, error)]
    if data is None:
        return []

    disabled = set(disabled_servers)
    servers = data.get("mcpServers") or {}
    return [
        mcp_server_tool(
            name,
            config,
            scope,
            path,
            disabled=name in disabled or config.get("disabled") is True,
        )
        for name, config in servers.items()
    ]


def read_disabled_mcp_servers(
    file_store: FileStore, schemas: SchemaService, path: Path
) -> list[str]:
    """Names listed in a settings file's ``disabledMcpServers``; [] when unusable."""
    data, error = _load(file_store, schemas, path, SETTINGS_SCHEMA)
    if error is not None or data is None:
        return []
    return list(data.get("disabledMcpServers") or [])


def _hook_tool(
    group: dict[str, Any],
    event_name: str,
    index: int,
    scope: ConfigScope,
    path: Path,
    stashed: bool,
) -> HookTool:
    matcher = group.get("matcher") or ""
    status = ToolStatus.DISABLED if stashed else ToolStatus.ENABLED
    detail = None
    if not stashed and LEGACY_DISABLED_MARKER in group:
        status = ToolStatus.WARNING
        detail = f'Ignored "{LEGACY_DISABLED_MARKER}" marker; the hook still runs'

    return HookTool(
        id=f"{'hook-stashed' if stashed else 'hook'}:{scope.value}:{event_name}:{index}",
        name=f"{event_name} ({matcher})" if matcher else event_name,
        scope=scope,
        status=status,
        status_detail=detail,
        source=ToolSource(file_path=path),
        event_name=event_name,
        matcher=matcher,
        hooks=[dict(item) for item in group.get("hooks") or []],
        index=index,
        stashed=stashed,
    )


def parse_settings_file(
    file_store: FileStore, schemas: SchemaService, path: Path, scope: ConfigScope
) -> list[Tool]:
    """Hooks from ``hooks`` (enabled) and the ``_disabledHooks`` stash (disabled)."""
    data, error = _load(file_store, schemas, path, SETTINGS_SCHEMA)
    if error is not None:
        return [_config_error(ToolKind.HOOK, "Settings error", path, scope, error)]
    if data is None:
        return []

    tools: list[Tool] = []
    for key, stashed in ((ACTIVE_KEY, False), (STASH_KEY, True)):
        for event_name, groups in (data.get(key) or {}).items():
            for index, group in enumerate(groups):
                tools.append(_hook_tool(group, event_name, index, scope, path, stashed))
    return tools
