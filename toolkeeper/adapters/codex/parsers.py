from pathlib import Path
from typing import Any

from toolkeeper.adapters.codex.paths import CONFIG_SCHEMA
from toolkeeper.fileio import FileStore
from toolkeeper.models import (
    ConfigScope,
    McpServerTool,
    Tool,
    ToolKind,
    ToolSource,
    ToolStatus,
    error_tool,
)
from toolkeeper.schema import SchemaService

_OWNED_FIELDS = {"command", "args", "env", "url", "enabled", "enabled_tools", "disabled_tools"}


def _server_tool(name: str, config: dict[str, Any], scope: ConfigScope, path: Path) -> McpServerTool:
    # Codex inverts the flag: absent or true means enabled.
    enabled = config.get("enabled", True) is not False
    return McpServerTool(
        id=f"mcp:codex:{scope.value}:{name}",
        name=name,
        scope=scope,
        status=ToolStatus.ENABLED if enabled else ToolStatus.DISABLED,
        source=ToolSource(file_path=path),
        command=config.get("command"),
        args=list(config.get("args") or []),
        env=dict(config.get("env") or {}),
        transport="http" if config.get("url") else "stdio",
        url=config.get("url"),
        enabled_tools=config.get("enabled_tools"),
        disabled_tools=config.get("disabled_tools"),
        extra={key: value for key, value in config.items() if key not in _OWNED_FIELDS},
    )


def parse_config_mcp_servers(
    file_store: FileStore, schemas: SchemaService, path: Path, scope: ConfigScope
) -> list[Tool]:
    result = file_store.read_toml(path)
    detail = result.error
    if result.success and result.data is not None:
        validation = schemas.validate(CONFIG_SCHEMA, result.data)
        detail = None if validation.success else validation.message

    if detail is not None:
        return [
            error_tool(
                ToolKind.MCP_SERVER,
                tool_id=f"mcp-error:codex:{scope.value}:{path}",
                name=f"Codex config error ({scope.value})",
                scope=scope,
                detail=detail,
                file_path=path,
            )
        ]
    if result.data is None:
        return []

    servers = result.data.get("mcp_servers") or {}
    return [_server_tool(name, config, scope, path) for name, config in servers.items()]
