from pathlib import Path
from typing import Optional

from toolkeeper.adapters.base import AdapterId, IPlatformAdapter
from toolkeeper.adapters.codex import parsers, writers
from toolkeeper.adapters.codex.paths import CodexPaths
from toolkeeper.adapters.file_ops import copy_entry, remove_entry, toggle_entry
from toolkeeper.adapters.markdown_tools import parse_prompts_dir, parse_skills_dir
from toolkeeper.config_service import ConfigService
from toolkeeper.errors import ManagedScopeError, UnsupportedToolKindError
from toolkeeper.models import ConfigScope, McpServerTool, Tool, ToolKind
from toolkeeper.platform import home_dir
from toolkeeper.tool_actions import is_toggle_disable

_READABLE_SCOPES = {ConfigScope.USER, ConfigScope.PROJECT}


class CodexAdapter(IPlatformAdapter):
    ADAPTER_ID = AdapterId.CODEX
    DISPLAY_NAME = "Codex"
    SUPPORTED_KINDS = frozenset({ToolKind.SKILL, ToolKind.MCP_SERVER, ToolKind.CUSTOM_PROMPT})

    def __init__(self, paths: CodexPaths, config_service: ConfigService) -> None:
        self.paths = paths
        self.config_service = config_service

    @classmethod
    def create_default(
        cls, config_service: ConfigService, workspace_root: Optional[Path] = None
    ) -> "CodexAdapter":
        return cls(
            paths=CodexPaths(home=home_dir(), workspace_root=workspace_root),
            config_service=config_service,
        )

    def read_tools(self, kind: ToolKind, scope: ConfigScope) -> list[Tool]:
        if scope not in _READABLE_SCOPES:
            return []
        if scope == ConfigScope.PROJECT and self.paths.workspace_root is None:
            return []

        file_store = self.config_service.file_store
        schemas = self.config_service.schemas
        if kind == ToolKind.MCP_SERVER:
            return parsers.parse_config_mcp_servers(
                file_store, schemas, self.paths.config_toml(scope), scope
            )
        if kind == ToolKind.SKILL:
            return parse_skills_dir(file_store, schemas, self.paths.skills_dir(scope), scope)
        if kind == ToolKind.CUSTOM_PROMPT:
            return parse_prompts_dir(
                file_store, self.paths.prompts_dir(scope), scope, self.adapter_id
            )
        return []

    def write_tool(self, tool: Tool, scope: ConfigScope) -> None:
        if scope == ConfigScope.MANAGED:
            raise ManagedScopeError("write")

        if isinstance(tool, McpServerTool):
            server = tool.server_config()
            if tool.is_disabled:
                server["enabled"] = False
            writers.add_mcp_server(
                self.config_service, self.paths.config_toml(scope), tool.name, server
            )
        elif tool.kind == ToolKind.SKILL:
            entry = tool.source.entry_path
            copy_entry(self.config_service.backup, entry, self.paths.skills_dir(scope) / entry.name)
        elif tool.kind == ToolKind.CUSTOM_PROMPT:
            entry = tool.source.file_path
            copy_entry(self.config_service.backup, entry, self.paths.prompts_dir(scope) / entry.name)
        else:
            raise UnsupportedToolKindError(self.display_name, tool.kind.value, "write")

    def remove_tool(self, tool: Tool) -> None:
        if tool.scope == ConfigScope.MANAGED:
            raise ManagedScopeError("remove")

        if isinstance(tool, McpServerTool):
            writers.remove_mcp_server(
                self.config_service, self.paths.config_toml(tool.scope), tool.name
            )
        elif tool.kind in (ToolKind.SKILL, ToolKind.CUSTOM_PROMPT):
            remove_entry(self.config_service.backup, tool.source.entry_path)
        else:
            raise UnsupportedToolKindError(self.display_name, tool.kind.value, "remove")

    def toggle_tool(self, tool: Tool) -> None:
        if tool.scope == ConfigScope.MANAGED:
            raise ManagedScopeError("modify")

        if isinstance(tool, McpServerTool):
            writers.toggle_mcp_server(
                self.config_service,
                self.paths.config_toml(tool.scope),
                tool.name,
                is_toggle_disable(tool),
            )
        elif tool.kind == ToolKind.SKILL:
            toggle_entry(tool, is_toggle_disable(tool))
        else:
            raise UnsupportedToolKindError(self.display_name, tool.kind.value, "toggle")

    def detect(self) -> bool:
        return self.config_service.file_store.exists(self.paths.user_codex_dir)
