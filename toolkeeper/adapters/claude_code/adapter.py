import logging
from pathlib import Path
from typing import Optional

from toolkeeper.adapters.base import AdapterId, IPlatformAdapter
from toolkeeper.adapters.claude_code import parsers, writers
from toolkeeper.adapters.claude_code.paths import ClaudeCodePaths
from toolkeeper.adapters.file_ops import copy_entry, remove_entry, toggle_entry
from toolkeeper.adapters.markdown_tools import parse_commands_dir, parse_skills_dir
from toolkeeper.config_service import ConfigService
from toolkeeper.errors import ManagedScopeError, UnsupportedToolKindError
from toolkeeper.fileio import FileStore
from toolkeeper.models import ConfigScope, HookTool, McpServerTool, Tool, ToolKind
from toolkeeper.platform import home_dir, managed_config_dir
from toolkeeper.schema import SchemaService
from toolkeeper.tool_actions import is_toggle_disable

logger = logging.getLogger(__name__)

_WORKSPACE_SCOPES = {ConfigScope.PROJECT, ConfigScope.LOCAL}


class ClaudeCodeAdapter(IPlatformAdapter):
    ADAPTER_ID = AdapterId.CLAUDE_CODE
    DISPLAY_NAME = "Claude Code"
    SUPPORTED_KINDS = frozenset(
        {ToolKind.SKILL, ToolKind.MCP_SERVER, ToolKind.HOOK, ToolKind.COMMAND}
    )

    def __init__(self, paths: ClaudeCodePaths, config_service: ConfigService) -> None:
        self.paths = paths
        self.config_service = config_service

    @classmethod
    def create_default(
        cls,
        config_service: ConfigService,
        workspace_root: Optional[Path] = None,
        managed_dir: Optional[Path] = None,
    ) -> "ClaudeCodeAdapter":
        paths = ClaudeCodePaths(
            home=home_dir(),
            managed_dir=managed_dir or managed_config_dir(),
            workspace_root=workspace_root,
        )
        return cls(paths=paths, config_service=config_service)

    @property
    def file_store(self) -> FileStore:
        return self.config_service.file_store

    @property
    def schemas(self) -> SchemaService:
        return self.config_service.schemas

    def read_tools(self, kind: ToolKind, scope: ConfigScope) -> list[Tool]:
        if scope in _WORKSPACE_SCOPES and self.paths.workspace_root is None:
            return []

        if kind == ToolKind.SKILL and scope in (ConfigScope.USER, ConfigScope.PROJECT):
            return parse_skills_dir(self.file_store, self.schemas, self.paths.skills_dir(scope), scope)
        if kind == ToolKind.COMMAND and scope in (ConfigScope.USER, ConfigScope.PROJECT):
            return parse_commands_dir(
                self.file_store, self.schemas, self.paths.commands_dir(scope), scope
            )
        if kind == ToolKind.HOOK:
            return parsers.parse_settings_file(
                self.file_store, self.schemas, self.paths.settings_path(scope), scope
            )
        if kind == ToolKind.MCP_SERVER and scope != ConfigScope.LOCAL:
            mcp_file = self.paths.mcp_file(scope)
            disabled = parsers.read_disabled_mcp_servers(
                self.file_store, self.schemas, self.paths.settings_path(scope)
            )
            return parsers.parse_mcp_file(
                self.file_store, self.schemas, mcp_file.path, scope, mcp_file.schema_kind, disabled
            )
        return []

    def write_tool(self, tool: Tool, scope: ConfigScope) -> None:
        if scope == ConfigScope.MANAGED:
            raise ManagedScopeError("write")

        if isinstance(tool, McpServerTool):
            mcp_file = self.paths.mcp_file(scope)
            server = tool.server_config()
            if tool.is_disabled:
                server["disabled"] = True
            writers.add_mcp_server(
                self.config_service, mcp_file.path, mcp_file.schema_kind, tool.name, server
            )
        elif isinstance(tool, HookTool):
            writers.add_hook(
                self.config_service,
                self.paths.settings_path(scope),
                tool.event_name,
                tool.matcher_group(),
                stashed=tool.stashed,
            )
        elif tool.kind == ToolKind.SKILL:
            entry = tool.source.entry_path
            copy_entry(self.config_service.backup, entry, self.paths.skills_dir(scope) / entry.name)
        elif tool.kind == ToolKind.COMMAND:
            source_dir = self.paths.commands_dir(tool.scope)
            entry = tool.source.file_path
            try:
                relative = entry.relative_to(source_dir)
            except ValueError:
                relative = Path(entry.name)
            copy_entry(self.config_service.backup, entry, self.paths.commands_dir(scope) / relative)
        else:
            raise UnsupportedToolKindError(self.display_name, tool.kind.value, "write")

    def remove_tool(self, tool: Tool) -> None:
        if tool.scope == ConfigScope.MANAGED:
            raise ManagedScopeError("remove")

        if isinstance(tool, McpServerTool):
            mcp_file = self.paths.mcp_file(tool.scope)
            writers.remove_mcp_server(
                self.config_service, mcp_file.path, mcp_file.schema_kind, tool.name
            )
        elif isinstance(tool, HookTool):
            writers.remove_hook(
                self.config_service,
                tool.source.file_path,
                tool.event_name,
                tool.index,
                stashed=tool.stashed,
            )
        elif tool.kind in (ToolKind.SKILL, ToolKind.COMMAND):
            remove_entry(self.config_service.backup, tool.source.entry_path)
        else:
            raise UnsupportedToolKindError(self.display_name, tool.kind.value, "remove")

    def toggle_tool(self, tool: Tool) -> None:
        if tool.scope == ConfigScope.MANAGED:
            raise ManagedScopeError("modify")

        disable = is_toggle_disable(tool)
        if isinstance(tool, McpServerTool):
            mcp_file = self.paths.mcp_file(tool.scope)
            writers.toggle_mcp_server(
                self.config_service, mcp_file.path, mcp_file.schema_kind, tool.name, disable
            )
            if not disable:
                self._unlist_disabled_server(tool)
        elif isinstance(tool, HookTool):
            writers.toggle_hook(
                self.config_service, tool.source.file_path, tool.event_name, tool.index, disable
            )
        elif tool.kind in (ToolKind.SKILL, ToolKind.COMMAND):
            toggle_entry(tool, disable)
        else:
            raise UnsupportedToolKindError(self.display_name, tool.kind.value, "toggle")

    def detect(self) -> bool:
        return self.file_store.exists(self.paths.user_claude_dir) or self.file_store.exists(
            self.paths.user_claude_json
        )

    def _unlist_disabled_server(self, tool: McpServerTool) -> None:
        settings_path = self.paths.settings_path(tool.scope)
        listed = parsers.read_disabled_mcp_servers(self.file_store, self.schemas, settings_path)
        if tool.name in listed:
            writers.unlist_disabled_mcp_server(self.config_service, settings_path, tool.name)
            logger.info("removed %s from disabledMcpServers in %s", tool.name, settings_path)
