from pathlib import Path
from typing import Optional

from toolkeeper.adapters.base import AdapterId, IPlatformAdapter
from toolkeeper.adapters.copilot import parsers, writers
from toolkeeper.adapters.copilot.paths import CopilotPaths
from toolkeeper.adapters.file_ops import copy_entry, remove_entry
from toolkeeper.config_service import ConfigService
from toolkeeper.errors import ManagedScopeError, UnsupportedToolKindError
from toolkeeper.models import ConfigScope, McpServerTool, Tool, ToolKind
from toolkeeper.platform import home_dir, vscode_user_dir
from toolkeeper.tool_actions import is_toggle_disable

EXTENSION_PREFIX = "github.copilot"


class CopilotAdapter(IPlatformAdapter):
    """GitHub Copilot in VS Code.

    Agents (``.github/agents/*.agent.md``) are read as skills and toggled
    through their ``user-invokable`` front matter. MCP servers cannot be
    toggled: ``mcp.json`` has no disabled state.
    """

    ADAPTER_ID = AdapterId.COPILOT
    DISPLAY_NAME = "GitHub Copilot"
    SUPPORTED_KINDS = frozenset({ToolKind.SKILL, ToolKind.MCP_SERVER, ToolKind.CUSTOM_PROMPT})

    def __init__(self, paths: CopilotPaths, config_service: ConfigService) -> None:
        self.paths = paths
        self.config_service = config_service

    @classmethod
    def create_default(
        cls,
        config_service: ConfigService,
        workspace_root: Optional[Path] = None,
        user_dir: Optional[Path] = None,
    ) -> "CopilotAdapter":
        paths = CopilotPaths(
            vscode_user_dir=user_dir or vscode_user_dir(),
            home=home_dir(),
            workspace_root=workspace_root,
        )
        return cls(paths=paths, config_service=config_service)

    def read_tools(self, kind: ToolKind, scope: ConfigScope) -> list[Tool]:
        file_store = self.config_service.file_store
        if kind == ToolKind.MCP_SERVER and scope == ConfigScope.USER:
            return parsers.parse_mcp_json(
                file_store, self.config_service.schemas, self.paths.mcp_json(scope), scope
            )
        if scope != ConfigScope.PROJECT or self.paths.workspace_root is None:
            return []

        if kind == ToolKind.MCP_SERVER:
            return parsers.parse_mcp_json(
                file_store, self.config_service.schemas, self.paths.mcp_json(scope), scope
            )
        if kind == ToolKind.SKILL:
            return parsers.parse_agents_dir(file_store, self.paths.agents_dir(scope), scope)
        if kind == ToolKind.CUSTOM_PROMPT:
            return [
                *parsers.parse_prompts_dir(file_store, self.paths.prompts_dir(scope), scope),
                *parsers.parse_instructions(
                    file_store,
                    self.paths.global_instructions(scope),
                    self.paths.instructions_dir(scope),
                    scope,
                ),
            ]
        return []

    def write_tool(self, tool: Tool, scope: ConfigScope) -> None:
        if scope == ConfigScope.MANAGED:
            raise ManagedScopeError("write")

        if isinstance(tool, McpServerTool):
            writers.add_mcp_server(
                self.config_service, self.paths.mcp_json(scope), tool.name, tool.server_config()
            )
        elif tool.kind == ToolKind.SKILL:
            entry = tool.source.file_path
            copy_entry(self.config_service.backup, entry, self.paths.agents_dir(scope) / entry.name)
        elif tool.kind == ToolKind.CUSTOM_PROMPT:
            entry = tool.source.file_path
            target_dir = (
                self.paths.instructions_dir(scope)
                if tool.id.startswith("instruction:")
                else self.paths.prompts_dir(scope)
            )
            copy_entry(self.config_service.backup, entry, target_dir / entry.name)
        else:
            raise UnsupportedToolKindError(self.display_name, tool.kind.value, "write")

    def remove_tool(self, tool: Tool) -> None:
        if tool.scope == ConfigScope.MANAGED:
            raise ManagedScopeError("remove")

        if isinstance(tool, McpServerTool):
            writers.remove_mcp_server(
                self.config_service, self.paths.mcp_json(tool.scope), tool.name
            )
        elif tool.kind in (ToolKind.SKILL, ToolKind.CUSTOM_PROMPT):
            remove_entry(self.config_service.backup, tool.source.file_path)
        else:
            raise UnsupportedToolKindError(self.display_name, tool.kind.value, "remove")

    def toggle_tool(self, tool: Tool) -> None:
        if tool.scope == ConfigScope.MANAGED:
            raise ManagedScopeError("modify")

        if tool.kind != ToolKind.SKILL:
            raise UnsupportedToolKindError(self.display_name, tool.kind.value, "toggle")
        writers.toggle_agent(self.config_service, tool.source.file_path, is_toggle_disable(tool))

    def detect(self) -> bool:
        extensions = self.paths.extensions_dir
        return any(
            name.lower().startswith(EXTENSION_PREFIX)
            for name in self.config_service.file_store.list_directories(extensions)
        )
