from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from toolkeeper.errors import ScopeNotSupportedError
from toolkeeper.models import ConfigScope

DISPLAY_NAME = "Claude Code"


@dataclass(frozen=True)
class McpFile:
    path: Path
    schema_kind: str


@dataclass(frozen=True)
class ClaudeCodePaths:
    home: Path
    managed_dir: Path
    workspace_root: Optional[Path] = None

    @property
    def user_claude_dir(self) -> Path:
        return self.home / ".claude"

    @property
    def user_settings_json(self) -> Path:
        return self.user_claude_dir / "settings.json"

    @property
    def user_claude_json(self) -> Path:
        return self.home / ".claude.json"

    @property
    def user_skills_dir(self) -> Path:
        return self.user_claude_dir / "skills"

    @property
    def user_commands_dir(self) -> Path:
        return self.user_claude_dir / "commands"

    @property
    def managed_settings_json(self) -> Path:
        return self.managed_dir / "managed-settings.json"

    @property
    def managed_mcp_json(self) -> Path:
        return self.managed_dir / "managed-mcp.json"

    def project_dir(self, operation: str) -> Path:
        if self.workspace_root is None:
            raise ScopeNotSupportedError(
                DISPLAY_NAME, ConfigScope.PROJECT.value, f"{operation} (no workspace open)"
            )
        return self.workspace_root / ".claude"

    def skills_dir(self, scope: ConfigScope) -> Path:
        if scope == ConfigScope.USER:
            return self.user_skills_dir
        if scope == ConfigScope.PROJECT:
            return self.project_dir("skills") / "skills"
        raise ScopeNotSupportedError(DISPLAY_NAME, scope.value, "skills")

    def commands_dir(self, scope: ConfigScope) -> Path:
        if scope == ConfigScope.USER:
            return self.user_commands_dir
        if scope == ConfigScope.PROJECT:
            return self.project_dir("commands") / "commands"
        raise ScopeNotSupportedError(DISPLAY_NAME, scope.value, "commands")

    def settings_path(self, scope: ConfigScope) -> Path:
        if scope == ConfigScope.USER:
            return self.user_settings_json
        if scope == ConfigScope.PROJECT:
            return self.project_dir("settings") / "settings.json"
        if scope == ConfigScope.LOCAL:
            return self.project_dir("settings") / "settings.local.json"
        return self.managed_settings_json

    def mcp_file(self, scope: ConfigScope) -> McpFile:
        if scope == ConfigScope.USER:
            return McpFile(self.user_claude_json, "claude-json")
        if scope == ConfigScope.PROJECT:
            root = self.project_dir("mcp servers").parent
            return McpFile(root / ".mcp.json", "mcp-file")
        if scope == ConfigScope.MANAGED:
            return McpFile(self.managed_mcp_json, "mcp-file")
        raise ScopeNotSupportedError(DISPLAY_NAME, scope.value, "mcp servers")
