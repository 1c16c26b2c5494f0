from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from toolkeeper.errors import ScopeNotSupportedError
from toolkeeper.models import ConfigScope

DISPLAY_NAME = "Codex"
CONFIG_SCHEMA = "codex-config"


@dataclass(frozen=True)
class CodexPaths:
    """Codex keeps MCP servers inside ``config.toml``; there is no separate MCP file."""

    home: Path
    workspace_root: Optional[Path] = None

    @property
    def user_codex_dir(self) -> Path:
        return self.home / ".codex"

    def codex_dir(self, scope: ConfigScope, operation: str) -> Path:
        if scope == ConfigScope.USER:
            return self.user_codex_dir
        if scope != ConfigScope.PROJECT:
            raise ScopeNotSupportedError(DISPLAY_NAME, scope.value, operation)
        if self.workspace_root is None:
            raise ScopeNotSupportedError(
                DISPLAY_NAME, scope.value, f"{operation} (no workspace open)"
            )
        return self.workspace_root / ".codex"

    def config_toml(self, scope: ConfigScope) -> Path:
        return self.codex_dir(scope, "config") / "config.toml"

    def skills_dir(self, scope: ConfigScope) -> Path:
        return self.codex_dir(scope, "skills") / "skills"

    def prompts_dir(self, scope: ConfigScope) -> Path:
        return self.codex_dir(scope, "prompts") / "prompts"
