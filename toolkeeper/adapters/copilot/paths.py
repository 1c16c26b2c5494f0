from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from toolkeeper.errors import ScopeNotSupportedError
from toolkeeper.models import ConfigScope

DISPLAY_NAME = "GitHub Copilot"
MCP_SCHEMA = "copilot-mcp"

AGENT_SUFFIX = ".agent.md"
PROMPT_SUFFIX = ".prompt.md"
INSTRUCTIONS_SUFFIX = ".instructions.md"
GLOBAL_INSTRUCTIONS = "copilot-instructions"


@dataclass(frozen=True)
class CopilotPaths:
    """MCP servers live in VS Code's ``mcp.json``; everything else under ``.github/``.

    Only MCP servers have a user scope. Agents, prompts and instructions are
    workspace files.
    """

    vscode_user_dir: Path
    home: Path
    workspace_root: Optional[Path] = None

    @property
    def extensions_dir(self) -> Path:
        return self.home / ".vscode" / "extensions"

    def _workspace(self, scope: ConfigScope, operation: str) -> Path:
        if scope != ConfigScope.PROJECT:
            raise ScopeNotSupportedError(DISPLAY_NAME, scope.value, operation)
        if self.workspace_root is None:
            raise ScopeNotSupportedError(
                DISPLAY_NAME, scope.value, f"{operation} (no workspace open)"
            )
        return self.workspace_root

    def mcp_json(self, scope: ConfigScope) -> Path:
        if scope == ConfigScope.USER:
            return self.vscode_user_dir / "mcp.json"
        return self._workspace(scope, "mcp") / ".vscode" / "mcp.json"

    def github_dir(self, scope: ConfigScope, operation: str) -> Path:
        return self._workspace(scope, operation) / ".github"

    def agents_dir(self, scope: ConfigScope) -> Path:
        return self.github_dir(scope, "agents") / "agents"

    def prompts_dir(self, scope: ConfigScope) -> Path:
        return self.github_dir(scope, "prompts") / "prompts"

    def instructions_dir(self, scope: ConfigScope) -> Path:
        return self.github_dir(scope, "instructions") / "instructions"

    def global_instructions(self, scope: ConfigScope) -> Path:
        return self.github_dir(scope, "instructions") / f"{GLOBAL_INSTRUCTIONS}.md"
