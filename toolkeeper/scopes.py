from dataclasses import dataclass, field
from typing import Iterable, Sequence

from toolkeeper.models import ConfigScope, HookTool, Tool, ToolKind

DEFAULT_SCOPE_PRECEDENCE: tuple[ConfigScope, ...] = (
    ConfigScope.LOCAL,
    ConfigScope.PROJECT,
    ConfigScope.USER,
    ConfigScope.MANAGED,
)

APPLICABLE_SCOPES: dict[ToolKind, tuple[ConfigScope, ...]] = {
    ToolKind.SKILL: (ConfigScope.USER, ConfigScope.PROJECT),
    ToolKind.COMMAND: (ConfigScope.USER, ConfigScope.PROJECT),
    ToolKind.CUSTOM_PROMPT: (ConfigScope.USER, ConfigScope.PROJECT),
    ToolKind.HOOK: (
        ConfigScope.USER,
        ConfigScope.PROJECT,
        ConfigScope.LOCAL,
        ConfigScope.MANAGED,
    ),
    ToolKind.MCP_SERVER: (ConfigScope.USER, ConfigScope.PROJECT, ConfigScope.MANAGED),
}


def is_read_only(scope: ConfigScope) -> bool:
    return scope == ConfigScope.MANAGED


def canonical_key(tool: Tool) -> str:
    """Cross-scope identity: ``hook:{event}:{matcher}`` or ``{kind}:{name}``."""
    if isinstance(tool, HookTool) and tool.event_name:
        return f"{ToolKind.HOOK.value}:{tool.event_name}:{tool.matcher or ''}"
    return f"{tool.kind.value}:{tool.name}"


@dataclass(frozen=True)
class ScopePolicy:
    """Total order over scopes, most specific (winning) first."""

    precedence: tuple[ConfigScope, ...] = field(
        default_factory=lambda: DEFAULT_SCOPE_PRECEDENCE
    )

    def __post_init__(self) -> None:
        if len(set(self.precedence)) != len(self.precedence):
            raise ValueError("scope precedence must not repeat a scope")
        missing = set(ConfigScope) - set(self.precedence)
        if missing:
            names = ", ".join(sorted(scope.value for scope in missing))
            raise ValueError(f"scope precedence is missing: {names}")

    @classmethod
    def from_names(cls, names: Iterable[str]) -> "ScopePolicy":
        scopes: list[ConfigScope] = []
        for name in names:
            try:
                scopes.append(ConfigScope(name.strip().lower()))
            except ValueError as exc:
                raise ValueError(f"Unknown scope: {name}") from exc
        return cls(precedence=tuple(scopes))

    def rank(self, scope: ConfigScope) -> int:
        return self.precedence.index(scope)

    def sort(self, tools: Iterable[Tool]) -> list[Tool]:
        return sorted(tools, key=lambda tool: self.rank(tool.scope))

    def winner(self, tools: Sequence[Tool]) -> Tool:
        return min(tools, key=lambda tool: self.rank(tool.scope))

    def names(self) -> list[str]:
        return [scope.value for scope in self.precedence]
