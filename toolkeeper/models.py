from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, ClassVar, Generic, Optional, TypeVar

T = TypeVar("T")


class ToolKind(str, Enum):
    SKILL = "skill"
    MCP_SERVER = "mcp_server"
    HOOK = "hook"
    COMMAND = "command"
    CUSTOM_PROMPT = "custom_prompt"


class ConfigScope(str, Enum):
    USER = "user"
    PROJECT = "project"
    LOCAL = "local"
    MANAGED = "managed"


class ToolStatus(str, Enum):
    ENABLED = "enabled"
    DISABLED = "disabled"
    WARNING = "warning"
    ERROR = "error"


DISABLED_SUFFIX = ".disabled"


@dataclass(frozen=True)
class ToolSource:
    file_path: Path
    is_directory: bool = False
    directory_path: Optional[Path] = None

    @property
    def entry_path(self) -> Path:
        """Path that is renamed, copied or deleted as a unit."""
        if self.is_directory and self.directory_path is not None:
            return self.directory_path
        return self.file_path

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"filePath": str(self.file_path)}
        if self.is_directory:
            payload["isDirectory"] = True
        if self.directory_path is not None:
            payload["directoryPath"] = str(self.directory_path)
        return payload


@dataclass(frozen=True)
class ScopeEntry:
    scope: ConfigScope
    status: ToolStatus
    file_path: Path

    def as_dict(self) -> dict[str, str]:
        return {
            "scope": self.scope.value,
            "status": self.status.value,
            "filePath": str(self.file_path),
        }


@dataclass(frozen=True)
class Tool:
    kind: ClassVar[ToolKind]

    id: str
    name: str
    scope: ConfigScope
    status: ToolStatus
    source: ToolSource
    description: Optional[str] = None
    status_detail: Optional[str] = None
    scope_entries: tuple[ScopeEntry, ...] = ()
    effective: bool = False

    @property
    def metadata(self) -> dict[str, Any]:
        return {}

    @property
    def is_disabled(self) -> bool:
        return self.status == ToolStatus.DISABLED

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "type": self.kind.value,
            "name": self.name,
            "scope": self.scope.value,
            "status": self.status.value,
            "source": self.source.as_dict(),
            "metadata": {
                key: value
                for key, value in self.metadata.items()
                if value is not None
            },
        }
        if self.description is not None:
            payload["description"] = self.description
        if self.status_detail is not None:
            payload["statusDetail"] = self.status_detail
        if self.scope_entries:
            payload["scopeEntries"] = [entry.as_dict() for entry in self.scope_entries]
        return payload


@dataclass(frozen=True)
class SkillTool(Tool):
    kind: ClassVar[ToolKind] = ToolKind.SKILL

    allowed_tools: Optional[str] = None
    model: Optional[str] = None
    body: Optional[str] = None

    @property
    def metadata(self) -> dict[str, Any]:
        return {
            "allowedTools": self.allowed_tools,
            "model": self.model,
            "body": self.body,
        }


@dataclass(frozen=True)
class CommandTool(Tool):
    kind: ClassVar[ToolKind] = ToolKind.COMMAND

    argument_hint: Optional[str] = None
    model: Optional[str] = None
    allowed_tools: Optional[str] = None
    body: Optional[str] = None

    @property
    def metadata(self) -> dict[str, Any]:
        return {
            "argumentHint": self.argument_hint,
            "model": self.model,
            "allowedTools": self.allowed_tools,
            "body": self.body,
        }


@dataclass(frozen=True)
class McpServerTool(Tool):
    kind: ClassVar[ToolKind] = ToolKind.MCP_SERVER

    command: Optional[str] = None
    args: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)
    transport: Optional[str] = None
    url: Optional[str] = None
    enabled_tools: Optional[list[str]] = None
    disabled_tools: Optional[list[str]] = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def metadata(self) -> dict[str, Any]:
        return {
            **self.extra,
            "command": self.command,
            "args": list(self.args),
            "env": dict(self.env),
            "transport": self.transport,
            "url": self.url,
            "enabled_tools": self.enabled_tools,
            "disabled_tools": self.disabled_tools,
        }

    def server_config(self) -> dict[str, Any]:
        """Definition to write into another scope, without enable/disable state."""
        config: dict[str, Any] = dict(self.extra)
        if self.command:
            config["command"] = self.command
        if self.args:
            config["args"] = list(self.args)
        if self.env:
            config["env"] = dict(self.env)
        if self.url:
            config["url"] = self.url
        if self.enabled_tools is not None:
            config["enabled_tools"] = list(self.enabled_tools)
        if self.disabled_tools is not None:
            config["disabled_tools"] = list(self.disabled_tools)
        return config


@dataclass(frozen=True)
class HookTool(Tool):
    kind: ClassVar[ToolKind] = ToolKind.HOOK

    event_name: str = ""
    matcher: str = ""
    hooks: list[dict[str, Any]] = field(default_factory=list)
    index: int = -1
    stashed: bool = False

    @property
    def metadata(self) -> dict[str, Any]:
        first_type = self.hooks[0].get("type") if self.hooks else None
        return {
            "eventName": self.event_name,
            "matcher": self.matcher,
            "hooks": [dict(item) for item in self.hooks],
            "type": first_type,
            "index": self.index,
            "stashed": self.stashed,
        }

    def matcher_group(self) -> dict[str, Any]:
        return {
            "matcher": self.matcher,
            "hooks": [dict(item) for item in self.hooks],
        }


@dataclass(frozen=True)
class CustomPromptTool(Tool):
    kind: ClassVar[ToolKind] = ToolKind.CUSTOM_PROMPT

    argument_hint: Optional[str] = None
    mode: Optional[str] = None
    apply_to: Optional[str] = None
    body: Optional[str] = None

    @property
    def metadata(self) -> dict[str, Any]:
        return {
            "argumentHint": self.argument_hint,
            "mode": self.mode,
            "applyTo": self.apply_to,
            "body": self.body,
        }


TOOL_TYPES: dict[ToolKind, type[Tool]] = {
    ToolKind.SKILL: SkillTool,
    ToolKind.MCP_SERVER: McpServerTool,
    ToolKind.HOOK: HookTool,
    ToolKind.COMMAND: CommandTool,
    ToolKind.CUSTOM_PROMPT: CustomPromptTool,
}


def error_tool(
    kind: ToolKind,
    *,
    tool_id: str,
    name: str,
    scope: ConfigScope,
    detail: str,
    file_path: Path,
) -> Tool:
    return TOOL_TYPES[kind](
        id=tool_id,
        name=name,
        scope=scope,
        status=ToolStatus.ERROR,
        status_detail=detail,
        source=ToolSource(file_path=file_path),
    )


@dataclass(frozen=True)
class ConfigReadResult(Generic[T]):
    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    path: Optional[Path] = None

    @classmethod
    def ok(cls, data: T) -> "ConfigReadResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def missing(cls) -> "ConfigReadResult[T]":
        return cls(success=True, data=None)

    @classmethod
    def failure(cls, error: str, path: Path) -> "ConfigReadResult[T]":
        return cls(success=False, error=error, path=path)

    @property
    def is_missing(self) -> bool:
        return self.success and self.data is None


@dataclass(frozen=True)
class WriteOptions:
    skip_backup: bool = False
    create_if_missing: bool = True


@dataclass(frozen=True)
class ValidationIssue:
    message: str
    path: str = ""

    def __str__(self) -> str:
        return f"{self.message} at {self.path}" if self.path else self.message


@dataclass(frozen=True)
class ValidationResult:
    success: bool
    data: Any = None
    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def message(self) -> str:
        return "; ".join(str(issue) for issue in self.issues)


@dataclass(frozen=True)
class ToolManagerResult:
    success: bool
    error: Optional[str] = None

    @classmethod
    def ok(cls) -> "ToolManagerResult":
        return cls(success=True)

    @classmethod
    def failed(cls, error: str) -> "ToolManagerResult":
        return cls(success=False, error=error)

    def as_dict(self) -> dict[str, Any]:
        if self.success:
            return {"success": True}
        return {"success": False, "error": self.error}
