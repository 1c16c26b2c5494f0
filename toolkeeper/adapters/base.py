from abc import ABC, abstractmethod
from enum import Enum
from typing import ClassVar

from toolkeeper.models import ConfigScope, Tool, ToolKind


class AdapterId(str, Enum):
    CLAUDE_CODE = "claude-code"
    CODEX = "codex"
    COPILOT = "copilot"


class IPlatformAdapter(ABC):
    """The only layer that knows where an agent keeps its files and their shape."""

    ADAPTER_ID: ClassVar[AdapterId]
    DISPLAY_NAME: ClassVar[str]
    SUPPORTED_KINDS: ClassVar[frozenset[ToolKind]] = frozenset()

    @property
    def adapter_id(self) -> str:
        return self.ADAPTER_ID.value

    @property
    def display_name(self) -> str:
        return self.DISPLAY_NAME

    @property
    def supported_kinds(self) -> frozenset[ToolKind]:
        return self.SUPPORTED_KINDS

    @abstractmethod
    def read_tools(self, kind: ToolKind, scope: ConfigScope) -> list[Tool]:
        raise NotImplementedError

    @abstractmethod
    def write_tool(self, tool: Tool, scope: ConfigScope) -> None:
        raise NotImplementedError

    @abstractmethod
    def remove_tool(self, tool: Tool) -> None:
        raise NotImplementedError

    @abstractmethod
    def toggle_tool(self, tool: Tool) -> None:
        raise NotImplementedError

    @abstractmethod
    def detect(self) -> bool:
        raise NotImplementedError
