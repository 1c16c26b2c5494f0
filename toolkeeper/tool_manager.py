import logging

from toolkeeper.adapters.base import IPlatformAdapter
from toolkeeper.adapters.registry import AdapterRegistry
from toolkeeper.config_service import ConfigService
from toolkeeper.errors import ManagedScopeError, NoActiveAdapterError, PolicyError
from toolkeeper.models import ConfigScope, Tool, ToolKind, ToolManagerResult
from toolkeeper.scopes import is_read_only

logger = logging.getLogger(__name__)


class ToolManagerService:
    """Toggle, delete and move tools; every outcome is a ``ToolManagerResult``.

    Policy checks run before any adapter call, so a refused operation
    performs no writes. Failures are logged and returned, never raised.
    """

    def __init__(self, config_service: ConfigService, registry: AdapterRegistry) -> None:
        self.config_service = config_service
        self.registry = registry

    def toggle_tool(self, tool: Tool) -> ToolManagerResult:
        try:
            self._reject_managed(tool, "modify")
            if tool.kind == ToolKind.CUSTOM_PROMPT:
                raise PolicyError("Custom prompts cannot be toggled")
            self._adapter().toggle_tool(tool)
        except Exception as exc:
            return self._failed("toggle", tool, exc)
        return ToolManagerResult.ok()

    def delete_tool(self, tool: Tool) -> ToolManagerResult:
        try:
            self._reject_managed(tool, "delete")
            self._adapter().remove_tool(tool)
        except Exception as exc:
            return self._failed("delete", tool, exc)
        return ToolManagerResult.ok()

    def move_tool(self, tool: Tool, target_scope: ConfigScope) -> ToolManagerResult:
        """Copy to ``target_scope`` first, then remove the source.

        If removal fails after a successful copy the tool exists in both
        scopes; that duplicate is preferred over losing it.
        """
        try:
            self._reject_managed(tool, "move")
            if is_read_only(target_scope):
                raise PolicyError("Cannot move to managed scope (read-only)")
            if tool.scope == target_scope:
                raise PolicyError("Tool is already in the target scope")

            adapter = self._adapter()
            adapter.write_tool(tool, target_scope)
            adapter.remove_tool(tool)
        except Exception as exc:
            return self._failed("move", tool, exc)
        logger.info("moved %s from %s to %s", tool.name, tool.scope.value, target_scope.value)
        return ToolManagerResult.ok()

    def check_conflict(self, tool: Tool, target_scope: ConfigScope) -> bool:
        """Whether ``target_scope`` already holds a same-kind tool with this name.

        Hooks compare display name only, so two groups that differ just in
        their commands still count as a conflict.
        """
        try:
            existing = self.config_service.read_tools_by_scope(tool.kind, target_scope)
        except Exception as exc:
            logger.warning("conflict check for %s skipped: %s", tool.name, exc)
            return False
        return any(other.kind == tool.kind and other.name == tool.name for other in existing)

    def _adapter(self) -> IPlatformAdapter:
        adapter = self.registry.active
        if adapter is None:
            raise NoActiveAdapterError()
        return adapter

    @staticmethod
    def _reject_managed(tool: Tool, operation: str) -> None:
        if is_read_only(tool.scope):
            raise ManagedScopeError(operation)

    @staticmethod
    def _failed(operation: str, tool: Tool, exc: Exception) -> ToolManagerResult:
        if isinstance(exc, PolicyError):
            logger.warning("%s %s refused: %s", operation, tool.name, exc)
        else:
            logger.error("%s %s failed: %s", operation, tool.name, exc)
        return ToolManagerResult.failed(str(exc))
