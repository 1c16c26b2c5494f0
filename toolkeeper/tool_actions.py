"""Which lifecycle actions make sense for a tool, for menus and prompts."""

from enum import Enum

from toolkeeper.models import DISABLED_SUFFIX, ConfigScope, HookTool, Tool, ToolKind, ToolStatus
from toolkeeper.scopes import is_read_only


class ToolAction(str, Enum):
    TOGGLE = "toggle"
    DELETE = "delete"
    MOVE = "move"


_FILE_BACKED_KINDS = {ToolKind.SKILL, ToolKind.COMMAND}


def is_managed(tool: Tool) -> bool:
    return is_read_only(tool.scope)


def is_toggle_disable(tool: Tool) -> bool:
    """True when toggling ``tool`` would disable it, False when it would enable it.

    A ``.disabled`` marker on disk counts even when ``status`` says
    otherwise: a Warning skill in a ``.disabled`` directory is still disabled.
    """
    if tool.kind in _FILE_BACKED_KINDS:
        marked = tool.source.entry_path.name.endswith(DISABLED_SUFFIX)
        return not (marked or tool.is_disabled)
    if isinstance(tool, HookTool):
        return not tool.stashed
    return tool.status != ToolStatus.DISABLED


def available_actions(tool: Tool) -> list[ToolAction]:
    if is_managed(tool):
        return []
    if tool.status == ToolStatus.ERROR:
        return [ToolAction.DELETE]
    if tool.kind == ToolKind.CUSTOM_PROMPT:
        return [ToolAction.DELETE, ToolAction.MOVE]
    return [ToolAction.TOGGLE, ToolAction.DELETE, ToolAction.MOVE]


def move_targets(tool: Tool) -> list[ConfigScope]:
    if tool.scope == ConfigScope.USER:
        return [ConfigScope.PROJECT]
    if tool.scope in (ConfigScope.PROJECT, ConfigScope.LOCAL):
        return [ConfigScope.USER]
    return []


def delete_description(tool: Tool) -> str:
    if tool.kind == ToolKind.SKILL:
        return f'Delete skill "{tool.name}" and its directory {tool.source.entry_path}?'
    if tool.kind in (ToolKind.COMMAND, ToolKind.CUSTOM_PROMPT):
        return f'Delete "{tool.name}" ({tool.source.file_path})?'
    if tool.kind == ToolKind.MCP_SERVER:
        return f'Remove MCP server "{tool.name}" from {tool.source.file_path}?'
    return f'Remove hook "{tool.name}" from {tool.source.file_path}?'
