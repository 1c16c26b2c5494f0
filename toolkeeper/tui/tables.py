from collections import Counter
from pathlib import Path

from rich.table import Column, Table

from toolkeeper.adapters.base import IPlatformAdapter
from toolkeeper.models import Tool, ToolKind
from toolkeeper.profiles import Profile
from toolkeeper.tui.enums import SCOPE_STYLE, TOOL_STATUS_STYLE, UIStyle

KIND_LABEL = {
    ToolKind.SKILL: "skill",
    ToolKind.MCP_SERVER: "mcp",
    ToolKind.HOOK: "hook",
    ToolKind.COMMAND: "command",
    ToolKind.CUSTOM_PROMPT: "prompt",
}


def compact_home_path(path: str | Path) -> str:
    text = str(path)
    home = str(Path.home())
    if text == home:
        return "~"
    if text.startswith(f"{home}/"):
        return "~/" + text[len(home) + 1 :]
    return text


def _styled(value: str, style: str) -> str:
    return f"[{style}]{value}[/{style}]"


class ToolTable:
    @staticmethod
    def summary_block(tools: list[Tool]) -> Table:
        by_status = Counter(tool.status.value for tool in tools)
        by_kind = Counter(KIND_LABEL[tool.kind] for tool in tools)

        table = Table.grid(padding=(0, 2))
        table.add_column(style="bold")
        table.add_column()
        table.add_row("Tools", str(len(tools)))
        table.add_row("Kinds", "  ".join(f"{k}={v}" for k, v in sorted(by_kind.items())) or "none")
        table.add_row(
            "Statuses", "  ".join(f"{k}={v}" for k, v in sorted(by_status.items())) or "none"
        )
        return table

    @staticmethod
    def tools_table(tools: list[Tool], show_paths: bool = False) -> Table:
        columns = [
            Column(header="Name", overflow="fold"),
            Column(header="Kind", width=8),
            Column(header="Scope", width=8),
            Column(header="Status", width=9),
            Column(header="Also in", width=16),
            Column(header="Detail", overflow="ellipsis"),
        ]
        if show_paths:
            columns.append(Column(header="Id", overflow="fold"))
            columns.append(Column(header="Source", overflow="ellipsis", max_width=48))
        table = Table(*columns, expand=True, header_style="bold")

        for tool in tools:
            shadowed = [
                entry.scope.value for entry in tool.scope_entries if entry.scope != tool.scope
            ]
            detail = tool.status_detail or tool.description or ""
            row = [
                tool.name,
                KIND_LABEL[tool.kind],
                _styled(tool.scope.value, SCOPE_STYLE.get(tool.scope, UIStyle.WHITE.value)),
                _styled(tool.status.value, TOOL_STATUS_STYLE.get(tool.status, UIStyle.WHITE.value)),
                ", ".join(shadowed),
                detail,
            ]
            if show_paths:
                row.append(tool.id)
                row.append(compact_home_path(tool.source.entry_path))
            table.add_row(*row)
        return table


class BackupTable:
    @staticmethod
    def backups_table(backups: list[Path]) -> Table:
        table = Table(
            Column(header="#", width=3, justify="right"),
            Column(header="Backup", overflow="fold"),
            expand=True,
            header_style="bold",
        )
        for number, path in enumerate(backups, start=1):
            table.add_row(str(number), compact_home_path(path))
        return table


class ProfileTable:
    @staticmethod
    def profiles_table(profiles: list[Profile], active_id: str | None) -> Table:
        table = Table(
            Column(header="", width=1),
            Column(header="Profile", overflow="fold"),
            Column(header="Enabled", width=8, justify="right"),
            Column(header="Tools", width=6, justify="right"),
            Column(header="Updated", overflow="ellipsis"),
            expand=True,
            header_style="bold",
        )
        for profile in profiles:
            marker = _styled("*", UIStyle.GREEN.value) if profile.id == active_id else ""
            table.add_row(
                marker,
                profile.name,
                str(profile.enabled_count),
                str(len(profile.tools)),
                profile.updated_at,
            )
        return table


class AgentTable:
    @staticmethod
    def agents_table(adapters: list[IPlatformAdapter], active_id: str | None) -> Table:
        table = Table(
            Column(header="", width=1),
            Column(header="Id", width=12),
            Column(header="Agent", overflow="fold"),
            Column(header="Installed", width=9),
            Column(header="Kinds", overflow="fold"),
            expand=True,
            header_style="bold",
        )
        for adapter in adapters:
            installed = adapter.detect()
            table.add_row(
                _styled("*", UIStyle.GREEN.value) if adapter.adapter_id == active_id else "",
                adapter.adapter_id,
                adapter.display_name,
                _styled("yes", UIStyle.GREEN.value) if installed else _styled("no", UIStyle.DIM.value),
                ", ".join(KIND_LABEL[kind] for kind in ToolKind if kind in adapter.supported_kinds),
            )
        return table
