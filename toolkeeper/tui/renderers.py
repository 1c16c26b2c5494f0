from pathlib import Path
from typing import Any, Optional

from rich.console import Console
from rich.panel import Panel

from toolkeeper.adapters.base import IPlatformAdapter
from toolkeeper.models import Tool, ToolStatus
from toolkeeper.profiles import Profile
from toolkeeper.tui.enums import UIStyle
from toolkeeper.tui.tables import (
    AgentTable,
    BackupTable,
    ProfileTable,
    ToolTable,
    compact_home_path,
)


def _panel(title: str, body: Any, style: str, subtitle: Optional[str] = None) -> Panel:
    return Panel(body, title=title, subtitle=subtitle, border_style=style, padding=(0, 1))


class ToolConsoleUI:
    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def render_tools(self, title: str, tools: list[Tool], verbose: bool = False) -> None:
        if not tools:
            self.console.print(_panel(title, "No tools found.", UIStyle.YELLOW.value))
            return

        style = UIStyle.BLUE.value
        if any(tool.status == ToolStatus.WARNING for tool in tools):
            style = UIStyle.YELLOW.value
        if any(tool.status == ToolStatus.ERROR for tool in tools):
            style = UIStyle.RED.value

        self.console.print(_panel("overview", ToolTable.summary_block(tools), UIStyle.BLUE.value))
        self.console.print(_panel(title, ToolTable.tools_table(tools, show_paths=verbose), style))

    def render_success(self, message: str) -> None:
        self.console.print(_panel("done", message, UIStyle.GREEN.value))

    def render_failure(self, message: str) -> None:
        self.console.print(_panel("failed", message, UIStyle.RED.value))

    def render_backups(self, path: Path, backups: list[Path]) -> None:
        title = f"backups of {compact_home_path(path)}"
        if not backups:
            self.console.print(_panel(title, "No backups found.", UIStyle.YELLOW.value))
            return
        self.console.print(
            _panel(title, BackupTable.backups_table(backups), UIStyle.CYAN.value, subtitle="newest first")
        )

    def render_profiles(self, agent: str, profiles: list[Profile], active_id: Optional[str]) -> None:
        title = f"{agent} profiles"
        if not profiles:
            self.console.print(_panel(title, "No profiles saved.", UIStyle.YELLOW.value))
            return
        self.console.print(
            _panel(
                title,
                ProfileTable.profiles_table(profiles, active_id),
                UIStyle.CYAN.value,
                subtitle="* active",
            )
        )

    def render_agents(self, adapters: list[IPlatformAdapter], active_id: Optional[str]) -> None:
        self.console.print(
            _panel(
                "agents",
                AgentTable.agents_table(adapters, active_id),
                UIStyle.BLUE.value,
                subtitle="* managed now",
            )
        )
