import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Optional

import click
from rich.console import Console
from rich.logging import RichHandler

from toolkeeper.adapters.base import AdapterId
from toolkeeper.errors import ToolkeeperError
from toolkeeper.models import ConfigScope, Tool, ToolKind
from toolkeeper.profiles import ProfileService
from toolkeeper.scopes import APPLICABLE_SCOPES
from toolkeeper.settings import Services, Settings, build_services
from toolkeeper.tool_actions import (
    ToolAction,
    available_actions,
    delete_description,
    is_toggle_disable,
    move_targets,
)
from toolkeeper.tui.renderers import ToolConsoleUI
from toolkeeper.tui.tables import KIND_LABEL

KIND_BY_NAME: dict[str, ToolKind] = {
    **{label: kind for kind, label in KIND_LABEL.items()},
    **{kind.value: kind for kind in ToolKind},
}
SCOPE_VALUES = [scope.value for scope in ConfigScope]


def _kind_argument(required: bool = True):
    return click.argument(
        "kind",
        required=required,
        type=click.Choice(sorted(KIND_BY_NAME), case_sensitive=False),
    )


def _scope_option(help_text: str):
    return click.option(
        "--scope",
        type=click.Choice(SCOPE_VALUES, case_sensitive=False),
        default=None,
        help=help_text,
    )


def _id_option():
    return click.option(
        "--id",
        "tool_id",
        default=None,
        help="Tool id, to pick one of several same-named tools (see list -v or --json).",
    )


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _services(obj: Dict[str, Any]) -> Services:
    return obj["services"]


def _ui(obj: Dict[str, Any]) -> ToolConsoleUI:
    return obj["ui"]


def _require_kind(services: Services, kind: ToolKind) -> None:
    adapter = services.registry.active
    if adapter is None:
        raise click.ClickException("No supported agent detected; pass --adapter.")
    if kind not in adapter.supported_kinds:
        raise click.ClickException(
            f"{adapter.display_name} does not support {KIND_LABEL[kind]} tools."
        )


def _read_scopes(services: Services, kind: ToolKind, scopes: list[ConfigScope]) -> list[Tool]:
    tools: list[Tool] = []
    for each in scopes:
        try:
            tools.extend(services.config_service.read_tools_by_scope(kind, each))
        except ToolkeeperError as exc:
            raise click.ClickException(str(exc))
    return tools


def _find_tool(
    services: Services,
    kind: ToolKind,
    name: str,
    scope: Optional[str],
    tool_id: Optional[str] = None,
) -> Tool:
    """Pick one tool by name; ``tool_id`` separates same-named tools in one scope."""
    _require_kind(services, kind)
    if scope is not None:
        candidates = _read_scopes(services, kind, [ConfigScope(scope)])
    elif tool_id is not None:
        candidates = _read_scopes(services, kind, list(APPLICABLE_SCOPES[kind]))
    else:
        candidates = services.config_service.read_all_tools(kind)

    matches = [
        tool
        for tool in candidates
        if tool.name == name and (tool_id is None or tool.id == tool_id)
    ]
    if not matches:
        where = f" in {scope} scope" if scope else ""
        which = f" with id {tool_id!r}" if tool_id else ""
        raise click.ClickException(f"No {KIND_LABEL[kind]} named {name!r}{which}{where}.")
    if len(matches) > 1:
        scopes = {tool.scope.value for tool in matches}
        hint = "--scope or --id" if scope is None and len(scopes) > 1 else "--id"
        ids = ", ".join(tool.id for tool in matches)
        raise click.ClickException(
            f"{len(matches)} {KIND_LABEL[kind]} tools are named {name!r} "
            f"({', '.join(sorted(scopes))}); pass {hint} to pick one: {ids}"
        )
    return matches[0]


def _require_action(tool: Tool, action: ToolAction) -> None:
    if action not in available_actions(tool):
        raise click.ClickException(
            f"Cannot {action.value} {tool.name!r}: not available for {tool.scope.value} "
            f"{tool.status.value} {KIND_LABEL[tool.kind]} tools."
        )


def _finish(ui: ToolConsoleUI, success: bool, message: str, error: Optional[str]) -> None:
    if success:
        ui.render_success(message)
        return
    ui.render_failure(error or "unknown error")
    raise click.exceptions.Exit(1)


@click.group()
@click.option(
    "--project",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Project root for project and local scopes (default: current directory).",
)
@click.option(
    "--adapter",
    type=click.Choice([item.value for item in AdapterId], case_sensitive=False),
    default=None,
    help="Agent whose configuration to manage.",
)
@click.option("-v", "--verbose", is_flag=True, help="Show debug logs and source paths.")
@click.pass_context
def cli(ctx: click.Context, project: Optional[Path], adapter: Optional[str], verbose: bool) -> None:
    """Manage agent skills, commands, MCP servers and hooks across scopes."""
    _configure_logging(verbose)
    settings = Settings.load()
    if adapter is not None:
        settings = replace(settings, active_adapter=adapter.lower())
    workspace_root = (project or Path.cwd()).expanduser().resolve()
    ctx.obj = {
        "services": build_services(settings, workspace_root=workspace_root),
        "ui": ToolConsoleUI(Console()),
        "verbose": verbose,
    }


@cli.command("list", help="List tools, one effective entry per identity.")
@_kind_argument(required=False)
@_scope_option("Only read this scope (no cross-scope resolution).")
@click.option("--all-scopes", is_flag=True, help="Show every occurrence instead of the winner.")
@click.option("--json", "as_json", is_flag=True, help="Print tool records as JSON.")
@click.pass_obj
def list_tools(
    obj: Dict[str, Any], kind: Optional[str], scope: Optional[str], all_scopes: bool, as_json: bool
) -> None:
    services = _services(obj)
    adapter = services.registry.active
    if adapter is None:
        raise click.ClickException("No supported agent detected; pass --adapter.")

    if kind is not None:
        kinds = [KIND_BY_NAME[kind.lower()]]
        _require_kind(services, kinds[0])
    else:
        kinds = [item for item in ToolKind if item in adapter.supported_kinds]

    tools: list[Tool] = []
    for item in kinds:
        if scope is None and not all_scopes:
            tools.extend(services.config_service.read_all_tools(item))
            continue
        scopes = [ConfigScope(scope)] if scope else list(APPLICABLE_SCOPES[item])
        tools.extend(_read_scopes(services, item, scopes))

    if all_scopes:
        tools = services.config_service.scope_policy.sort(tools)

    if as_json:
        click.echo(json.dumps([tool.as_dict() for tool in tools], indent=2))
        return

    title = f"{adapter.display_name} tools"
    if scope:
        title = f"{title} ({scope})"
    _ui(obj).render_tools(title, tools, verbose=obj["verbose"])


@cli.command(help="Enable a disabled tool or disable an enabled one.")
@_kind_argument()
@click.argument("name")
@_scope_option("Scope holding the tool (default: the effective one).")
@_id_option()
@click.pass_obj
def toggle(
    obj: Dict[str, Any], kind: str, name: str, scope: Optional[str], tool_id: Optional[str]
) -> None:
    services = _services(obj)
    tool = _find_tool(services, KIND_BY_NAME[kind.lower()], name, scope, tool_id)
    _require_action(tool, ToolAction.TOGGLE)
    disable = is_toggle_disable(tool)
    result = services.tool_manager.toggle_tool(tool)
    if result.success:
        services.profiles.sync_tool(tool, enabled=not disable)
    verb = "Disabled" if disable else "Enabled"
    _finish(_ui(obj), result.success, f"{verb} {tool.name} ({tool.scope.value})", result.error)


@cli.command(help="Delete a tool, keeping a backup of what it removes.")
@_kind_argument()
@click.argument("name")
@_scope_option("Scope holding the tool (default: the effective one).")
@_id_option()
@click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
@click.pass_obj
def remove(
    obj: Dict[str, Any],
    kind: str,
    name: str,
    scope: Optional[str],
    tool_id: Optional[str],
    yes: bool,
) -> None:
    services = _services(obj)
    tool = _find_tool(services, KIND_BY_NAME[kind.lower()], name, scope, tool_id)
    _require_action(tool, ToolAction.DELETE)
    if not yes:
        click.confirm(delete_description(tool), abort=True)
    result = services.tool_manager.delete_tool(tool)
    if result.success:
        services.profiles.forget_tool(tool)
    _finish(_ui(obj), result.success, f"Deleted {tool.name} ({tool.scope.value})", result.error)


@cli.command(help="Move a tool to another scope.")
@_kind_argument()
@click.argument("name")
@click.argument("target", type=click.Choice(SCOPE_VALUES, case_sensitive=False))
@_scope_option("Scope holding the tool (default: the effective one).")
@_id_option()
@click.option("--force", is_flag=True, help="Overwrite a same-named tool in the target scope.")
@click.pass_obj
def move(
    obj: Dict[str, Any],
    kind: str,
    name: str,
    target: str,
    scope: Optional[str],
    tool_id: Optional[str],
    force: bool,
) -> None:
    services = _services(obj)
    tool = _find_tool(services, KIND_BY_NAME[kind.lower()], name, scope, tool_id)
    _require_action(tool, ToolAction.MOVE)
    target_scope = ConfigScope(target.lower())
    targets = move_targets(tool)
    if target_scope not in targets:
        allowed = ", ".join(item.value for item in targets) or "none"
        raise click.ClickException(
            f"Cannot move {tool.name!r} from {tool.scope.value} to {target_scope.value} "
            f"scope; valid targets: {allowed}."
        )
    if not force and services.tool_manager.check_conflict(tool, target_scope):
        raise click.ClickException(
            f"{tool.name!r} already exists in {target_scope.value} scope; pass --force to overwrite."
        )
    result = services.tool_manager.move_tool(tool, target_scope)
    _finish(
        _ui(obj),
        result.success,
        f"Moved {tool.name} from {tool.scope.value} to {target_scope.value}",
        result.error,
    )


@cli.command(help="List supported agents and which one is managed.")
@click.pass_obj
def agents(obj: Dict[str, Any]) -> None:
    registry = _services(obj).registry
    active = registry.active
    _ui(obj).render_agents(registry.all(), active.adapter_id if active else None)


@cli.group(help="Save and switch named sets of enabled tools.")
def profile() -> None:
    pass


def _profiles(obj: Dict[str, Any]) -> ProfileService:
    if _services(obj).registry.active is None:
        raise click.ClickException("No supported agent detected; pass --adapter.")
    return _services(obj).profiles


@profile.command("list", help="List profiles saved for the current agent.")
@click.pass_obj
def list_profiles(obj: Dict[str, Any]) -> None:
    profiles = _profiles(obj)
    active = profiles.active_profile()
    _ui(obj).render_profiles(
        _services(obj).registry.active.display_name,
        profiles.profiles(),
        active.id if active else None,
    )


@profile.command("save", help="Save which tools are enabled right now as a profile.")
@click.argument("name")
@click.pass_obj
def save_profile(obj: Dict[str, Any], name: str) -> None:
    try:
        saved = _profiles(obj).create_profile(name)
    except ToolkeeperError as exc:
        raise click.ClickException(str(exc))
    _ui(obj).render_success(
        f"Saved profile {saved.name} ({saved.enabled_count} of {len(saved.tools)} tools enabled)"
    )


@profile.command("apply", help="Enable and disable tools to match a profile.")
@click.argument("name")
@click.pass_obj
def apply_profile(obj: Dict[str, Any], name: str) -> None:
    try:
        result = _profiles(obj).switch_profile(name)
    except ToolkeeperError as exc:
        raise click.ClickException(str(exc))
    message = f"Applied profile {name}: {result.toggled} toggled, {result.skipped} not found"
    _finish(_ui(obj), result.success, message, "; ".join(result.errors))


@profile.command("off", help="Stop tracking changes in the active profile.")
@click.pass_obj
def profile_off(obj: Dict[str, Any]) -> None:
    try:
        _profiles(obj).switch_profile(None)
    except ToolkeeperError as exc:
        raise click.ClickException(str(exc))
    _ui(obj).render_success("No profile is active")


@profile.command("delete", help="Delete a saved profile; tools are left as they are.")
@click.argument("name")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
@click.pass_obj
def delete_profile(obj: Dict[str, Any], name: str, yes: bool) -> None:
    if not yes:
        click.confirm(f"Delete profile {name!r}?", abort=True)
    try:
        _profiles(obj).delete_profile(name)
    except ToolkeeperError as exc:
        raise click.ClickException(str(exc))
    _ui(obj).render_success(f"Deleted profile {name}")


@profile.command("prune", help="Drop profile entries for tools that no longer exist.")
@click.argument("name")
@click.pass_obj
def prune_profile(obj: Dict[str, Any], name: str) -> None:
    try:
        kept, removed = _profiles(obj).reconcile_profile(name)
    except ToolkeeperError as exc:
        raise click.ClickException(str(exc))
    _ui(obj).render_success(f"Pruned profile {name}: {removed} removed, {kept} kept")


@cli.command(help="List rolling backups of a config file or tool directory.")
@click.argument("path", type=click.Path(path_type=Path))
@click.pass_obj
def backups(obj: Dict[str, Any], path: Path) -> None:
    target = path.expanduser().resolve()
    _ui(obj).render_backups(target, _services(obj).backup.list_backups(target))


def main() -> int:
    try:
        cli(standalone_mode=False)
    except click.exceptions.Exit as exc:
        code = exc.exit_code
        return code if isinstance(code, int) else 1
    except click.exceptions.Abort:
        return 1
    except click.ClickException as exc:
        exc.show()
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
