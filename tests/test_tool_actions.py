from dataclasses import replace
from pathlib import Path

from toolkeeper.models import (
    ConfigScope,
    CustomPromptTool,
    HookTool,
    McpServerTool,
    SkillTool,
    ToolSource,
    ToolStatus,
)
from toolkeeper.tool_actions import (
    ToolAction,
    available_actions,
    delete_description,
    is_toggle_disable,
    move_targets,
)


def _mcp(scope: ConfigScope = ConfigScope.USER, status: ToolStatus = ToolStatus.ENABLED) -> McpServerTool:
    return McpServerTool(
        id=f"mcp:{scope.value}:github",
        name="github",
        scope=scope,
        status=status,
        source=ToolSource(file_path=Path("/home/u/.claude.json")),
        command="npx",
    )


def test_actions_by_scope_and_status() -> None:
    assert available_actions(_mcp()) == [ToolAction.TOGGLE, ToolAction.DELETE, ToolAction.MOVE]
    assert available_actions(_mcp(ConfigScope.MANAGED)) == []
    assert available_actions(_mcp(status=ToolStatus.ERROR)) == [ToolAction.DELETE]


def test_prompts_cannot_toggle() -> None:
    prompt = CustomPromptTool(
        id="prompt:codex:user:a",
        name="a",
        scope=ConfigScope.USER,
        status=ToolStatus.ENABLED,
        source=ToolSource(file_path=Path("/p/a.md")),
    )

    assert available_actions(prompt) == [ToolAction.DELETE, ToolAction.MOVE]


def test_move_targets() -> None:
    assert move_targets(_mcp()) == [ConfigScope.PROJECT]
    assert move_targets(_mcp(ConfigScope.PROJECT)) == [ConfigScope.USER]
    assert move_targets(_mcp(ConfigScope.LOCAL)) == [ConfigScope.USER]
    assert move_targets(_mcp(ConfigScope.MANAGED)) == []


def test_toggle_direction_follows_on_disk_marker() -> None:
    skill = SkillTool(
        id="skill:user:lint",
        name="lint",
        scope=ConfigScope.USER,
        status=ToolStatus.WARNING,
        source=ToolSource(
            file_path=Path("/s/lint.disabled/SKILL.md"),
            is_directory=True,
            directory_path=Path("/s/lint.disabled"),
        ),
    )
    hook = HookTool(
        id="hook:user:Stop:0",
        name="Stop",
        scope=ConfigScope.USER,
        status=ToolStatus.WARNING,
        source=ToolSource(file_path=Path("/settings.json")),
        event_name="Stop",
    )

    assert not is_toggle_disable(skill)
    assert is_toggle_disable(hook)
    assert not is_toggle_disable(replace(hook, stashed=True, status=ToolStatus.DISABLED))
    assert is_toggle_disable(_mcp())
    assert not is_toggle_disable(_mcp(status=ToolStatus.DISABLED))


def test_delete_description_names_the_target() -> None:
    assert delete_description(_mcp()) == 'Remove MCP server "github" from /home/u/.claude.json?'


def test_disabled_agent_file_toggles_on() -> None:
    agent = SkillTool(
        id="skill:project:reviewer",
        name="Reviewer",
        scope=ConfigScope.PROJECT,
        status=ToolStatus.DISABLED,
        source=ToolSource(file_path=Path("/w/.github/agents/reviewer.agent.md")),
    )

    assert not is_toggle_disable(agent)
    assert is_toggle_disable(replace(agent, status=ToolStatus.ENABLED))
