"""Tests for the toolkeeper command line."""

import json
import sys
from pathlib import Path

import pytest

from toolkeeper.__main__ import cli, main


@pytest.fixture
def run(cli_runner, workspace: Path):
    def _run(*args: str, adapter: str = "claude-code", **kwargs):
        return cli_runner.invoke(
            cli,
            ["--project", str(workspace), "--adapter", adapter, *args],
            **kwargs,
        )

    return _run


@pytest.fixture
def user_skills(tmp_path: Path) -> Path:
    return tmp_path / ".claude" / "skills"


def test_list_effective_skills(run, user_skills: Path, workspace: Path, write_skill) -> None:
    write_skill(user_skills, "lint", description="Lints code")
    write_skill(workspace / ".claude" / "skills", "lint", description="Project lint")
    write_skill(user_skills, "fmt", description="Formats code")

    result = run("list", "skill")

    assert result.exit_code == 0, result.output
    assert "Project lint" in result.output
    assert "Formats code" in result.output
    assert "Lints code" not in result.output


def test_list_all_scopes_shows_shadowed(run, user_skills: Path, workspace: Path, write_skill) -> None:
    write_skill(user_skills, "lint", description="Lints code")
    write_skill(workspace / ".claude" / "skills", "lint", description="Project lint")

    result = run("list", "skill", "--all-scopes")

    assert result.exit_code == 0, result.output
    assert "Lints code" in result.output
    assert "Project lint" in result.output


def test_list_json_records(run, user_skills: Path, workspace: Path, write_skill) -> None:
    write_skill(user_skills, "lint", description="Lints code")
    write_skill(workspace / ".claude" / "skills", "lint", description="Project lint")

    result = run("list", "skill", "--json")

    assert result.exit_code == 0, result.output
    (record,) = json.loads(result.output)
    assert record["id"] == "skill:project:lint"
    assert record["type"] == "skill"
    assert record["status"] == "enabled"
    assert [entry["scope"] for entry in record["scopeEntries"]] == ["user", "project"]
    assert record["metadata"]["body"] == "Body of lint"


def test_list_all_scopes_json_in_precedence_order(run, user_skills: Path, workspace: Path, write_skill) -> None:
    write_skill(user_skills, "lint")
    write_skill(workspace / ".claude" / "skills", "lint")

    result = run("list", "skill", "--all-scopes", "--json")

    assert [record["scope"] for record in json.loads(result.output)] == ["project", "user"]


def test_list_empty(run) -> None:
    result = run("list", "mcp")

    assert result.exit_code == 0
    assert "No tools found." in result.output


def test_list_unsupported_kind(run) -> None:
    result = run("list", "hook", adapter="codex")

    assert result.exit_code == 1
    assert "Codex does not support hook tools" in result.output


def test_toggle_skill(run, user_skills: Path, write_skill) -> None:
    write_skill(user_skills, "lint")

    result = run("toggle", "skill", "lint")

    assert result.exit_code == 0, result.output
    assert "Disabled lint (user)" in result.output
    assert (user_skills / "lint.disabled").is_dir()

    result = run("toggle", "skill", "lint")

    assert result.exit_code == 0, result.output
    assert "Enabled lint (user)" in result.output
    assert (user_skills / "lint").is_dir()


def test_toggle_unknown_tool(run) -> None:
    result = run("toggle", "skill", "ghost")

    assert result.exit_code == 1
    assert "No skill named 'ghost'" in result.output


def test_toggle_managed_tool_is_refused(run, managed_dir: Path, write_json, read_json) -> None:
    path = managed_dir / "managed-mcp.json"
    write_json(path, {"mcpServers": {"corp": {"command": "corp"}}})

    result = run("toggle", "mcp", "corp")

    assert result.exit_code == 1
    assert "Cannot toggle 'corp'" in result.output
    assert read_json(path) == {"mcpServers": {"corp": {"command": "corp"}}}


def test_ambiguous_name_needs_scope(run, tmp_path: Path, write_json) -> None:
    group = {"hooks": [{"type": "command", "command": "notify"}]}
    write_json(tmp_path / ".claude" / "settings.json", {"hooks": {"Stop": [group, group]}})

    result = run("toggle", "hook", "Stop", "--scope", "user")

    assert result.exit_code == 1
    assert "2 hook tools are named 'Stop'" in result.output
    assert "pass --id to pick one: hook:user:Stop:0, hook:user:Stop:1" in result.output


def test_id_picks_one_of_same_named_hooks(run, tmp_path: Path, write_json, read_json) -> None:
    settings = tmp_path / ".claude" / "settings.json"
    first = {"matcher": "Bash", "hooks": [{"type": "command", "command": "a"}]}
    second = {"matcher": "Bash", "hooks": [{"type": "command", "command": "b"}]}
    write_json(settings, {"hooks": {"PreToolUse": [first, second]}})

    result = run("toggle", "hook", "PreToolUse (Bash)", "--scope", "user", "--id", "hook:user:PreToolUse:1")

    assert result.exit_code == 0, result.output
    assert read_json(settings) == {
        "hooks": {"PreToolUse": [first]},
        "_disabledHooks": {"PreToolUse": [{**second, "_position": 1}]},
    }

    result = run("toggle", "hook", "PreToolUse (Bash)", "--id", "hook-stashed:user:PreToolUse:0")

    assert result.exit_code == 0, result.output
    assert read_json(settings) == {"hooks": {"PreToolUse": [first, second]}}


def test_unknown_id(run, tmp_path: Path, write_json) -> None:
    write_json(tmp_path / ".claude" / "settings.json", {"hooks": {"Stop": [{"hooks": []}]}})

    result = run("toggle", "hook", "Stop", "--id", "hook:user:Stop:7")

    assert result.exit_code == 1
    assert "No hook named 'Stop' with id 'hook:user:Stop:7'" in result.output


def test_move_rejects_target_outside_move_targets(run, user_skills: Path, write_skill) -> None:
    write_skill(user_skills, "lint")

    result = run("move", "skill", "lint", "local")

    assert result.exit_code == 1
    assert "valid targets: project" in result.output
    assert (user_skills / "lint").is_dir()


def test_remove_with_confirmation(run, tmp_path: Path, write_json, read_json) -> None:
    claude_json = tmp_path / ".claude.json"
    write_json(claude_json, {"mcpServers": {"github": {"command": "npx"}}})

    declined = run("remove", "mcp", "github", input="n\n")

    assert declined.exit_code == 1
    assert read_json(claude_json)["mcpServers"] == {"github": {"command": "npx"}}

    accepted = run("remove", "mcp", "github", input="y\n")

    assert accepted.exit_code == 0, accepted.output
    assert read_json(claude_json)["mcpServers"] == {}


def test_remove_yes_and_backups(run, tmp_path: Path, write_json) -> None:
    claude_json = tmp_path / ".claude.json"
    write_json(claude_json, {"mcpServers": {"github": {"command": "npx"}}})

    result = run("remove", "mcp", "github", "--yes")
    assert result.exit_code == 0, result.output
    assert "Deleted github (user)" in result.output

    result = run("backups", str(claude_json))

    assert result.exit_code == 0
    assert ".claude.json.bak.1" in result.output


def test_move_conflict_requires_force(run, user_skills: Path, workspace: Path, write_skill) -> None:
    write_skill(user_skills, "lint", description="user copy")
    write_skill(workspace / ".claude" / "skills", "lint", description="project copy")

    refused = run("move", "skill", "lint", "project", "--scope", "user")

    assert refused.exit_code == 1
    assert "pass --force" in refused.output
    assert (user_skills / "lint").is_dir()

    forced = run("move", "skill", "lint", "project", "--scope", "user", "--force")

    assert forced.exit_code == 0, forced.output
    assert "Moved lint from user to project" in forced.output
    assert not (user_skills / "lint").exists()
    skill_md = workspace / ".claude" / "skills" / "lint" / "SKILL.md"
    assert "user copy" in skill_md.read_text(encoding="utf-8")


def test_main_exit_codes(monkeypatch, workspace: Path, user_skills: Path, write_skill) -> None:
    write_skill(user_skills, "lint")
    base = ["toolkeeper", "--project", str(workspace), "--adapter", "claude-code"]

    monkeypatch.setattr(sys, "argv", [*base, "toggle", "skill", "lint"])
    assert main() == 0

    monkeypatch.setattr(sys, "argv", [*base, "toggle", "skill", "ghost"])
    assert main() == 2


def test_profile_save_apply_and_list(run, user_skills: Path, write_skill, tmp_path: Path) -> None:
    write_skill(user_skills, "lint")
    write_skill(user_skills, "fmt")

    result = run("profile", "save", "work")
    assert result.exit_code == 0, result.output
    assert "Saved profile work (2 of 2 tools enabled)" in result.output
    assert (tmp_path / ".config" / "toolkeeper" / "profiles.json").exists()

    assert run("toggle", "skill", "lint").exit_code == 0
    result = run("profile", "apply", "work")

    assert result.exit_code == 0, result.output
    assert "Applied profile work: 1 toggled, 0 not found" in result.output
    assert (user_skills / "lint").is_dir()

    result = run("profile", "list")
    assert result.exit_code == 0, result.output
    assert "Claude Code profiles" in result.output
    assert "work" in result.output


def test_toggle_updates_active_profile(run, user_skills: Path, write_skill, read_json, tmp_path: Path) -> None:
    write_skill(user_skills, "lint")
    run("profile", "save", "work")
    run("profile", "apply", "work")

    assert run("toggle", "skill", "lint").exit_code == 0

    (stored,) = read_json(tmp_path / ".config" / "toolkeeper" / "profiles.json")["profiles"]
    assert stored["tools"] == [{"key": "skill:lint", "enabled": False}]

    assert run("profile", "off").exit_code == 0
    assert run("toggle", "skill", "lint").exit_code == 0
    (stored,) = read_json(tmp_path / ".config" / "toolkeeper" / "profiles.json")["profiles"]
    assert stored["tools"] == [{"key": "skill:lint", "enabled": False}]


def test_profile_errors_are_reported(run, user_skills: Path, write_skill) -> None:
    write_skill(user_skills, "lint")
    run("profile", "save", "work")

    result = run("profile", "save", "work")
    assert result.exit_code == 1
    assert "A profile named 'work' already exists" in result.output

    result = run("profile", "apply", "home")
    assert result.exit_code == 1
    assert "No profile named 'home'" in result.output


def test_profile_prune_and_delete(run, user_skills: Path, write_skill) -> None:
    write_skill(user_skills, "lint")
    write_skill(user_skills, "fmt")
    run("profile", "save", "work")
    assert run("remove", "skill", "fmt", "--yes").exit_code == 0

    result = run("profile", "prune", "work")
    assert result.exit_code == 0, result.output
    assert "Pruned profile work: 1 removed, 1 kept" in result.output

    result = run("profile", "delete", "work", "--yes")
    assert result.exit_code == 0, result.output
    assert "No profiles saved." in run("profile", "list").output


def test_agents_lists_every_adapter(run, tmp_path: Path) -> None:
    (tmp_path / ".codex").mkdir()

    result = run("agents", adapter="codex")

    assert result.exit_code == 0, result.output
    assert "Claude Code" in result.output
    assert "GitHub Copilot" in result.output
    (codex_row,) = [line for line in result.output.splitlines() if "Codex" in line]
    assert "*" in codex_row
    assert "yes" in codex_row


def test_copilot_agent_toggle(run, workspace: Path) -> None:
    agents = workspace / ".github" / "agents"
    agents.mkdir(parents=True)
    (agents / "reviewer.agent.md").write_text("---\nname: reviewer\n---\nReview\n", encoding="utf-8")

    result = run("toggle", "skill", "reviewer", adapter="copilot")

    assert result.exit_code == 0, result.output
    assert "Disabled reviewer (project)" in result.output
    assert "user-invokable: false" in (agents / "reviewer.agent.md").read_text(encoding="utf-8")
