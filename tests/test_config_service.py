from pathlib import Path

import pytest

from toolkeeper.backup import backup_path
from toolkeeper.errors import (
    BackupError,
    ConfigFileNotFoundError,
    ConfigReadError,
    ConfigValidationError,
)
from toolkeeper.models import ConfigScope, ToolKind, ToolStatus, WriteOptions
from toolkeeper.scopes import ScopePolicy


def _add_hook(config: dict) -> dict:
    config.setdefault("hooks", {})["Stop"] = [
        {"hooks": [{"type": "command", "command": "notify"}]}
    ]
    return config


def test_write_preserves_unknown_fields(config_service, tmp_path: Path, write_json, read_json) -> None:
    path = tmp_path / "settings.json"
    write_json(path, {"model": "opus", "permissions": {"allow": ["Bash"]}, "statusLine": {"x": 1}})

    result = config_service.write_config_file(path, "settings-file", _add_hook)

    written = read_json(path)
    assert written == result
    assert written["model"] == "opus"
    assert written["statusLine"] == {"x": 1}
    assert written["hooks"]["Stop"][0]["hooks"][0]["command"] == "notify"


def test_write_creates_missing_file_without_backup(config_service, tmp_path: Path, read_json) -> None:
    path = tmp_path / "nested" / "settings.json"

    config_service.write_config_file(path, "settings-file", _add_hook)

    assert read_json(path)["hooks"]["Stop"]
    assert not backup_path(path, 1).exists()


def test_missing_file_with_create_disabled(config_service, tmp_path: Path) -> None:
    path = tmp_path / "settings.json"

    with pytest.raises(ConfigFileNotFoundError):
        config_service.write_config_file(
            path, "settings-file", _add_hook, WriteOptions(create_if_missing=False)
        )
    assert not path.exists()


def test_unreadable_file_aborts(config_service, tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ConfigReadError, match="Invalid JSON"):
        config_service.write_config_file(path, "settings-file", _add_hook)
    assert path.read_text(encoding="utf-8") == "{not json"


def test_non_object_root_is_rejected(config_service, tmp_path: Path, write_json) -> None:
    path = tmp_path / "settings.json"
    write_json(path, [1, 2])

    with pytest.raises(ConfigValidationError, match="root must be an object"):
        config_service.write_config_file(path, "settings-file", _add_hook)


def test_invalid_candidate_is_not_written(config_service, tmp_path: Path, write_json, read_json) -> None:
    path = tmp_path / "settings.json"
    write_json(path, {"env": {"A": "1"}})

    def break_it(config: dict) -> dict:
        config["env"]["A"] = 1
        config["disabledMcpServers"] = "github"
        return config

    with pytest.raises(ConfigValidationError) as excinfo:
        config_service.write_config_file(path, "settings-file", break_it)

    assert len(excinfo.value.issues) == 2
    assert read_json(path) == {"env": {"A": "1"}}
    assert not backup_path(path, 1).exists()


def test_failing_mutation_leaves_file_untouched(config_service, tmp_path: Path, write_json, read_json) -> None:
    path = tmp_path / "settings.json"
    write_json(path, {"env": {"A": "1"}})

    def mutate(config: dict) -> dict:
        config["env"]["B"] = "2"
        raise RuntimeError("halfway")

    with pytest.raises(RuntimeError):
        config_service.write_config_file(path, "settings-file", mutate)
    assert read_json(path) == {"env": {"A": "1"}}
    assert not backup_path(path, 1).exists()


def test_backup_taken_before_replace(config_service, tmp_path: Path, write_json, read_json) -> None:
    path = tmp_path / "settings.json"
    write_json(path, {"model": "opus"})

    config_service.write_config_file(path, "settings-file", _add_hook)

    assert read_json(backup_path(path, 1)) == {"model": "opus"}


def test_skip_backup_option(config_service, tmp_path: Path, write_json) -> None:
    path = tmp_path / "settings.json"
    write_json(path, {"model": "opus"})

    config_service.write_config_file(path, "settings-file", _add_hook, WriteOptions(skip_backup=True))

    assert not backup_path(path, 1).exists()


def test_backup_failure_leaves_file_untouched(
    config_service, tmp_path: Path, write_json, read_json, monkeypatch
) -> None:
    path = tmp_path / "settings.json"
    write_json(path, {"model": "opus"})

    def fail(target: Path):
        raise BackupError(target, "disk full")

    monkeypatch.setattr(config_service.backup, "create_backup", fail)
    with pytest.raises(BackupError):
        config_service.write_config_file(path, "settings-file", _add_hook)
    assert read_json(path) == {"model": "opus"}


def test_toml_pipeline(config_service, tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text('model = "o3"\n', encoding="utf-8")

    def add(config: dict) -> dict:
        config["mcp_servers"] = {"gh": {"command": "npx"}}
        return config

    result = config_service.write_toml_config_file(path, "codex-config", add)

    assert result == {"model": "o3", "mcp_servers": {"gh": {"command": "npx"}}}
    assert config_service.file_store.read_toml(path).data == result
    assert backup_path(path, 1).read_text(encoding="utf-8") == 'model = "o3"\n'


def test_text_write_backs_up(config_service, tmp_path: Path) -> None:
    path = tmp_path / "prompt.md"
    path.write_text("old", encoding="utf-8")

    config_service.write_text_config_file(path, "new")

    assert path.read_text(encoding="utf-8") == "new"
    assert backup_path(path, 1).read_text(encoding="utf-8") == "old"
    with pytest.raises(ConfigFileNotFoundError):
        config_service.write_text_config_file(
            tmp_path / "absent.md", "x", WriteOptions(create_if_missing=False)
        )


def test_read_all_tools_without_adapter_is_empty(config_service) -> None:
    assert config_service.read_all_tools(ToolKind.SKILL) == []


def test_resolution_project_wins_by_default(
    config_service, claude_adapter, tmp_path: Path, workspace: Path, write_skill
) -> None:
    write_skill(tmp_path / ".claude" / "skills", "lint", description="user copy")
    write_skill(workspace / ".claude" / "skills", "lint", description="project copy")
    write_skill(tmp_path / ".claude" / "skills", "solo")

    tools = {tool.name: tool for tool in config_service.read_all_tools(ToolKind.SKILL)}

    assert set(tools) == {"lint", "solo"}
    lint = tools["lint"]
    assert lint.scope == ConfigScope.PROJECT
    assert lint.description == "project copy"
    assert lint.effective
    assert {entry.scope for entry in lint.scope_entries} == {ConfigScope.USER, ConfigScope.PROJECT}
    assert len(tools["solo"].scope_entries) == 1


def test_resolution_keeps_same_scope_hook_siblings(
    config_service, claude_adapter, tmp_path: Path, workspace: Path, write_json
) -> None:
    write_json(
        workspace / ".claude" / "settings.json",
        {
            "hooks": {"PreToolUse": [{"matcher": "Bash", "hooks": [{"type": "command", "command": "a"}]}]},
            "_disabledHooks": {
                "PreToolUse": [{"matcher": "Bash", "hooks": [{"type": "command", "command": "b"}]}]
            },
        },
    )
    write_json(
        tmp_path / ".claude" / "settings.json",
        {"hooks": {"PreToolUse": [{"matcher": "Bash", "hooks": [{"type": "command", "command": "u"}]}]}},
    )

    tools = config_service.read_all_tools(ToolKind.HOOK)

    assert [(tool.name, tool.status, tool.scope) for tool in tools] == [
        ("PreToolUse (Bash)", ToolStatus.ENABLED, ConfigScope.PROJECT),
        ("PreToolUse (Bash)", ToolStatus.DISABLED, ConfigScope.PROJECT),
    ]
    for tool in tools:
        assert [entry.scope for entry in tool.scope_entries] == [ConfigScope.USER, ConfigScope.PROJECT]
    assert [tool.hooks[0]["command"] for tool in tools] == ["a", "b"]


def test_resolution_follows_configured_policy(
    config_service, claude_adapter, tmp_path: Path, workspace: Path, write_skill
) -> None:
    write_skill(tmp_path / ".claude" / "skills", "lint", description="user copy")
    write_skill(workspace / ".claude" / "skills", "lint", description="project copy")
    config_service.scope_policy = ScopePolicy.from_names(["user", "project", "local", "managed"])

    (lint,) = config_service.read_all_tools(ToolKind.SKILL)

    assert lint.scope == ConfigScope.USER


def test_failing_scope_becomes_error_tool(config_service, claude_adapter, tmp_path: Path, write_skill, monkeypatch) -> None:
    write_skill(tmp_path / ".claude" / "skills", "lint")
    original = claude_adapter.read_tools

    def flaky(kind, scope):
        if scope == ConfigScope.PROJECT:
            raise PermissionError("denied")
        return original(kind, scope)

    monkeypatch.setattr(claude_adapter, "read_tools", flaky)

    tools = config_service.read_all_tools(ToolKind.SKILL)

    by_status = {tool.status: tool for tool in tools}
    assert by_status[ToolStatus.ENABLED].name == "lint"
    error = by_status[ToolStatus.ERROR]
    assert error.scope == ConfigScope.PROJECT
    assert error.status_detail == "denied"


def test_read_tools_by_scope_skips_resolution(
    config_service, claude_adapter, tmp_path: Path, workspace: Path, write_skill
) -> None:
    write_skill(tmp_path / ".claude" / "skills", "lint")
    write_skill(workspace / ".claude" / "skills", "lint")

    tools = config_service.read_tools_by_scope(ToolKind.SKILL, ConfigScope.USER)

    assert [tool.scope for tool in tools] == [ConfigScope.USER]
    assert not tools[0].effective
    assert tools[0].scope_entries == ()
