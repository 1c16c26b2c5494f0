import json
import sys
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner


def _ensure_repo_on_path() -> None:
    repo_root = Path(__file__).resolve().parent.parent
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))


_ensure_repo_on_path()

from toolkeeper.adapters.claude_code import ClaudeCodeAdapter, ClaudeCodePaths  # noqa: E402
from toolkeeper.adapters.codex import CodexAdapter, CodexPaths  # noqa: E402
from toolkeeper.adapters.copilot import CopilotAdapter, CopilotPaths  # noqa: E402
from toolkeeper.adapters.registry import AdapterRegistry  # noqa: E402
from toolkeeper.backup import BackupService  # noqa: E402
from toolkeeper.config_service import ConfigService  # noqa: E402
from toolkeeper.fileio import FileStore  # noqa: E402
from toolkeeper.schema import SchemaService  # noqa: E402
from toolkeeper.tool_manager import ToolManagerService  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / ".config"))
    monkeypatch.setenv("TOOLKEEPER_MANAGED_DIR", str(tmp_path / "managed"))
    for name in (
        "TOOLKEEPER_SCOPE_PRECEDENCE",
        "TOOLKEEPER_MAX_BACKUPS",
        "TOOLKEEPER_ADAPTER",
        "TOOLKEEPER_VSCODE_USER_DIR",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(Path, "home", lambda: tmp_path)


@pytest.fixture
def write_json():
    def _write(path: Path, payload: Any) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload), encoding="utf-8")

    return _write


@pytest.fixture
def read_json():
    def _read(path: Path) -> Any:
        return json.loads(path.read_text(encoding="utf-8"))

    return _read


@pytest.fixture
def write_skill():
    def _write(skills_dir: Path, dir_name: str, name: str | None = None, description: str = "Does things") -> Path:
        skill_dir = skills_dir / dir_name
        skill_dir.mkdir(parents=True, exist_ok=True)
        (skill_dir / "SKILL.md").write_text(
            f"---\nname: {name or dir_name}\ndescription: {description}\n---\n\nBody of {dir_name}\n",
            encoding="utf-8",
        )
        return skill_dir

    return _write


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def managed_dir(tmp_path: Path) -> Path:
    return tmp_path / "managed"


@pytest.fixture
def config_service() -> ConfigService:
    return ConfigService(
        file_store=FileStore(),
        backup=BackupService(),
        schemas=SchemaService.create_default(),
        registry=AdapterRegistry(),
    )


@pytest.fixture
def claude_adapter(tmp_path: Path, workspace: Path, managed_dir: Path, config_service) -> ClaudeCodeAdapter:
    paths = ClaudeCodePaths(home=tmp_path, managed_dir=managed_dir, workspace_root=workspace)
    adapter = ClaudeCodeAdapter(paths=paths, config_service=config_service)
    config_service.registry.register(adapter)
    config_service.registry.set_active(adapter.adapter_id)
    return adapter


@pytest.fixture
def codex_adapter(tmp_path: Path, workspace: Path, config_service) -> CodexAdapter:
    adapter = CodexAdapter(
        paths=CodexPaths(home=tmp_path, workspace_root=workspace), config_service=config_service
    )
    config_service.registry.register(adapter)
    config_service.registry.set_active(adapter.adapter_id)
    return adapter


@pytest.fixture
def vscode_dir(tmp_path: Path) -> Path:
    return tmp_path / "vscode" / "User"


@pytest.fixture
def copilot_adapter(tmp_path: Path, workspace: Path, vscode_dir: Path, config_service) -> CopilotAdapter:
    paths = CopilotPaths(vscode_user_dir=vscode_dir, home=tmp_path, workspace_root=workspace)
    adapter = CopilotAdapter(paths=paths, config_service=config_service)
    config_service.registry.register(adapter)
    config_service.registry.set_active(adapter.adapter_id)
    return adapter


@pytest.fixture
def tool_manager(config_service) -> ToolManagerService:
    return ToolManagerService(config_service, config_service.registry)


@pytest.fixture
def cli_runner(tmp_path: Path) -> CliRunner:
    class HomeCliRunner(CliRunner):
        def invoke(self, cli: Any, args: Any = None, **kwargs: Any):  # type: ignore[override]
            env = dict(kwargs.pop("env", {}) or {})
            env.setdefault("HOME", str(tmp_path))
            env.setdefault("XDG_CONFIG_HOME", str(tmp_path / ".config"))
            # wide enough that rich never elides table cells
            env.setdefault("COLUMNS", "200")
            kwargs["env"] = env
            return super().invoke(cli, args=args, **kwargs)

    return HomeCliRunner()
