import os
import sys
from pathlib import Path
from typing import Mapping, Optional


def home_dir() -> Path:
    return Path.home()


def managed_config_dir(platform: str | None = None) -> Path:
    """System-wide directory where administrators place managed settings."""
    name = platform or sys.platform
    if name == "darwin":
        return Path("/Library/Application Support/ClaudeCode")
    if name.startswith("win"):
        return Path("C:\\ProgramData\\ClaudeCode")
    return Path("/etc/claude-code")


def vscode_user_dir(
    platform: str | None = None, environ: Optional[Mapping[str, str]] = None
) -> Path:
    """VS Code's per-user ``User`` directory, which holds the user ``mcp.json``."""
    name = platform or sys.platform
    env = os.environ if environ is None else environ
    if name == "darwin":
        return home_dir() / "Library" / "Application Support" / "Code" / "User"
    if name.startswith("win"):
        appdata = env.get("APPDATA")
        root = Path(appdata) if appdata else home_dir() / "AppData" / "Roaming"
        return root / "Code" / "User"
    config_home = env.get("XDG_CONFIG_HOME")
    root = Path(config_home).expanduser() if config_home else home_dir() / ".config"
    return root / "Code" / "User"
