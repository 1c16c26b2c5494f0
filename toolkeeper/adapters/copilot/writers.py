"""Changes to ``mcp.json`` and to agent front matter.

``mcp.json`` edits go through the pipeline and leave ``inputs`` alone.
Agent files are edited as text so the rest of the markdown is kept byte
for byte.
"""

import re
from pathlib import Path
from typing import Any

from toolkeeper.adapters.copilot.paths import MCP_SCHEMA
from toolkeeper.config_service import ConfigService
from toolkeeper.errors import ConfigEntryNotFoundError, ConfigFileNotFoundError, ConfigReadError
from toolkeeper.models import WriteOptions

SERVERS_KEY = "servers"
SERVER_SCHEMA = "mcp-server"

_INVOKABLE_RE = re.compile(r"^user-invokable:[^\n]*$", re.MULTILINE)


def add_mcp_server(
    config_service: ConfigService, path: Path, name: str, server: dict[str, Any]
) -> None:
    config_service.validate_entry(path, SERVER_SCHEMA, server)

    def mutate(config: dict[str, Any]) -> dict[str, Any]:
        servers = config.get(SERVERS_KEY)
        if not isinstance(servers, dict):
            servers = {}
            config[SERVERS_KEY] = servers
        servers[name] = dict(server)
        return config

    config_service.write_config_file(path, MCP_SCHEMA, mutate)


def remove_mcp_server(config_service: ConfigService, path: Path, name: str) -> None:
    def mutate(config: dict[str, Any]) -> dict[str, Any]:
        servers = config.get(SERVERS_KEY)
        if not isinstance(servers, dict) or name not in servers:
            raise ConfigEntryNotFoundError(path, f"{SERVERS_KEY}.{name}")
        del servers[name]
        return config

    config_service.write_config_file(path, MCP_SCHEMA, mutate)


def with_user_invokable(content: str, invokable: bool) -> str:
    """Set ``user-invokable`` in the front matter, adding a block if there is none."""
    line = f"user-invokable: {'true' if invokable else 'false'}"
    if content.startswith("---"):
        closing = content.find("\n---", 3)
        if closing != -1:
            head, rest = content[:closing], content[closing:]
            if _INVOKABLE_RE.search(head):
                head = _INVOKABLE_RE.sub(line, head, count=1)
            else:
                head = f"{head}\n{line}"
            return head + rest
    return f"---\n{line}\n---\n{content}"


def toggle_agent(config_service: ConfigService, path: Path, disable: bool) -> None:
    result = config_service.file_store.read_text(path)
    if not result.success:
        raise ConfigReadError(path, result.error or "unknown error")
    if result.data is None:
        raise ConfigFileNotFoundError(path)

    config_service.write_text_config_file(
        path,
        with_user_invokable(result.data, invokable=not disable),
        WriteOptions(create_if_missing=False),
    )
