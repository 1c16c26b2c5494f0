"""Mutations of ``config.toml``; emptied ``mcp_servers`` tables are dropped."""

from pathlib import Path
from typing import Any

from toolkeeper.adapters.codex.paths import CONFIG_SCHEMA
from toolkeeper.config_service import ConfigService
from toolkeeper.errors import ConfigEntryNotFoundError

MCP_SERVERS_KEY = "mcp_servers"


def _existing_server(config: dict[str, Any], path: Path, name: str) -> dict[str, Any]:
    servers = config.get(MCP_SERVERS_KEY)
    server = servers.get(name) if isinstance(servers, dict) else None
    if not isinstance(server, dict):
        raise ConfigEntryNotFoundError(path, f"{MCP_SERVERS_KEY}.{name}")
    return server


def add_mcp_server(
    config_service: ConfigService, path: Path, name: str, server: dict[str, Any]
) -> None:
    def mutate(config: dict[str, Any]) -> dict[str, Any]:
        servers = config.get(MCP_SERVERS_KEY)
        if not isinstance(servers, dict):
            servers = {}
            config[MCP_SERVERS_KEY] = servers
        servers[name] = dict(server)
        return config

    config_service.write_toml_config_file(path, CONFIG_SCHEMA, mutate)


def remove_mcp_server(config_service: ConfigService, path: Path, name: str) -> None:
    def mutate(config: dict[str, Any]) -> dict[str, Any]:
        _existing_server(config, path, name)
        del config[MCP_SERVERS_KEY][name]
        if not config[MCP_SERVERS_KEY]:
            del config[MCP_SERVERS_KEY]
        return config

    config_service.write_toml_config_file(path, CONFIG_SCHEMA, mutate)


def toggle_mcp_server(
    config_service: ConfigService, path: Path, name: str, disable: bool
) -> None:
    """Write ``enabled = false`` to disable; enabling drops the key (the default)."""

    def mutate(config: dict[str, Any]) -> dict[str, Any]:
        server = _existing_server(config, path, name)
        if disable:
            server["enabled"] = False
        else:
            server.pop("enabled", None)
        return config

    config_service.write_toml_config_file(path, CONFIG_SCHEMA, mutate)
