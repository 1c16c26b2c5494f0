"""Field-level changes to Claude Code JSON files, all through the pipeline."""

from pathlib import Path
from typing import Any

from toolkeeper.config_service import ConfigService
from toolkeeper.errors import ConfigEntryNotFoundError
from toolkeeper.overlay import (
    append_matcher_group,
    remove_matcher_group,
    restore_matcher_group,
    stash_matcher_group,
)

MCP_SERVERS_KEY = "mcpServers"
DISABLED_SERVERS_KEY = "disabledMcpServers"
SETTINGS_SCHEMA = "settings-file"
SERVER_SCHEMA = "mcp-server"
MATCHER_GROUP_SCHEMA = "hook-matcher"


def _servers(config: dict[str, Any]) -> dict[str, Any]:
    servers = config.get(MCP_SERVERS_KEY)
    if not isinstance(servers, dict):
        servers = {}
        config[MCP_SERVERS_KEY] = servers
    return servers


def _existing_server(config: dict[str, Any], path: Path, name: str) -> dict[str, Any]:
    server = _servers(config).get(name)
    if not isinstance(server, dict):
        raise ConfigEntryNotFoundError(path, f"{MCP_SERVERS_KEY}.{name}")
    return server


def toggle_mcp_server(
    config_service: ConfigService, path: Path, schema_kind: str, name: str, disable: bool
) -> None:
    def mutate(config: dict[str, Any]) -> dict[str, Any]:
        server = _existing_server(config, path, name)
        if disable:
            server["disabled"] = True
        else:
            server.pop("disabled", None)
        return config

    config_service.write_config_file(path, schema_kind, mutate)


def remove_mcp_server(
    config_service: ConfigService, path: Path, schema_kind: str, name: str
) -> None:
    def mutate(config: dict[str, Any]) -> dict[str, Any]:
        _existing_server(config, path, name)
        del config[MCP_SERVERS_KEY][name]
        return config

    config_service.write_config_file(path, schema_kind, mutate)


def add_mcp_server(
    config_service: ConfigService,
    path: Path,
    schema_kind: str,
    name: str,
    server: dict[str, Any],
) -> None:
    config_service.validate_entry(path, SERVER_SCHEMA, server)

    def mutate(config: dict[str, Any]) -> dict[str, Any]:
        _servers(config)[name] = dict(server)
        return config

    config_service.write_config_file(path, schema_kind, mutate)


def unlist_disabled_mcp_server(config_service: ConfigService, path: Path, name: str) -> None:
    """Drop ``name`` from a settings file's ``disabledMcpServers``."""

    def mutate(config: dict[str, Any]) -> dict[str, Any]:
        listed = [item for item in config.get(DISABLED_SERVERS_KEY) or [] if item != name]
        if listed:
            config[DISABLED_SERVERS_KEY] = listed
        else:
            config.pop(DISABLED_SERVERS_KEY, None)
        return config

    config_service.write_config_file(path, SETTINGS_SCHEMA, mutate)


def toggle_hook(
    config_service: ConfigService, path: Path, event_name: str, index: int, disable: bool
) -> None:
    def mutate(config: dict[str, Any]) -> dict[str, Any]:
        if disable:
            return stash_matcher_group(config, event_name, index)
        return restore_matcher_group(config, event_name, index)

    config_service.write_config_file(path, SETTINGS_SCHEMA, mutate)


def remove_hook(
    config_service: ConfigService, path: Path, event_name: str, index: int, stashed: bool
) -> None:
    config_service.write_config_file(
        path,
        SETTINGS_SCHEMA,
        lambda config: remove_matcher_group(config, event_name, index, stashed=stashed),
    )


def add_hook(
    config_service: ConfigService,
    path: Path,
    event_name: str,
    group: dict[str, Any],
    stashed: bool = False,
) -> None:
    config_service.validate_entry(path, MATCHER_GROUP_SCHEMA, group)
    config_service.write_config_file(
        path,
        SETTINGS_SCHEMA,
        lambda config: append_matcher_group(config, event_name, group, stashed=stashed),
    )
