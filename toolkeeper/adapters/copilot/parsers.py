"""Readers for Copilot's ``mcp.json`` and its ``.github`` markdown files.

Agents map to skills and prompts/instructions to custom prompts. Like the
other parsers these never raise: unreadable markdown is skipped, a broken
``mcp.json`` becomes a single Error tool.
"""

from pathlib import Path
from typing import Any, Optional

from toolkeeper.adapters.copilot.paths import (
    AGENT_SUFFIX,
    GLOBAL_INSTRUCTIONS,
    INSTRUCTIONS_SUFFIX,
    MCP_SCHEMA,
    PROMPT_SUFFIX,
)
from toolkeeper.adapters.markdown_tools import read_markdown
from toolkeeper.fileio import FileStore
from toolkeeper.frontmatter import Frontmatter, extract_frontmatter, optional_str
from toolkeeper.models import (
    ConfigScope,
    CustomPromptTool,
    McpServerTool,
    SkillTool,
    Tool,
    ToolKind,
    ToolSource,
    ToolStatus,
    error_tool,
)
from toolkeeper.schema import SchemaService

USER_INVOKABLE = "user-invokable"

_OWNED_FIELDS = {"command", "args", "env", "url"}


def _server_tool(name: str, config: dict[str, Any], scope: ConfigScope, path: Path) -> McpServerTool:
    transport = config.get("type") or ("http" if config.get("url") else "stdio")
    # mcp.json has no disabled flag; a listed server is always on.
    return McpServerTool(
        id=f"mcp:copilot:{scope.value}:{name}",
        name=name,
        scope=scope,
        status=ToolStatus.ENABLED,
        source=ToolSource(file_path=path),
        command=config.get("command"),
        args=list(config.get("args") or []),
        env=dict(config.get("env") or {}),
        transport=transport,
        url=config.get("url"),
        extra={key: value for key, value in config.items() if key not in _OWNED_FIELDS},
    )


def parse_mcp_json(
    file_store: FileStore, schemas: SchemaService, path: Path, scope: ConfigScope
) -> list[Tool]:
    result = file_store.read_json(path)
    detail = result.error
    if result.success and result.data is not None:
        validation = schemas.validate(MCP_SCHEMA, result.data)
        detail = None if validation.success else validation.message

    if detail is not None:
        return [
            error_tool(
                ToolKind.MCP_SERVER,
                tool_id=f"mcp-error:copilot:{scope.value}:{path}",
                name=f"MCP config error ({scope.value})",
                scope=scope,
                detail=detail,
                file_path=path,
            )
        ]
    if result.data is None:
        return []

    servers = result.data.get("servers") or {}
    return [_server_tool(name, config, scope, path) for name, config in servers.items()]


def _markdown(file_store: FileStore, path: Path) -> Optional[tuple[str, Optional[Frontmatter]]]:
    content = read_markdown(file_store, path)
    if content is None:
        return None
    frontmatter = extract_frontmatter(content)
    if frontmatter is not None and not frontmatter.valid:
        frontmatter = None
    return content, frontmatter


def is_user_invokable(data: dict[str, Any]) -> bool:
    value = data.get(USER_INVOKABLE)
    if value is False:
        return False
    return not (isinstance(value, str) and value.strip().lower() == "false")


def parse_agents_dir(file_store: FileStore, agents_dir: Path, scope: ConfigScope) -> list[SkillTool]:
    tools: list[SkillTool] = []
    for filename in file_store.list_files(agents_dir, AGENT_SUFFIX):
        path = agents_dir / filename
        parsed = _markdown(file_store, path)
        if parsed is None:
            continue
        content, frontmatter = parsed
        data = frontmatter.data if frontmatter is not None else {}
        base_name = filename[: -len(AGENT_SUFFIX)]
        tools.append(
            SkillTool(
                id=f"skill:{scope.value}:{base_name}",
                name=optional_str(data, "name") or base_name,
                description=optional_str(data, "description"),
                scope=scope,
                status=ToolStatus.ENABLED if is_user_invokable(data) else ToolStatus.DISABLED,
                source=ToolSource(file_path=path),
                model=optional_str(data, "model"),
                allowed_tools=optional_str(data, "tools"),
                body=frontmatter.body if frontmatter is not None else content,
            )
        )
    return sorted(tools, key=lambda tool: tool.name.lower())


def parse_prompts_dir(
    file_store: FileStore, prompts_dir: Path, scope: ConfigScope
) -> list[CustomPromptTool]:
    tools: list[CustomPromptTool] = []
    for filename in file_store.list_files(prompts_dir, PROMPT_SUFFIX):
        path = prompts_dir / filename
        parsed = _markdown(file_store, path)
        if parsed is None:
            continue
        content, frontmatter = parsed
        data = frontmatter.data if frontmatter is not None else {}
        name = filename[: -len(PROMPT_SUFFIX)]
        tools.append(
            CustomPromptTool(
                id=f"prompt:copilot:{scope.value}:{name}",
                name=name,
                description=optional_str(data, "description"),
                scope=scope,
                status=ToolStatus.ENABLED,
                source=ToolSource(file_path=path),
                argument_hint=optional_str(data, "argument-hint"),
                mode=optional_str(data, "mode") or optional_str(data, "agent"),
                body=frontmatter.body if frontmatter is not None else content,
            )
        )
    return sorted(tools, key=lambda tool: tool.name.lower())


def parse_instructions(
    file_store: FileStore,
    global_file: Path,
    instructions_dir: Path,
    scope: ConfigScope,
) -> list[CustomPromptTool]:
    """The always-on ``copilot-instructions.md`` plus every ``*.instructions.md``."""
    tools: list[CustomPromptTool] = []

    parsed = _markdown(file_store, global_file)
    if parsed is not None:
        content, frontmatter = parsed
        tools.append(
            CustomPromptTool(
                id=f"instruction:copilot:{scope.value}:{GLOBAL_INSTRUCTIONS}",
                name=GLOBAL_INSTRUCTIONS,
                description="Always-on Copilot instructions (applies to all chats)",
                scope=scope,
                status=ToolStatus.ENABLED,
                source=ToolSource(file_path=global_file),
                body=frontmatter.body if frontmatter is not None else content,
            )
        )

    for filename in file_store.list_files(instructions_dir, INSTRUCTIONS_SUFFIX):
        path = instructions_dir / filename
        parsed = _markdown(file_store, path)
        if parsed is None:
            continue
        content, frontmatter = parsed
        data = frontmatter.data if frontmatter is not None else {}
        name = filename[: -len(INSTRUCTIONS_SUFFIX)]
        apply_to = optional_str(data, "applyTo")
        description = optional_str(data, "description")
        if description is None and apply_to:
            description = f"Applies to: {apply_to}"
        tools.append(
            CustomPromptTool(
                id=f"instruction:copilot:{scope.value}:{name}",
                name=name,
                description=description,
                scope=scope,
                status=ToolStatus.ENABLED,
                source=ToolSource(file_path=path),
                apply_to=apply_to,
                body=frontmatter.body if frontmatter is not None else content,
            )
        )
    return sorted(tools, key=lambda tool: tool.name.lower())
