"""Parsers for tools stored as markdown files: skills, commands and prompts.

Parsers never raise. A malformed entry is still returned, with a Warning or
Error status and a detail, so the caller can show and repair it.
"""

from __future__ import annotations

import logging
from pathlib import Path

from toolkeeper.fileio import FileStore
from toolkeeper.frontmatter import extract_frontmatter, optional_str
from toolkeeper.models import (
    DISABLED_SUFFIX,
    CommandTool,
    ConfigScope,
    CustomPromptTool,
    SkillTool,
    ToolSource,
    ToolStatus,
)
from toolkeeper.schema import SchemaService

logger = logging.getLogger(__name__)

SKILL_FILE = "SKILL.md"
MARKDOWN_SUFFIX = ".md"


def strip_disabled(name: str) -> str:
    return name[: -len(DISABLED_SUFFIX)] if name.endswith(DISABLED_SUFFIX) else name


def read_markdown(file_store: FileStore, path: Path) -> str | None:
    result = file_store.read_text(path)
    if not result.success:
        logger.warning("cannot read %s: %s", path, result.error)
    return result.data


def parse_skill_directory(
    file_store: FileStore, schemas: SchemaService, skill_dir: Path, scope: ConfigScope
) -> SkillTool:
    disabled = skill_dir.name.endswith(DISABLED_SUFFIX)
    name = strip_disabled(skill_dir.name)
    skill_file = skill_dir / SKILL_FILE
    source = ToolSource(file_path=skill_file, is_directory=True, directory_path=skill_dir)

    def warning(detail: str, body: str | None = None, label: str = name) -> SkillTool:
        return SkillTool(
            id=f"skill:{scope.value}:{name}",
            name=label,
            scope=scope,
            status=ToolStatus.WARNING,
            status_detail=detail,
            source=source,
            body=body,
        )

    content = read_markdown(file_store, skill_file)
    if content is None:
        return warning(f"Missing {SKILL_FILE}")

    frontmatter = extract_frontmatter(content)
    if frontmatter is None:
        return warning(f"No frontmatter in {SKILL_FILE}", body=content)
    if not frontmatter.valid:
        return warning(f"Invalid frontmatter: {frontmatter.error}", body=frontmatter.body)

    validation = schemas.validate("skill-frontmatter", frontmatter.data)
    if not validation.success:
        label = optional_str(frontmatter.data, "name") or name
        return warning(
            f"Invalid frontmatter: {validation.message}", body=frontmatter.body, label=label
        )

    data = frontmatter.data
    skill_name = str(data["name"])
    return SkillTool(
        id=f"skill:{scope.value}:{skill_name}",
        name=skill_name,
        description=optional_str(data, "description"),
        scope=scope,
        status=ToolStatus.DISABLED if disabled else ToolStatus.ENABLED,
        source=source,
        allowed_tools=optional_str(data, "allowed-tools"),
        model=optional_str(data, "model"),
        body=frontmatter.body,
    )


def parse_skills_dir(
    file_store: FileStore, schemas: SchemaService, skills_dir: Path, scope: ConfigScope
) -> list[SkillTool]:
    return [
        parse_skill_directory(file_store, schemas, skills_dir / entry, scope)
        for entry in file_store.list_directories(skills_dir)
        if not entry.startswith(".")
    ]


def parse_command_file(
    file_store: FileStore, schemas: SchemaService, path: Path, scope: ConfigScope
) -> CommandTool:
    disabled = path.name.endswith(DISABLED_SUFFIX)
    name = strip_disabled(path.name)[: -len(MARKDOWN_SUFFIX)]
    tool_id = f"command:{scope.value}:{name}"
    source = ToolSource(file_path=path)

    content = read_markdown(file_store, path)
    if content is None:
        return CommandTool(
            id=tool_id,
            name=name,
            scope=scope,
            status=ToolStatus.ERROR,
            status_detail="File not readable",
            source=source,
        )

    status = ToolStatus.DISABLED if disabled else ToolStatus.ENABLED
    frontmatter = extract_frontmatter(content)
    if frontmatter is None or not frontmatter.valid:
        body = frontmatter.body if frontmatter is not None else content
        return CommandTool(id=tool_id, name=name, scope=scope, status=status, source=source, body=body)

    # Commands stay usable with unexpected front matter; the schema only informs.
    validation = schemas.validate("command-frontmatter", frontmatter.data)
    if not validation.success:
        logger.debug("command %s front matter: %s", path, validation.message)

    data = frontmatter.data
    return CommandTool(
        id=tool_id,
        name=name,
        description=optional_str(data, "description"),
        scope=scope,
        status=status,
        source=source,
        argument_hint=optional_str(data, "argument-hint"),
        model=optional_str(data, "model"),
        allowed_tools=optional_str(data, "allowed-tools"),
        body=frontmatter.body,
    )


def _command_files(directory: Path) -> list[Path]:
    try:
        entries = sorted(directory.iterdir())
    except (FileNotFoundError, NotADirectoryError):
        return []

    found: list[Path] = []
    for entry in entries:
        if entry.name.startswith("."):
            continue
        if entry.is_dir():
            found.extend(_command_files(entry))
        elif entry.is_file() and strip_disabled(entry.name).endswith(MARKDOWN_SUFFIX):
            found.append(entry)
    return found


def parse_commands_dir(
    file_store: FileStore, schemas: SchemaService, commands_dir: Path, scope: ConfigScope
) -> list[CommandTool]:
    """Subdirectories only organise commands; each markdown file is one command."""
    return [
        parse_command_file(file_store, schemas, path, scope)
        for path in _command_files(commands_dir)
    ]


def parse_prompt_file(
    file_store: FileStore, path: Path, scope: ConfigScope, adapter_id: str
) -> CustomPromptTool | None:
    content = read_markdown(file_store, path)
    if content is None:
        return None

    name = path.name[: -len(MARKDOWN_SUFFIX)]
    frontmatter = extract_frontmatter(content)
    data = frontmatter.data if frontmatter is not None else {}
    return CustomPromptTool(
        id=f"prompt:{adapter_id}:{scope.value}:{name}",
        name=name,
        description=optional_str(data, "description"),
        scope=scope,
        status=ToolStatus.ENABLED,
        source=ToolSource(file_path=path),
        argument_hint=optional_str(data, "argument-hint"),
        body=frontmatter.body if frontmatter is not None else content,
    )


def parse_prompts_dir(
    file_store: FileStore, prompts_dir: Path, scope: ConfigScope, adapter_id: str
) -> list[CustomPromptTool]:
    tools = [
        tool
        for filename in file_store.list_files(prompts_dir, MARKDOWN_SUFFIX)
        if (tool := parse_prompt_file(file_store, prompts_dir / filename, scope, adapter_id))
        is not None
    ]
    return sorted(tools, key=lambda tool: tool.name.lower())
