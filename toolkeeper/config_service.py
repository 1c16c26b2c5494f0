import logging
from copy import deepcopy
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Optional

from toolkeeper.backup import BackupService
from toolkeeper.errors import ConfigFileNotFoundError, ConfigReadError, ConfigValidationError
from toolkeeper.fileio import FileStore
from toolkeeper.models import (
    ConfigReadResult,
    ConfigScope,
    ScopeEntry,
    Tool,
    ToolKind,
    WriteOptions,
    error_tool,
)
from toolkeeper.schema import SchemaService
from toolkeeper.scopes import APPLICABLE_SCOPES, ScopePolicy, canonical_key

logger = logging.getLogger(__name__)

Mutation = Callable[[dict[str, Any]], dict[str, Any]]
Reader = Callable[[Path], ConfigReadResult[Any]]
Writer = Callable[[Path, Any], None]


class ConfigService:
    """Read tools across scopes and write config files through one pipeline.

    Every structured write re-reads the file, applies the mutation to a copy,
    validates the candidate, snapshots the previous contents and only then
    replaces the file. A failure at any step leaves the file untouched.
    """

    def __init__(
        self,
        file_store: FileStore,
        backup: BackupService,
        schemas: SchemaService,
        registry: Any,
        scope_policy: Optional[ScopePolicy] = None,
    ) -> None:
        self.file_store = file_store
        self.backup = backup
        self.schemas = schemas
        self.registry = registry
        self.scope_policy = scope_policy or ScopePolicy()

    def read_all_tools(self, kind: ToolKind) -> list[Tool]:
        adapter = self.registry.active
        if adapter is None or kind not in adapter.supported_kinds:
            return []

        tools: list[Tool] = []
        for scope in APPLICABLE_SCOPES[kind]:
            try:
                tools.extend(adapter.read_tools(kind, scope))
            except Exception as exc:
                logger.warning("failed to read %s tools in %s scope: %s", kind.value, scope.value, exc)
                tools.append(
                    error_tool(
                        kind,
                        tool_id=f"{kind.value}:error:{scope.value}",
                        name=f"Error reading {scope.value} {kind.value}",
                        scope=scope,
                        detail=str(exc),
                        file_path=Path(""),
                    )
                )
        return self.resolve_scopes(tools)

    def read_tools_by_scope(self, kind: ToolKind, scope: ConfigScope) -> list[Tool]:
        adapter = self.registry.active
        if adapter is None or kind not in adapter.supported_kinds:
            return []
        return list(adapter.read_tools(kind, scope))

    def resolve_scopes(self, tools: list[Tool]) -> list[Tool]:
        """Collapse same-identity tools across scopes to the winning scope.

        The winning scope is the one that ranks first in the policy. Only
        occurrences from different scopes are merged: siblings within the
        winning scope (two hook groups with the same event and matcher, say)
        each stay a record of their own. Every record lists itself and the
        occurrences it shadows in ``scope_entries``.
        """
        groups: dict[str, list[Tool]] = {}
        for tool in tools:
            groups.setdefault(canonical_key(tool), []).append(tool)

        resolved: list[Tool] = []
        for group in groups.values():
            winning_scope = self.scope_policy.winner(group).scope
            for tool in group:
                if tool.scope != winning_scope:
                    continue
                entries = tuple(
                    ScopeEntry(scope=item.scope, status=item.status, file_path=item.source.file_path)
                    for item in group
                    if item is tool or item.scope != winning_scope
                )
                resolved.append(replace(tool, scope_entries=entries, effective=True))
        return resolved

    def validate_entry(self, path: Path, schema_kind: str, entry: Any) -> None:
        """Reject a single entry (a server, a matcher group) before it is written to ``path``."""
        validation = self.schemas.validate(schema_kind, entry)
        if not validation.success:
            raise ConfigValidationError(
                path, schema_kind, [str(issue) for issue in validation.issues]
            )

    def write_config_file(
        self,
        path: Path,
        schema_kind: str,
        mutate: Mutation,
        options: Optional[WriteOptions] = None,
    ) -> dict[str, Any]:
        return self._run_pipeline(
            path,
            schema_kind,
            mutate,
            options,
            reader=self.file_store.read_json,
            writer=self.file_store.write_json,
        )

    def write_toml_config_file(
        self,
        path: Path,
        schema_kind: str,
        mutate: Mutation,
        options: Optional[WriteOptions] = None,
    ) -> dict[str, Any]:
        return self._run_pipeline(
            path,
            schema_kind,
            mutate,
            options,
            reader=self.file_store.read_toml,
            writer=self.file_store.write_toml,
        )

    def write_text_config_file(
        self, path: Path, content: str, options: Optional[WriteOptions] = None
    ) -> None:
        options = options or WriteOptions()
        if not options.create_if_missing and not self.file_store.exists(path):
            raise ConfigFileNotFoundError(path)
        if not options.skip_backup:
            self.backup.create_backup(path)
        self.file_store.write_text(path, content)
        logger.info("updated %s", path)

    def _run_pipeline(
        self,
        path: Path,
        schema_kind: str,
        mutate: Mutation,
        options: Optional[WriteOptions],
        reader: Reader,
        writer: Writer,
    ) -> dict[str, Any]:
        options = options or WriteOptions()

        current = reader(path)
        if not current.success:
            raise ConfigReadError(path, current.error or "unknown error")
        if current.is_missing:
            if not options.create_if_missing:
                raise ConfigFileNotFoundError(path)
            payload: Any = {}
        else:
            payload = current.data
        if not isinstance(payload, dict):
            raise ConfigValidationError(path, schema_kind, ["Config root must be an object"])

        candidate = mutate(deepcopy(payload))
        validation = self.schemas.validate(schema_kind, candidate)
        if not validation.success:
            raise ConfigValidationError(
                path, schema_kind, [str(issue) for issue in validation.issues]
            )

        if not options.skip_backup:
            self.backup.create_backup(path)
        writer(path, candidate)
        logger.info("updated %s", path)
        return candidate
