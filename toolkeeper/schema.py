import json
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator

from toolkeeper.models import ValidationIssue, ValidationResult

SCHEMAS_DIR = Path(__file__).resolve().parent / "schemas"


def format_schema_error(error: Any) -> ValidationIssue:
    path = ".".join([str(part) for part in error.absolute_path])
    return ValidationIssue(message=str(error.message), path=path)


class SchemaService:
    """Named JSON Schemas, validated on demand.

    Validation never rewrites the payload and the bundled schemas leave
    ``additionalProperties`` open, so fields this tool does not know about
    pass through untouched.
    """

    def __init__(self) -> None:
        self._schemas: dict[str, dict[str, Any]] = {}
        self._validators: dict[str, Draft202012Validator] = {}

    @classmethod
    def create_default(cls) -> "SchemaService":
        service = cls()
        service.register_directory(SCHEMAS_DIR)
        return service

    def register(self, kind: str, schema: dict[str, Any]) -> None:
        Draft202012Validator.check_schema(schema)
        self._schemas[kind] = schema
        self._validators.pop(kind, None)

    def register_directory(self, path: Path) -> None:
        for schema_path in sorted(path.glob("*.json")):
            schema = json.loads(schema_path.read_text(encoding="utf-8"))
            self.register(schema_path.stem, schema)

    def has_schema(self, kind: str) -> bool:
        return kind in self._schemas

    def kinds(self) -> list[str]:
        return sorted(self._schemas)

    def validate(self, kind: str, data: Any) -> ValidationResult:
        validator = self._validator(kind)
        errors = sorted(
            validator.iter_errors(data),
            key=lambda error: [str(part) for part in error.absolute_path],
        )
        if not errors:
            return ValidationResult(success=True, data=data)
        return ValidationResult(
            success=False,
            issues=[format_schema_error(error) for error in errors],
        )

    def _validator(self, kind: str) -> Draft202012Validator:
        cached = self._validators.get(kind)
        if cached is not None:
            return cached
        schema = self._schemas.get(kind)
        if schema is None:
            available = ", ".join(self.kinds())
            raise KeyError(f'Schema "{kind}" is not registered. Available: {available}')
        validator = Draft202012Validator(schema)
        self._validators[kind] = validator
        return validator
