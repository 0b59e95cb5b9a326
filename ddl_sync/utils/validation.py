"""Input validation helpers.

All helpers raise :class:`SchemaValidationError` with the offending value in
``details`` so the CLI can report it without further context.
"""

import re

from ddl_sync.utils.constants import ErrorCode, MAX_IDENTIFIER_LENGTH
from ddl_sync.utils.exceptions import SchemaValidationError

IDENTIFIER_PATTERN = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


def _validate_name(value: str | None, label: str, field: str) -> None:
    if not value or not isinstance(value, str):
        raise SchemaValidationError(
            f"{label} is required and must be a string",
            field=field,
            details={field: value}
        )

    if len(value) > MAX_IDENTIFIER_LENGTH:
        raise SchemaValidationError(
            f"{label} must be {MAX_IDENTIFIER_LENGTH} characters or less",
            field=field,
            details={field: value}
        )

    if not IDENTIFIER_PATTERN.match(value):
        raise SchemaValidationError(
            f"{label} must start with a letter or underscore and contain only "
            "letters, numbers, and underscores",
            field=field,
            details={field: value}
        )


def validate_schema_name(schema: str | None) -> None:
    """Validate a schema name supplied on the command line.

    Raises:
        SchemaValidationError: If the name is empty, too long or malformed.
    """
    _validate_name(schema, "Schema name", "schema")


def validate_table_name(table_name: str | None) -> None:
    """Validate a table name."""
    _validate_name(table_name, "Table name", "table_name")


def validate_function_name(function_name: str | None) -> None:
    """Validate a function name."""
    _validate_name(function_name, "Function name", "function_name")


def validate_identifier(identifier: str | None, kind: str = "identifier") -> None:
    """Validate a generic SQL identifier.

    Already double-quoted identifiers are accepted as-is.

    Args:
        identifier: The identifier to check.
        kind: Human readable name used in the error message.

    Raises:
        SchemaValidationError: If the identifier is invalid.
    """
    if identifier and isinstance(identifier, str) and len(identifier) <= MAX_IDENTIFIER_LENGTH:
        if identifier.startswith('"') and identifier.endswith('"') and len(identifier) > 1:
            return
    _validate_name(identifier, kind, kind)


def validate_not_empty(items: list, label: str, schema: str) -> None:
    """Fail when a schema yields no objects of a required kind.

    Args:
        items: The fetched collection.
        label: Plural object kind, e.g. ``"tables"``.
        schema: Schema the collection was read from.

    Raises:
        SchemaValidationError: If ``items`` is empty.
    """
    if not items:
        raise SchemaValidationError(
            f"No {label} found in schema '{schema}'",
            field="schema",
            code=ErrorCode.EMPTY_SCHEMA,
            details={
                "schema": schema,
                "suggestion": f"Check that '{schema}' is the schema you meant and that it contains {label}"
            }
        )


def schema_not_found(schema: str, available: list[str]) -> SchemaValidationError:
    """Build the error raised when a schema does not exist.

    Args:
        schema: The requested schema.
        available: Schemas that do exist in the database.

    Returns:
        The error to raise.
    """
    listing = ", ".join(available) if available else "none"
    return SchemaValidationError(
        f"Schema '{schema}' does not exist. Available schemas: {listing}",
        field="schema",
        code=ErrorCode.SCHEMA_NOT_FOUND,
        details={
            "schema": schema,
            "suggestion": "Use one of the available schemas or create the schema first",
            "available_schemas": list(available)
        }
    )
