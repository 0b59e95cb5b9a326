"""CREATE TABLE rendering with inline constraints and indexes."""

import logging
from typing import Optional

from ddl_sync.ddl.columns import build_column
from ddl_sync.ddl.constraints import build_constraint
from ddl_sync.ddl.identifiers import qualified
from ddl_sync.ddl.indexes import build_index
from ddl_sync.models.schema import (
    ConstraintDefinition,
    ConstraintType,
    IndexDefinition,
    TableDefinition,
)
from ddl_sync.utils.exceptions import GenerationError
from ddl_sync.utils.formatting import table_header

logger = logging.getLogger("ddl-sync.tables")


def inline_constraints(table: TableDefinition) -> list[ConstraintDefinition]:
    """Constraints emitted right after CREATE TABLE, deduplicated by name.

    NOT NULL lives on the column and self-referencing foreign keys are
    deferred until every table exists.
    """
    seen: set[str] = set()
    result = []
    for constraint in table.constraints:
        if constraint.kind == ConstraintType.NOT_NULL:
            continue
        if constraint.is_self_referencing(table.name):
            continue
        if constraint.name in seen:
            continue
        seen.add(constraint.name)
        result.append(constraint)
    return result


def standalone_indexes(table: TableDefinition) -> list[IndexDefinition]:
    """Indexes not already created by a PRIMARY KEY or UNIQUE constraint."""
    unique_names = {
        c.name for c in table.constraints if c.kind == ConstraintType.UNIQUE
    }
    seen: set[str] = set()
    result = []
    for index in table.indexes:
        if index.is_primary or index.name in unique_names:
            continue
        key = f"{index.schema_name or table.schema_name}.{index.name}"
        if key in seen:
            continue
        seen.add(key)
        result.append(index)
    return result


def build_create_table(table: TableDefinition, schema: Optional[str] = None) -> str:
    """Render the bare CREATE TABLE statement, columns in ordinal order."""
    schema = schema or table.schema_name
    columns = ",\n".join(
        "  " + build_column(col, schema, table.schema_name) for col in table.sorted_columns()
    )
    return f"CREATE TABLE {qualified(schema, table.name)} (\n{columns}\n);"


def build_table(table: TableDefinition, schema: Optional[str] = None) -> str:
    """Render a full table block.

    The block holds a banner, the optional table comment, CREATE TABLE,
    then the table constraints and indexes sections.

    Args:
        table: The table definition.
        schema: Schema to create the table in, defaults to the table's own.

    Returns:
        The block text, ending with a blank line.

    Raises:
        GenerationError: If any part of the table fails to render.
    """
    schema = schema or table.schema_name
    try:
        sql = table_header(schema, table.name)
        if table.comment:
            sql += f"-- Table: {table.comment}\n"

        sql += build_create_table(table, schema) + "\n\n"

        constraints = inline_constraints(table)
        if constraints:
            sql += "-- Table constraints\n"
            for constraint in constraints:
                sql += build_constraint(constraint, schema, table.name) + "\n"
            sql += "\n"

        indexes = standalone_indexes(table)
        if indexes:
            sql += "-- Indexes\n"
            for index in indexes:
                sql += build_index(index, schema, table.name) + "\n"
            sql += "\n"

        return sql
    except (TypeError, ValueError, AttributeError) as e:
        logger.error("Failed to generate table SQL for %s.%s: %s", schema, table.name, e)
        raise GenerationError(
            f"Failed to generate table SQL for {schema}.{table.name}: {e}",
            details={"schema": schema, "table": table.name}
        ) from e
