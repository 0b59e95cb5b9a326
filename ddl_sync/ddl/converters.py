"""Raw catalog rows to normalized definitions.

Rows arrive as plain mappings keyed by the column aliases used in
:mod:`ddl_sync.services.queries`. Optional fields may be absent or None;
a row that is not a mapping or lacks a required key raises
:class:`IntrospectionError` instead of producing wrong DDL.
"""

import re
from collections.abc import Mapping
from typing import Any, Iterable, Optional

from ddl_sync.ddl.indexes import (
    extract_index_columns,
    extract_index_method,
    extract_index_options,
    extract_where_clause,
)
from ddl_sync.models.schema import (
    ColumnDefinition,
    ConstraintDefinition,
    ConstraintType,
    ForeignKeyReference,
    FunctionDefinition,
    IdentityGeneration,
    IndexDefinition,
    ReferentialAction,
    RoutineKind,
    SequenceDefinition,
    TableDefinition,
    TriggerDefinition,
)
from ddl_sync.utils.exceptions import IntrospectionError

# information_schema exposes NOT NULL as CHECK constraints named <oid>_<oid>_<n>_not_null
_NOT_NULL_CHECK = re.compile(r"^\d+_\d+_\d+_not_null$")

_EVENT_ORDER = {"INSERT": 0, "UPDATE": 1, "DELETE": 2, "TRUNCATE": 3}


def _require(row: Any, keys: tuple[str, ...], kind: str) -> Mapping:
    if not isinstance(row, Mapping):
        raise IntrospectionError(
            f"Invalid {kind} row: expected a mapping, got {type(row).__name__}",
            details={"kind": kind}
        )
    missing = [k for k in keys if row.get(k) is None]
    if missing:
        raise IntrospectionError(
            f"Invalid {kind} row: missing {', '.join(missing)}",
            details={"kind": kind, "missing": missing, "keys": sorted(row.keys())}
        )
    return row


def _yes(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return isinstance(value, str) and value.upper() in ("YES", "Y", "TRUE", "T")


def _nullable(value: Any) -> bool:
    # unknown nullability renders without NOT NULL
    return True if value is None else _yes(value)


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    return text or None


def _optional_int(value: Any) -> Optional[int]:
    return int(value) if value is not None else None


def _action(value: Any) -> Optional[ReferentialAction]:
    if not value:
        return None
    try:
        return ReferentialAction(str(value).upper())
    except ValueError:
        return None


def _constraint_kind(row: Mapping) -> str:
    kind = str(row["constraint_type"]).upper()
    if kind == ConstraintType.CHECK.value and _NOT_NULL_CHECK.match(row["constraint_name"]):
        return ConstraintType.NOT_NULL.value
    return kind


def column_from_row(row: Any) -> ColumnDefinition:
    row = _require(row, ("column_name", "data_type"), "column")
    generation = _optional_str(row.get("identity_generation"))
    return ColumnDefinition(
        name=row["column_name"],
        data_type=row["data_type"],
        udt_name=_optional_str(row.get("udt_name")),
        nullable=_nullable(row.get("is_nullable")),
        default=_optional_str(row.get("column_default")),
        max_length=_optional_int(row.get("character_maximum_length")),
        numeric_precision=_optional_int(row.get("numeric_precision")),
        numeric_scale=_optional_int(row.get("numeric_scale")),
        ordinal_position=int(row.get("ordinal_position") or 0),
        is_identity=_yes(row.get("is_identity")),
        identity_generation=IdentityGeneration(generation.upper()) if generation else None,
        is_generated=str(row.get("is_generated") or "NEVER").upper() == "ALWAYS",
        generation_expression=_optional_str(row.get("generation_expression")),
        comment=_optional_str(row.get("column_comment")),
    )


def constraint_from_row(row: Any) -> ConstraintDefinition:
    """Convert a constraint row.

    ``column_names`` is split on ``,`` verbatim; surrounding whitespace in
    the aggregated string is kept.
    """
    row = _require(row, ("constraint_name", "constraint_type"), "constraint")
    column_names = row.get("column_names")
    foreign_table = row.get("foreign_table_name")

    references = None
    if foreign_table:
        references = ForeignKeyReference(
            table=foreign_table,
            column=row.get("foreign_column_name") or "id"
        )

    return ConstraintDefinition(
        name=row["constraint_name"],
        kind=_constraint_kind(row),
        columns=column_names.split(",") if column_names else [],
        references=references,
        check_clause=_optional_str(row.get("check_clause")),
        deferrable=_yes(row.get("is_deferrable")),
        initially_deferred=_yes(row.get("initially_deferred")),
        on_delete=_action(row.get("delete_rule")),
        on_update=_action(row.get("update_rule")),
    )


def index_from_row(row: Any) -> IndexDefinition:
    row = _require(row, ("indexname", "indexdef"), "index")
    indexdef = row["indexdef"]
    method = _optional_str(row.get("index_type")) or extract_index_method(indexdef) or "btree"
    return IndexDefinition(
        name=row["indexname"],
        table_name=row.get("tablename") or "",
        schema_name=row.get("schemaname") or "",
        columns=extract_index_columns(indexdef),
        is_unique=_yes(row.get("is_unique")),
        is_primary=_yes(row.get("is_primary")),
        method=method.lower(),
        where_clause=extract_where_clause(indexdef),
        options=extract_index_options(indexdef),
        definition=indexdef,
    )


def sequence_from_row(row: Any, schema: Optional[str] = None) -> SequenceDefinition:
    row = _require(row, ("sequence_name",), "sequence")
    values = {
        field: str(row[key])
        for field, key in (
            ("data_type", "data_type"),
            ("start_value", "start_value"),
            ("min_value", "minimum_value"),
            ("max_value", "maximum_value"),
            ("increment", "increment"),
        )
        if row.get(key) is not None
    }
    return SequenceDefinition(
        name=row["sequence_name"],
        schema_name=row.get("sequence_schema") or schema or "",
        cycle=_yes(row.get("cycle_option")),
        comment=_optional_str(row.get("sequence_comment")),
        **values,
    )


def table_from_rows(
    table_row: Any,
    schema: str,
    columns: Iterable[Any] = (),
    constraints: Iterable[Any] = (),
    indexes: Iterable[Any] = (),
    sequences: Iterable[Any] = (),
) -> TableDefinition:
    """Assemble a table definition from its own row and its child rows."""
    table_row = _require(table_row, ("table_name",), "table")
    return TableDefinition(
        name=table_row["table_name"],
        schema_name=table_row.get("table_schema") or schema,
        columns=[column_from_row(r) for r in columns],
        constraints=[constraint_from_row(r) for r in constraints],
        indexes=[index_from_row(r) for r in indexes],
        sequences=[sequence_from_row(r, schema) for r in sequences],
        comment=_optional_str(table_row.get("table_comment")),
    )


def function_from_row(row: Any, schema: Optional[str] = None) -> FunctionDefinition:
    row = _require(row, ("function_name",), "function")
    routine_type = str(row.get("routine_type") or "f").upper()
    kind = RoutineKind.PROCEDURE if routine_type in ("P", "PROCEDURE") else RoutineKind.FUNCTION
    return FunctionDefinition(
        name=row["function_name"],
        schema_name=row.get("function_schema") or schema or "",
        kind=kind,
        arguments=row.get("arguments") or "",
        return_type=_optional_str(row.get("return_type")),
        language=_optional_str(row.get("language_name")),
        definition=_optional_str(row.get("full_definition")),
        comment=_optional_str(row.get("function_comment")),
    )


def triggers_from_rows(rows: Iterable[Any], schema: Optional[str] = None) -> list[TriggerDefinition]:
    """Merge per-event trigger rows into one definition per trigger.

    information_schema.triggers returns a row for every event a trigger
    fires on; the merged definition lists the events in INSERT, UPDATE,
    DELETE, TRUNCATE order. Output follows first appearance.
    """
    grouped: dict[tuple[str, str], dict[str, Any]] = {}
    for row in rows:
        row = _require(row, ("trigger_name", "event_object_table"), "trigger")
        key = (row["event_object_table"], row["trigger_name"])
        entry = grouped.get(key)
        if entry is None:
            entry = grouped[key] = {"row": row, "events": []}
        event = _optional_str(row.get("event_manipulation"))
        if event and event.upper() not in entry["events"]:
            entry["events"].append(event.upper())

    triggers = []
    for (table_name, name), entry in grouped.items():
        row = entry["row"]
        triggers.append(TriggerDefinition(
            name=name,
            table_name=table_name,
            schema_name=row.get("event_object_schema") or schema or "",
            events=sorted(entry["events"], key=lambda e: _EVENT_ORDER.get(e, len(_EVENT_ORDER))),
            timing=str(row.get("action_timing") or "BEFORE").upper(),
            orientation=str(row.get("action_orientation") or "ROW").upper(),
            action_statement=_optional_str(row.get("action_statement")),
            condition=_optional_str(row.get("action_condition")),
            definition=_optional_str(row.get("full_definition")),
            comment=_optional_str(row.get("trigger_comment")),
        ))
    return triggers
