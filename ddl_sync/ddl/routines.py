"""Function, procedure and trigger rendering.

Routine bodies are opaque: definitions are copied from the catalog with
the source schema name swapped for the target schema.
"""

import logging
import re
from typing import Optional

from ddl_sync.ddl.identifiers import qualified, quote_ident
from ddl_sync.models.schema import FunctionDefinition, TriggerDefinition, mask_schema

logger = logging.getLogger("ddl-sync.routines")


def replace_schema(text: str, source_schema: str, target_schema: str) -> str:
    """Replace whole-word occurrences of ``source_schema``."""
    if not source_schema or source_schema == target_schema:
        return text
    return re.sub(rf"\b{re.escape(source_schema)}\b", lambda _: target_schema, text)


def normalize_definition(text: Optional[str], schema: str) -> Optional[str]:
    """Definition text with the owning schema masked, for comparison."""
    if text is None:
        return None
    return mask_schema(text, schema).strip()


def _terminate(sql: str) -> str:
    sql = sql.rstrip()
    return sql if sql.endswith(";") else sql + ";"


def build_function(
    function: FunctionDefinition,
    target_schema: str,
    source_schema: Optional[str] = None
) -> str:
    """Render the CREATE statement for a function or procedure.

    Returns:
        The retargeted definition terminated with ``;``, or a TODO comment
        when the catalog returned no definition.
    """
    if not function.definition:
        logger.warning("No definition available for %s %s", function.kind.value, function.signature)
        return f"-- TODO: Could not retrieve definition for {function.kind.value} {function.name}"
    source = source_schema or function.schema_name
    return _terminate(replace_schema(function.definition, source, target_schema))


def build_rename_function(function: FunctionDefinition, schema: str, new_name: str) -> str:
    return (
        f"ALTER {function.kind.value} {qualified(schema, function.name)}({function.arguments}) "
        f"RENAME TO {quote_ident(new_name)};"
    )


def function_signature(function: FunctionDefinition) -> tuple:
    """Fields compared across schemas for one overload."""
    return (
        function.key(),
        normalize_definition(function.return_type, function.schema_name),
        function.language,
        normalize_definition(function.definition, function.schema_name),
    )


def build_trigger(
    trigger: TriggerDefinition,
    target_schema: str,
    source_schema: Optional[str] = None
) -> str:
    """Render CREATE TRIGGER.

    Prefers the catalog's reconstructed definition; otherwise assembles the
    statement from timing, events, orientation, condition and action.
    """
    source = source_schema or trigger.schema_name

    if trigger.definition:
        return _terminate(replace_schema(trigger.definition, source, target_schema))

    if not trigger.action_statement:
        logger.warning("No definition available for trigger %s on %s", trigger.name, trigger.table_name)
        return f"-- TODO: Could not retrieve definition for TRIGGER {trigger.name}"

    events = " OR ".join(trigger.events) or "INSERT"
    lines = [
        f"CREATE TRIGGER {quote_ident(trigger.name)}",
        f"  {trigger.timing} {events}",
        f"  ON {qualified(target_schema, trigger.table_name)}",
        f"  FOR EACH {trigger.orientation}",
    ]
    if trigger.condition:
        lines.append(f"  WHEN ({trigger.condition})")
    lines.append(f"  {replace_schema(trigger.action_statement, source, target_schema)}")
    return _terminate("\n".join(lines))


def build_rename_trigger(trigger: TriggerDefinition, schema: str, new_name: str) -> str:
    return (
        f"ALTER TRIGGER {quote_ident(trigger.name)} ON {qualified(schema, trigger.table_name)} "
        f"RENAME TO {quote_ident(new_name)};"
    )


def trigger_signature(trigger: TriggerDefinition) -> tuple:
    schema = trigger.schema_name
    return (
        trigger.key(),
        tuple(trigger.events),
        trigger.timing,
        trigger.orientation,
        normalize_definition(trigger.condition, schema),
        normalize_definition(trigger.action_statement, schema),
        normalize_definition(trigger.definition, schema),
    )
