"""Table constraint rendering."""

import logging

from ddl_sync.ddl.identifiers import qualified, quote_ident, quote_list
from ddl_sync.models.schema import ConstraintDefinition, ConstraintType

logger = logging.getLogger("ddl-sync.constraints")

CHECK_PLACEHOLDER = "/* TODO: Add check condition */"

# Order in which new constraints are added to an existing table
CREATION_ORDER = (
    ConstraintType.PRIMARY_KEY,
    ConstraintType.UNIQUE,
    ConstraintType.CHECK,
    ConstraintType.FOREIGN_KEY,
)


def creation_rank(constraint: ConstraintDefinition) -> int:
    for rank, kind in enumerate(CREATION_ORDER):
        if constraint.kind == kind:
            return rank
    return len(CREATION_ORDER)


def _deferral(constraint: ConstraintDefinition) -> str:
    if not constraint.deferrable:
        return ""
    return " DEFERRABLE INITIALLY DEFERRED" if constraint.initially_deferred else " DEFERRABLE"


def build_constraint(constraint: ConstraintDefinition, schema: str, table_name: str) -> str:
    """Render ALTER TABLE ... ADD CONSTRAINT for one constraint.

    Foreign keys reference a table in the same ``schema``. A foreign key
    without reference information, or an unknown kind, yields a TODO
    comment rather than a statement.

    Args:
        constraint: The constraint definition.
        schema: Schema of the owning table.
        table_name: Owning table.

    Returns:
        A terminated statement or a ``--`` comment line.
    """
    name = quote_ident(constraint.name)
    prefix = f"ALTER TABLE {qualified(schema, table_name)} ADD CONSTRAINT {name}"
    columns = quote_list(constraint.columns)

    if constraint.kind == ConstraintType.PRIMARY_KEY:
        return f"{prefix} PRIMARY KEY ({columns}){_deferral(constraint)};"

    if constraint.kind == ConstraintType.UNIQUE:
        return f"{prefix} UNIQUE ({columns}){_deferral(constraint)};"

    if constraint.kind == ConstraintType.FOREIGN_KEY:
        ref = constraint.references
        if ref is None:
            logger.warning(
                "Foreign key %s on %s.%s has no reference information",
                constraint.name, schema, table_name
            )
            return f"-- TODO: Foreign key constraint {name} - missing reference information"

        sql = (
            f"{prefix} FOREIGN KEY ({columns}) "
            f"REFERENCES {qualified(schema, ref.table)} ({quote_ident(ref.column)})"
        )
        if constraint.on_delete:
            sql += f" ON DELETE {constraint.on_delete.value}"
        if constraint.on_update:
            sql += f" ON UPDATE {constraint.on_update.value}"
        return sql + _deferral(constraint) + ";"

    if constraint.kind == ConstraintType.CHECK:
        return f"{prefix} CHECK ({constraint.check_clause or CHECK_PLACEHOLDER});"

    logger.warning("Unsupported constraint type %s for %s", constraint.kind, constraint.name)
    return f"-- TODO: Unsupported constraint type: {constraint.kind}"


def build_drop_constraint(constraint: ConstraintDefinition, schema: str, table_name: str) -> str:
    return (
        f"ALTER TABLE {qualified(schema, table_name)} "
        f"DROP CONSTRAINT {quote_ident(constraint.name)};"
    )
