"""Constraint-level sync for tables present in both schemas."""

from ddl_sync.ddl.constraints import build_constraint, build_drop_constraint, creation_rank
from ddl_sync.ddl.identifiers import qualified, quote_ident
from ddl_sync.models.schema import ConstraintType
from ddl_sync.sync.base import SyncOperations, common_tables, diff_entities


class ConstraintOperations(SyncOperations):
    """Drops, adds and replaces table constraints.

    Constraints hold no data, so target-only constraints are dropped
    directly. All drops come first, then additions in primary key, unique,
    check, foreign key order so referenced keys exist, then replacements.
    NOT NULL is handled with the column.
    """

    entity = "constraint"

    async def generate_operations(self) -> list[str]:
        source, target = await self.fetch_tables()
        drops: list[str] = []
        creates: list[tuple[int, list[str]]] = []
        updates: list[str] = []

        for source_table, target_table in common_tables(source, target):
            table = source_table.name
            diff = diff_entities(
                [c for c in source_table.constraints if c.kind != ConstraintType.NOT_NULL],
                [c for c in target_table.constraints if c.kind != ConstraintType.NOT_NULL],
                key=lambda c: c.name,
                signature=lambda c: c.comparison_key(self.source_schema),
                target_signature=lambda c: c.comparison_key(self.target_schema),
            )

            for constraint in diff.to_drop:
                drops.extend([
                    self.missing_in_source(f"Constraint {constraint.name} on table {table}"),
                    build_drop_constraint(constraint, self.target_schema, table),
                    "",
                ])

            for constraint in diff.to_create:
                creates.append((creation_rank(constraint), [
                    f"-- Create missing {constraint.kind} constraint {constraint.name} on table {table}",
                    build_constraint(constraint, self.target_schema, table),
                    "",
                ]))

            for source_con, _ in diff.to_update:
                backup = self.namer.old(source_con.name)
                updates.extend([
                    f"-- Constraint {source_con.name} on table {table} differs between "
                    f"{self.source_schema} and {self.target_schema}",
                    "-- Renaming existing constraint before recreating it",
                    f"ALTER TABLE {qualified(self.target_schema, table)} "
                    f"RENAME CONSTRAINT {quote_ident(source_con.name)} TO {quote_ident(backup)};",
                    build_constraint(source_con, self.target_schema, table),
                    f"-- TODO: Drop constraint {backup} on {self.target_schema}.{table} "
                    "after confirming the new constraint is correct",
                    "",
                ])

        statements = list(drops)
        for _, block in sorted(creates, key=lambda item: item[0]):
            statements.extend(block)
        statements.extend(updates)
        return statements
