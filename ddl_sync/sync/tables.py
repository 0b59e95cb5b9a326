"""Table-level sync: create missing tables, rename tables gone from source."""

from ddl_sync.ddl.constraints import build_constraint
from ddl_sync.ddl.identifiers import qualified, quote_ident
from ddl_sync.ddl.sorter import cycle_comment, dependency_order, extract_self_referencing_constraints
from ddl_sync.ddl.tables import build_table
from ddl_sync.models.schema import TableDefinition
from ddl_sync.sync.base import SyncOperations, diff_entities


class TableOperations(SyncOperations):
    """Creates source-only tables in dependency order and renames
    target-only tables. Tables present in both schemas are left to the
    column, constraint and index engines.
    """

    entity = "table"

    async def missing_tables(self) -> list[TableDefinition]:
        source, target = await self.fetch_tables()
        return diff_entities(source, target, key=lambda t: t.name, signature=lambda t: None).to_create

    async def generate_operations(self) -> list[str]:
        source, target = await self.fetch_tables()
        diff = diff_entities(source, target, key=lambda t: t.name, signature=lambda t: None)
        statements: list[str] = []

        order = dependency_order(diff.to_create)
        statements.extend(cycle_comment(order.cyclic))
        for table in order.tables:
            self.logger.debug("Creating table %s", table.name)
            statements.append(f"-- Create missing table {table.name}")
            statements.append(build_table(table, self.target_schema))

        for table in diff.to_drop:
            backup = self.namer.dropped(table.name)
            statements.extend([
                self.missing_in_source(f"Table {table.name}"),
                "-- Renaming table to preserve data before manual drop",
                f"ALTER TABLE {qualified(self.target_schema, table.name)} RENAME TO {quote_ident(backup)};",
                f"-- TODO: Manually drop table {self.target_schema}.{backup} "
                "after confirming data is no longer needed",
                "",
            ])

        return statements

    async def generate_self_referencing_operations(self) -> list[str]:
        """Self-referencing foreign keys of the tables created above."""
        statements: list[str] = []
        for ref in extract_self_referencing_constraints(await self.missing_tables()):
            statements.append(
                f"-- Self-referencing constraint {ref.constraint.name} on table {ref.table_name}"
            )
            statements.append(build_constraint(ref.constraint, self.target_schema, ref.table_name))
            statements.append("")
        return statements
