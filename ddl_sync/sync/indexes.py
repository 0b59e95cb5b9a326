"""Index-level sync for tables present in both schemas."""

from ddl_sync.ddl.identifiers import qualified, quote_ident
from ddl_sync.ddl.indexes import build_index
from ddl_sync.models.schema import ConstraintType, IndexDefinition, TableDefinition
from ddl_sync.sync.base import SyncOperations, common_tables, diff_entities


def _constraint_backed(table: TableDefinition) -> set[str]:
    return {
        c.name for c in table.constraints
        if c.kind in (ConstraintType.PRIMARY_KEY, ConstraintType.UNIQUE)
    }


def _standalone(table: TableDefinition, excluded: set[str]) -> list[IndexDefinition]:
    return [i for i in table.indexes if not i.is_primary and i.name not in excluded]


class IndexOperations(SyncOperations):
    """Creates, renames and replaces indexes.

    Primary key indexes and indexes backing UNIQUE or PRIMARY KEY
    constraints belong to the constraint engine.
    """

    entity = "index"

    async def generate_operations(self) -> list[str]:
        source, target = await self.fetch_tables()
        statements: list[str] = []

        for source_table, target_table in common_tables(source, target):
            table = source_table.name
            excluded = _constraint_backed(source_table) | _constraint_backed(target_table)
            diff = diff_entities(
                _standalone(source_table, excluded),
                _standalone(target_table, excluded),
                key=lambda i: i.name,
                signature=lambda i: i.comparison_key(),
            )

            for index in diff.to_drop:
                backup = self.namer.dropped(index.name)
                statements.extend([
                    self.missing_in_source(f"Index {index.name} on table {table}"),
                    f"ALTER INDEX {qualified(self.target_schema, index.name)} RENAME TO {quote_ident(backup)};",
                    f"-- TODO: Manually drop index {self.target_schema}.{backup} after confirming it is no longer needed",
                    "",
                ])

            for index in diff.to_create:
                statements.extend([
                    f"-- Create missing index {index.name} on table {table}",
                    build_index(index, self.target_schema, table),
                    "",
                ])

            for source_idx, _ in diff.to_update:
                backup = self.namer.old(source_idx.name)
                statements.extend([
                    f"-- Index {source_idx.name} on table {table} differs between "
                    f"{self.source_schema} and {self.target_schema}",
                    f"ALTER INDEX {qualified(self.target_schema, source_idx.name)} RENAME TO {quote_ident(backup)};",
                    build_index(source_idx, self.target_schema, table),
                    f"-- TODO: Drop index {self.target_schema}.{backup} after confirming the new index is correct",
                    "",
                ])

        return statements
