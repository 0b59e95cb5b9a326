"""Column-level sync for tables present in both schemas."""

from ddl_sync.ddl.columns import build_column, format_data_type
from ddl_sync.ddl.identifiers import qualified, quote_ident
from ddl_sync.models.schema import ColumnDefinition
from ddl_sync.sync.base import SyncOperations, common_tables, diff_entities


def describe_column(column: ColumnDefinition) -> str:
    parts = [format_data_type(column)]
    if not column.nullable:
        parts.append("NOT NULL")
    if column.default:
        parts.append(f"DEFAULT {column.default}")
    return " ".join(parts)


class ColumnOperations(SyncOperations):
    """Adds, renames and replaces columns.

    A changed column is renamed to a backup and re-added with the source
    definition; the type is never altered in place.
    """

    entity = "column"

    def _column_sql(self, column: ColumnDefinition) -> str:
        return build_column(column, self.target_schema, self.source_schema)

    async def generate_operations(self) -> list[str]:
        source, target = await self.fetch_tables()
        statements: list[str] = []

        for source_table, target_table in common_tables(source, target):
            diff = diff_entities(
                source_table.sorted_columns(),
                target_table.sorted_columns(),
                key=lambda c: c.name,
                signature=lambda c: c.comparison_key(self.source_schema),
                target_signature=lambda c: c.comparison_key(self.target_schema),
            )
            table_ref = qualified(self.target_schema, source_table.name)

            for column in diff.to_drop:
                backup = self.namer.dropped(column.name)
                statements.extend([
                    self.missing_in_source(f"Column {source_table.name}.{column.name}"),
                    "-- Renaming column to preserve data before manual drop",
                    f"ALTER TABLE {table_ref} RENAME COLUMN {quote_ident(column.name)} TO {quote_ident(backup)};",
                    f"-- TODO: Manually drop column {self.target_schema}.{source_table.name}.{backup} "
                    "after confirming data is no longer needed",
                    "",
                ])

            for column in diff.to_create:
                statements.extend([
                    f"-- Add missing column {source_table.name}.{column.name}",
                    f"ALTER TABLE {table_ref} ADD COLUMN {self._column_sql(column)};",
                    "",
                ])

            for source_col, target_col in diff.to_update:
                backup = self.namer.old(source_col.name)
                self.logger.debug("Column %s.%s changed", source_table.name, source_col.name)
                statements.extend([
                    f"-- Modifying column {source_table.name}.{source_col.name}",
                    f"--   {self.source_schema}: {describe_column(source_col)}",
                    f"--   {self.target_schema}: {describe_column(target_col)}",
                    f"ALTER TABLE {table_ref} RENAME COLUMN {quote_ident(source_col.name)} TO {quote_ident(backup)};",
                    f"ALTER TABLE {table_ref} ADD COLUMN {self._column_sql(source_col)};",
                    f"-- TODO: Copy data from {backup} into {source_col.name}, then drop column "
                    f"{self.target_schema}.{source_table.name}.{backup}",
                    "",
                ])

        return statements
