"""schema.sql: sequences, tables and deferred self-referencing keys."""

from ddl_sync.ddl.constraints import build_constraint
from ddl_sync.ddl.identifiers import quote_ident
from ddl_sync.ddl.sequences import build_sequence
from ddl_sync.ddl.sorter import (
    cycle_comment,
    dependency_order,
    extract_all_sequences,
    extract_self_referencing_constraints,
)
from ddl_sync.ddl.tables import build_table
from ddl_sync.generators.base import BaseGenerator
from ddl_sync.models.output import GeneratedFile
from ddl_sync.models.schema import TableDefinition
from ddl_sync.utils.constants import DEFAULT_PUBLIC_SCHEMA, SCHEMA_FILE
from ddl_sync.utils.validation import validate_not_empty


class SchemaGenerator(BaseGenerator):
    """Writes the full table structure of one schema."""

    name = "Schema Generator"

    def should_skip(self) -> bool:
        return self.procs_only or self.triggers_only

    async def validate_data(self) -> None:
        await self.validate_schema()
        tables = await self.reader.tables()
        validate_not_empty(tables, "tables", self.schema)
        self.logger.info("Found %d tables in schema %s", len(tables), self.schema)

    async def generate(self) -> list[GeneratedFile]:
        tables = await self.reader.tables()
        return [GeneratedFile(
            filename=SCHEMA_FILE,
            content=self.render(tables),
            description="Tables, columns, constraints and indexes",
        )]

    def render(self, tables: list[TableDefinition]) -> str:
        sql = self.header(
            "SCHEMA DEFINITION",
            "Complete database schema including tables, columns, constraints, and indexes"
        )

        if self.schema != DEFAULT_PUBLIC_SCHEMA:
            sql += f"CREATE SCHEMA IF NOT EXISTS {quote_ident(self.schema)};\n\n"

        sequences = extract_all_sequences(tables)
        if sequences:
            sql += "-- Sequences\n"
            for sequence in sequences:
                sql += build_sequence(sequence, self.schema) + "\n"
            sql += "\n"

        order = dependency_order(tables)
        for line in cycle_comment(order.cyclic):
            sql += line + "\n"
        for table in order.tables:
            sql += build_table(table, self.schema)

        self_references = extract_self_referencing_constraints(tables)
        if self_references:
            sql += "-- Self-referencing constraints\n"
            for ref in self_references:
                sql += build_constraint(ref.constraint, self.schema, ref.table_name) + "\n"
            sql += "\n"

        return sql + self.footer()
