"""Normalized, memoized view of one schema."""

import asyncio
import logging
from typing import Optional, Protocol

from ddl_sync.ddl import converters
from ddl_sync.models.schema import (
    FunctionDefinition,
    SequenceDefinition,
    TableDefinition,
    TriggerDefinition,
)

logger = logging.getLogger("ddl-sync.snapshot")


class Introspection(Protocol):
    """The catalog reader a :class:`SchemaReader` depends on."""

    schema: str

    async def schema_exists(self) -> bool: ...
    async def list_available_schemas(self) -> list[str]: ...
    async def list_tables(self) -> list[dict]: ...
    async def list_columns(self, table: str) -> list[dict]: ...
    async def list_constraints(self, table: str) -> list[dict]: ...
    async def list_indexes(self, table: str) -> list[dict]: ...
    async def list_table_sequences(self, table: str) -> list[dict]: ...
    async def list_sequences(self) -> list[dict]: ...
    async def list_functions(self) -> list[dict]: ...
    async def list_triggers(self) -> list[dict]: ...


class SchemaReader:
    """Converts introspection rows into definitions for one schema.

    Each collection is fetched at most once per reader, so every diff
    engine in a run sees the same snapshot. Create a new reader for a
    fresh snapshot.
    """

    def __init__(self, introspection: Introspection):
        self.introspection = introspection
        self.schema = introspection.schema
        self._tables: Optional[list[TableDefinition]] = None
        self._sequences: Optional[list[SequenceDefinition]] = None
        self._functions: Optional[list[FunctionDefinition]] = None
        self._triggers: Optional[list[TriggerDefinition]] = None

    async def exists(self) -> bool:
        return await self.introspection.schema_exists()

    async def available_schemas(self) -> list[str]:
        return await self.introspection.list_available_schemas()

    async def _load_table(self, table_row: dict) -> TableDefinition:
        name = table_row.get("table_name") if isinstance(table_row, dict) else None
        if name is None:
            # let the converter report the malformed row
            return converters.table_from_rows(table_row, self.schema)

        columns, constraints, indexes, sequences = await asyncio.gather(
            self.introspection.list_columns(name),
            self.introspection.list_constraints(name),
            self.introspection.list_indexes(name),
            self.introspection.list_table_sequences(name),
        )
        return converters.table_from_rows(
            table_row,
            self.schema,
            columns=columns,
            constraints=constraints,
            indexes=indexes,
            sequences=sequences,
        )

    async def tables(self) -> list[TableDefinition]:
        """All tables with columns, constraints, indexes and owned sequences."""
        if self._tables is None:
            rows = await self.introspection.list_tables()
            self._tables = list(await asyncio.gather(*(self._load_table(r) for r in rows)))
            logger.debug("Loaded %d tables from %s", len(self._tables), self.schema)
        return self._tables

    async def sequences(self) -> list[SequenceDefinition]:
        if self._sequences is None:
            rows = await self.introspection.list_sequences()
            self._sequences = [converters.sequence_from_row(r, self.schema) for r in rows]
        return self._sequences

    async def functions(self) -> list[FunctionDefinition]:
        if self._functions is None:
            rows = await self.introspection.list_functions()
            self._functions = [converters.function_from_row(r, self.schema) for r in rows]
        return self._functions

    async def triggers(self) -> list[TriggerDefinition]:
        if self._triggers is None:
            rows = await self.introspection.list_triggers()
            self._triggers = converters.triggers_from_rows(rows, self.schema)
        return self._triggers
