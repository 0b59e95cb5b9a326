"""Catalog introspection for a single schema."""

import logging
from typing import Any

import asyncpg

from ddl_sync.services import queries
from ddl_sync.utils.exceptions import IntrospectionError

logger = logging.getLogger("ddl-sync.introspection")


class IntrospectionService:
    """Runs catalog queries against one schema and returns plain rows.

    Every method returns a list of ``dict`` rows keyed by the query's
    column aliases. No rows are interpreted here; see
    :mod:`ddl_sync.ddl.converters`.
    """

    def __init__(self, pool: asyncpg.Pool, schema: str):
        """Initialize the service.

        Args:
            pool: Connection pool for the database holding ``schema``.
            schema: The schema to introspect.
        """
        self.pool = pool
        self.schema = schema

    async def _fetch(self, name: str, sql: str, *args: Any) -> list[dict]:
        try:
            rows = await self.pool.fetch(sql, self.schema, *args)
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            logger.error("Query %s failed for schema %s: %s", name, self.schema, e)
            raise IntrospectionError(
                f"Failed to {name} in schema '{self.schema}': {e}",
                query=name,
                details={"schema": self.schema, "args": list(args)}
            ) from e

        if rows is None:
            raise IntrospectionError(
                f"Invalid query result for {name}: no rows returned",
                query=name
            )
        logger.debug("%s(%s%s) -> %d rows", name, self.schema, "".join(f", {a}" for a in args), len(rows))
        return [dict(row) for row in rows]

    async def schema_exists(self) -> bool:
        rows = await self._fetch("check schema", queries.SCHEMA_EXISTS_QUERY)
        return bool(rows and list(rows[0].values())[0])

    async def list_available_schemas(self) -> list[str]:
        try:
            rows = await self.pool.fetch(queries.AVAILABLE_SCHEMAS_QUERY)
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            raise IntrospectionError(
                f"Failed to list schemas: {e}", query="list schemas"
            ) from e
        return [row["schema_name"] for row in rows]

    async def list_tables(self) -> list[dict]:
        return await self._fetch("list tables", queries.TABLES_QUERY)

    async def list_columns(self, table: str) -> list[dict]:
        return await self._fetch("list columns", queries.COLUMNS_QUERY, table)

    async def list_constraints(self, table: str) -> list[dict]:
        return await self._fetch("list constraints", queries.CONSTRAINTS_QUERY, table)

    async def list_indexes(self, table: str) -> list[dict]:
        return await self._fetch("list indexes", queries.INDEXES_QUERY, table)

    async def list_table_sequences(self, table: str) -> list[dict]:
        """Sequences owned by ``table``'s serial columns."""
        return await self._fetch("list table sequences", queries.TABLE_SEQUENCES_QUERY, table)

    async def list_sequences(self) -> list[dict]:
        """Every free-standing or serial sequence in the schema."""
        return await self._fetch("list sequences", queries.SEQUENCES_QUERY)

    async def list_functions(self) -> list[dict]:
        return await self._fetch("list functions", queries.FUNCTIONS_QUERY)

    async def list_triggers(self) -> list[dict]:
        """Trigger rows, one per (trigger, event)."""
        return await self._fetch("list triggers", queries.TRIGGERS_QUERY)
