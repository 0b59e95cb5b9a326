"""Source and target connection pools."""

import logging

import asyncpg

from ddl_sync.models.database import ConnectionStatus, DatabaseConfig
from ddl_sync.services.database import close_pool, connect, test_connection
from ddl_sync.utils.exceptions import DatabaseConnectionError

logger = logging.getLogger("ddl-sync.connections")


class ConnectionManager:
    """Owns the pools for one run.

    Databases sharing a DSN share a pool: comparing two schemas of the
    same database opens a single pool.
    """

    def __init__(
        self,
        retry_max_attempts: int = 3,
        retry_base_delay: float = 1.0,
        retry_max_delay: float = 30.0
    ):
        self._configs: dict[str, DatabaseConfig] = {}
        self._pools: dict[str, asyncpg.Pool] = {}
        self.retry_max_attempts = retry_max_attempts
        self.retry_base_delay = retry_base_delay
        self.retry_max_delay = retry_max_delay

    def add_database(self, config: DatabaseConfig) -> None:
        """Register a database configuration.

        Args:
            config: Database configuration; ``config.name`` is the lookup key.
        """
        self._configs[config.name] = config
        logger.info("Added database config: %s", config.name)

    async def get_pool(self, name: str) -> asyncpg.Pool:
        """Get or create the pool for a registered database.

        Raises:
            ValueError: If ``name`` was never registered.
            DatabaseConnectionError: If the pool cannot be created.
        """
        config = self._configs.get(name)
        if config is None:
            raise ValueError(f"No pool configured for database: {name}")

        pool = self._pools.get(config.dsn)
        if pool is not None and not pool.is_closing():
            return pool

        logger.info("Creating pool for %s: min=%d, max=%d", name, config.min_size, config.max_size)
        pool = await connect(
            config,
            max_attempts=self.retry_max_attempts,
            base_delay=self.retry_base_delay,
            max_delay=self.retry_max_delay
        )
        self._pools[config.dsn] = pool
        logger.info("Pool created successfully for: %s", name)
        return pool

    async def status(self, name: str) -> ConnectionStatus:
        pool = await self.get_pool(name)
        return await test_connection(pool, name)

    async def verify(self, *names: str) -> list[ConnectionStatus]:
        """Round-trip each registered database before introspection starts.

        Raises:
            DatabaseConnectionError: If any database does not answer.
        """
        statuses = []
        for name in names:
            status = await self.status(name)
            if not status.connected:
                raise DatabaseConnectionError(
                    f"Connection check failed for {name} database: {status.error}"
                )
            logger.info("Connected to %s database (%.1f ms)", name, status.latency_ms)
            statuses.append(status)
        return statuses

    @property
    def pool_count(self) -> int:
        return len(self._pools)

    async def close(self) -> None:
        """Close every pool opened by this manager."""
        for pool in self._pools.values():
            await close_pool(pool)
        self._pools.clear()
        logger.info("All connection pools closed")

    async def __aenter__(self) -> "ConnectionManager":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
