# ddl_sync/services/database.py
"""Database connection services."""

import time

import asyncpg

from ddl_sync.models.database import ConnectionStatus, DatabaseConfig
from ddl_sync.services.resilience import with_retry
from ddl_sync.utils.exceptions import DatabaseConnectionError


async def create_pool(
    dsn: str,
    min_size: int = 1,
    max_size: int = 5,
    ssl: bool = False,
    timeout: int = 60
) -> asyncpg.Pool:
    """Create a PostgreSQL connection pool.

    Args:
        dsn: Database connection string.
        min_size: Minimum pool size.
        max_size: Maximum pool size.
        ssl: Whether to use SSL.
        timeout: Command timeout in seconds.

    Returns:
        An asyncpg connection pool.
    """
    pool = await asyncpg.create_pool(
        dsn=dsn,
        min_size=min_size,
        max_size=max_size,
        ssl=ssl if ssl else None,
        command_timeout=timeout
    )
    return pool


async def connect(
    config: DatabaseConfig,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0
) -> asyncpg.Pool:
    """Create a pool for ``config``, retrying transient failures.

    Raises:
        DatabaseConnectionError: If every attempt fails.
    """
    retrying = with_retry(
        max_attempts=max_attempts,
        base_delay=base_delay,
        max_delay=max_delay,
        retry_on=(OSError, asyncpg.PostgresError, asyncpg.InterfaceError, TimeoutError)
    )(create_pool)

    try:
        return await retrying(
            dsn=config.dsn,
            min_size=config.min_size,
            max_size=config.max_size,
            ssl=config.ssl,
            timeout=config.command_timeout
        )
    except (OSError, asyncpg.PostgresError, asyncpg.InterfaceError, TimeoutError) as e:
        raise DatabaseConnectionError(
            f"Could not connect to {config.name} database: {e}"
        ) from e


async def test_connection(pool: asyncpg.Pool, name: str = "default") -> ConnectionStatus:
    """Test if a database connection is available.

    Args:
        pool: The connection pool to test.
        name: Label reported in the status.

    Returns:
        The connection status including round-trip latency.
    """
    try:
        start_time = time.perf_counter()
        async with pool.acquire() as conn:
            await conn.fetchval("SELECT 1")
        latency_ms = (time.perf_counter() - start_time) * 1000
        return ConnectionStatus(database=name, connected=True, latency_ms=latency_ms)
    except (OSError, asyncpg.PostgresError, asyncpg.InterfaceError) as e:
        return ConnectionStatus(database=name, connected=False, error=str(e))


async def close_pool(pool: asyncpg.Pool) -> None:
    """Close a connection pool.

    Args:
        pool: The connection pool to close.
    """
    await pool.close()
