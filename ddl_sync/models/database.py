"""Database-related data models."""

from pydantic import BaseModel
from typing import Optional


class DatabaseConfig(BaseModel):
    """Connection settings for one side of a comparison."""

    name: str
    dsn: str
    ssl: bool = False
    min_size: int = 1
    max_size: int = 5
    command_timeout: int = 60


class ConnectionStatus(BaseModel):
    """Connection status model."""

    database: str
    connected: bool
    latency_ms: Optional[float] = None
    error: Optional[str] = None
