# ddl_sync/config.py
"""Configuration management for ddl-sync."""

from pydantic_settings import BaseSettings
from pydantic import Field, model_validator
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables and ``.env``."""

    # PostgreSQL connection configuration
    source_dsn: str = "postgresql://localhost:5432/postgres"
    target_dsn: Optional[str] = Field(
        default=None,
        description="Target database DSN; defaults to the source DSN"
    )
    ssl: bool = False
    pool_min_size: int = 1
    pool_max_size: int = 5
    command_timeout: int = 60

    # Schemas
    source_schema: str = "public"
    target_schema: Optional[str] = None

    # Output
    output_dir: str = "output"
    output_file: Optional[str] = None
    save: bool = False
    stdout: bool = False

    # Generation filters, mutually exclusive
    schema_only: bool = False
    procs_only: bool = False
    triggers_only: bool = False

    # Lint generated statements with sqlglot
    validate_output: bool = False

    # Retry configuration (connection setup only)
    retry_max_attempts: int = 3
    retry_base_delay: float = 1.0
    retry_max_delay: float = 30.0

    log_level: str = "INFO"

    class Config:
        env_prefix = "DDL_SYNC_"
        env_file = ".env"
        extra = "ignore"

    @model_validator(mode="after")
    def check_exclusive_filters(self) -> "Settings":
        if sum((self.schema_only, self.procs_only, self.triggers_only)) > 1:
            raise ValueError("schema_only, procs_only and triggers_only cannot be combined")
        return self

    def get_source_dsn(self) -> str:
        """Get the source database connection string.

        Returns:
            The DSN string for the source database.
        """
        return self.source_dsn

    def get_target_dsn(self) -> str:
        """Get the target database connection string.

        Returns:
            The target DSN, or the source DSN when none is configured.
        """
        return self.target_dsn or self.source_dsn
