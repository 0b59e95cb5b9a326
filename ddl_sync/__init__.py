"""pg-ddl-sync: PostgreSQL schema diff to DDL script generator."""

__version__ = "0.1.0"
