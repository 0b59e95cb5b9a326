"""Database-facing services for ddl-sync."""
