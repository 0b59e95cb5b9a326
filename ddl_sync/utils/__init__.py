"""Utility modules for ddl-sync."""
