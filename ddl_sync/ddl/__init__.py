"""Pure DDL synthesis: row converters, SQL builders and dependency sorting."""
