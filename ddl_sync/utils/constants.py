"""Constants for ddl-sync."""

from enum import Enum


class ErrorCode(str, Enum):
    """Error code enumeration."""

    DB_CONNECTION_FAILED = "ERR_001"
    INTROSPECTION_FAILED = "ERR_002"
    INVALID_SCHEMA_NAME = "ERR_003"
    SCHEMA_NOT_FOUND = "ERR_004"
    EMPTY_SCHEMA = "ERR_005"
    GENERATION_FAILED = "ERR_006"
    OUTPUT_FAILED = "ERR_007"
    INVALID_CONFIGURATION = "ERR_008"


ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.DB_CONNECTION_FAILED: "Unable to connect to the configured database",
    ErrorCode.INTROSPECTION_FAILED: "Unable to read schema metadata",
    ErrorCode.INVALID_SCHEMA_NAME: "Schema name is missing or malformed",
    ErrorCode.SCHEMA_NOT_FOUND: "Schema does not exist",
    ErrorCode.EMPTY_SCHEMA: "Schema contains no tables",
    ErrorCode.GENERATION_FAILED: "Failed to generate DDL",
    ErrorCode.OUTPUT_FAILED: "Failed to write output",
    ErrorCode.INVALID_CONFIGURATION: "Invalid configuration",
}

# PostgreSQL NAMEDATALEN - 1
MAX_IDENTIFIER_LENGTH = 63

BANNER_WIDTH = 43
TABLE_BANNER_WIDTH = 48

DEFAULT_PUBLIC_SCHEMA = "public"

SCHEMA_FILE = "schema.sql"
PROCS_FILE = "procs.sql"
TRIGGERS_FILE = "triggers.sql"
SYNC_FILE = "alter.sql"
