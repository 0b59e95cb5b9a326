"""Exception classes for ddl-sync."""

from ddl_sync.utils.constants import ErrorCode, ERROR_MESSAGES


class DdlSyncError(Exception):
    """Base exception class for ddl-sync."""

    def __init__(
        self,
        code: ErrorCode,
        message: str | None = None,
        details: dict | None = None
    ):
        self.code = code
        self.message = message or ERROR_MESSAGES.get(code, "Unknown error")
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert the exception to a dictionary format.

        Returns:
            A dictionary representation of the error.
        """
        return {
            "status": "error",
            "error": {
                "code": self.code.value,
                "message": self.message,
                "details": self.details
            }
        }


class DatabaseConnectionError(DdlSyncError):
    """Database connection error."""

    def __init__(self, message: str):
        super().__init__(
            code=ErrorCode.DB_CONNECTION_FAILED,
            message=message
        )


class SchemaValidationError(DdlSyncError):
    """Schema name, existence or content validation error.

    ``details`` carries the offending value and, where relevant, a
    suggestion and the list of schemas that do exist.
    """

    def __init__(
        self,
        message: str,
        field: str = "schema",
        code: ErrorCode = ErrorCode.INVALID_SCHEMA_NAME,
        details: dict | None = None
    ):
        self.field = field
        super().__init__(
            code=code,
            message=message,
            details={"field": field, **(details or {})}
        )


class IntrospectionError(DdlSyncError):
    """Catalog query failed or returned rows of an unexpected shape."""

    def __init__(self, message: str, query: str | None = None, details: dict | None = None):
        payload = dict(details or {})
        if query:
            payload["query"] = query
        super().__init__(
            code=ErrorCode.INTROSPECTION_FAILED,
            message=message,
            details=payload
        )


class GenerationError(DdlSyncError):
    """Unexpected failure while rendering DDL."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(
            code=ErrorCode.GENERATION_FAILED,
            message=message,
            details=details
        )


class OutputError(DdlSyncError):
    """Generated script could not be written."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(
            code=ErrorCode.OUTPUT_FAILED,
            message=message,
            details={"path": path} if path else None
        )
