"""Data models for ddl-sync."""

from ddl_sync.models.schema import (
    ColumnDefinition,
    ConstraintDefinition,
    ConstraintType,
    ForeignKeyReference,
    FunctionDefinition,
    IdentityGeneration,
    IndexDefinition,
    ReferentialAction,
    RoutineKind,
    SequenceDefinition,
    TableDefinition,
    TriggerDefinition,
)
from ddl_sync.models.database import DatabaseConfig, ConnectionStatus
from ddl_sync.models.output import GeneratedFile, GenerationResult

__all__ = [
    "ColumnDefinition",
    "ConstraintDefinition",
    "ConstraintType",
    "ForeignKeyReference",
    "FunctionDefinition",
    "IdentityGeneration",
    "IndexDefinition",
    "ReferentialAction",
    "RoutineKind",
    "SequenceDefinition",
    "TableDefinition",
    "TriggerDefinition",
    "DatabaseConfig",
    "ConnectionStatus",
    "GeneratedFile",
    "GenerationResult",
]
