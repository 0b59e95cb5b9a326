"""Normalized schema object definitions.

Every model is frozen: definitions are derived from one introspection
snapshot and never mutated afterwards.
"""

import re
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

_NEXTVAL_SCHEMA = re.compile(r"nextval\('([^.']+)\.([^']+)'::regclass\)")

SCHEMA_PLACEHOLDER = "__SCHEMA__"


def mask_schema(text: Optional[str], schema: Optional[str]) -> Optional[str]:
    """Replace whole-word ``schema`` in ``text`` with a placeholder.

    The catalog qualifies types and functions outside ``search_path``, so
    the same object reads ``dev.users`` in one schema and ``prod.users``
    in the other.
    """
    if text is None or not schema:
        return text
    return re.sub(rf"\b{re.escape(schema)}\b", SCHEMA_PLACEHOLDER, text)


def normalize_default(default: Optional[str]) -> Optional[str]:
    """Strip the schema from ``nextval('<schema>.<seq>'::regclass)``.

    Two schemas with otherwise identical serial columns differ only in the
    schema named inside the default.
    """
    if default is None:
        return None
    return _NEXTVAL_SCHEMA.sub(r"nextval('\2'::regclass)", default)


class ConstraintType(str, Enum):
    """Constraint kind enumeration."""

    PRIMARY_KEY = "PRIMARY KEY"
    FOREIGN_KEY = "FOREIGN KEY"
    UNIQUE = "UNIQUE"
    CHECK = "CHECK"
    NOT_NULL = "NOT NULL"


class ReferentialAction(str, Enum):
    """Foreign key ON DELETE / ON UPDATE action."""

    CASCADE = "CASCADE"
    SET_NULL = "SET NULL"
    SET_DEFAULT = "SET DEFAULT"
    RESTRICT = "RESTRICT"
    NO_ACTION = "NO ACTION"


class IdentityGeneration(str, Enum):
    """Identity column generation mode."""

    ALWAYS = "ALWAYS"
    BY_DEFAULT = "BY DEFAULT"


class RoutineKind(str, Enum):
    """Routine kind enumeration."""

    FUNCTION = "FUNCTION"
    PROCEDURE = "PROCEDURE"


class _Definition(BaseModel):
    model_config = ConfigDict(frozen=True, use_enum_values=False)


class ColumnDefinition(_Definition):
    """Column definition model."""

    name: str
    data_type: str
    udt_name: Optional[str] = None
    nullable: bool = True
    default: Optional[str] = None
    max_length: Optional[int] = None
    numeric_precision: Optional[int] = None
    numeric_scale: Optional[int] = None
    ordinal_position: int = 0
    is_identity: bool = False
    identity_generation: Optional[IdentityGeneration] = None
    is_generated: bool = False
    generation_expression: Optional[str] = None
    comment: Optional[str] = None

    def comparison_key(self, schema: Optional[str] = None) -> tuple:
        """Fields compared across schemas; ordinal and comment excluded.

        Args:
            schema: Owning schema, masked inside defaults and expressions.
        """
        return (
            self.name,
            self.data_type,
            self.udt_name,
            self.nullable,
            mask_schema(normalize_default(self.default), schema),
            self.max_length,
            self.numeric_precision,
            self.numeric_scale,
            self.is_identity,
            self.identity_generation,
            self.is_generated,
            mask_schema(self.generation_expression, schema),
        )


class ForeignKeyReference(_Definition):
    """Table and column referenced by a foreign key."""

    table: str
    column: str = "id"


class ConstraintDefinition(_Definition):
    """Constraint definition model.

    ``kind`` holds a :class:`ConstraintType` value; kinds outside that set
    (e.g. EXCLUDE) are kept verbatim so they can be reported.
    """

    name: str
    kind: str
    columns: list[str] = Field(default_factory=list)
    references: Optional[ForeignKeyReference] = None
    check_clause: Optional[str] = None
    deferrable: bool = False
    initially_deferred: bool = False
    on_delete: Optional[ReferentialAction] = None
    on_update: Optional[ReferentialAction] = None

    def is_self_referencing(self, table_name: str) -> bool:
        """Whether this is a foreign key pointing back at ``table_name``."""
        return (
            self.kind == ConstraintType.FOREIGN_KEY
            and self.references is not None
            and self.references.table == table_name
        )

    def comparison_key(self, schema: Optional[str] = None) -> tuple:
        return (
            self.name,
            self.kind,
            tuple(self.columns),
            self.references,
            mask_schema(self.check_clause, schema),
            self.deferrable,
            self.initially_deferred,
            self.on_delete,
            self.on_update,
        )


class IndexDefinition(_Definition):
    """Index definition model."""

    name: str
    table_name: str
    schema_name: str
    columns: list[str] = Field(default_factory=list)
    is_unique: bool = False
    is_primary: bool = False
    method: str = "btree"
    where_clause: Optional[str] = None
    options: Optional[str] = None
    definition: Optional[str] = None

    def comparison_key(self) -> tuple:
        """Schema and raw definition text are excluded; both embed the schema.

        ``options`` holds the clauses between the column list and WHERE,
        such as ``INCLUDE (...)`` or ``WITH (...)``.
        """
        schema = self.schema_name
        return (
            self.name,
            self.table_name,
            tuple(mask_schema(c, schema) for c in self.columns),
            self.is_unique,
            self.is_primary,
            self.method,
            mask_schema(self.where_clause, schema),
            mask_schema(self.options, schema),
        )


class SequenceDefinition(_Definition):
    """Sequence definition model.

    Numeric bounds are kept as strings so 64-bit limits survive unchanged.
    """

    name: str
    schema_name: str
    data_type: str = "bigint"
    start_value: str = "1"
    min_value: str = "1"
    max_value: str = "9223372036854775807"
    increment: str = "1"
    cycle: bool = False
    comment: Optional[str] = None

    def comparison_key(self) -> tuple:
        return (
            self.name,
            self.data_type,
            self.start_value,
            self.min_value,
            self.max_value,
            self.increment,
            self.cycle,
        )


class TableDefinition(_Definition):
    """Table definition model."""

    name: str
    schema_name: str
    columns: list[ColumnDefinition] = Field(default_factory=list)
    constraints: list[ConstraintDefinition] = Field(default_factory=list)
    indexes: list[IndexDefinition] = Field(default_factory=list)
    sequences: list[SequenceDefinition] = Field(default_factory=list)
    comment: Optional[str] = None

    def sorted_columns(self) -> list[ColumnDefinition]:
        return sorted(self.columns, key=lambda c: c.ordinal_position)

    def foreign_key_targets(self) -> set[str]:
        """Names of other tables this table references."""
        return {
            c.references.table
            for c in self.constraints
            if c.kind == ConstraintType.FOREIGN_KEY
            and c.references is not None
            and c.references.table != self.name
        }


class FunctionDefinition(_Definition):
    """Function or procedure definition model."""

    name: str
    schema_name: str
    kind: RoutineKind = RoutineKind.FUNCTION
    arguments: str = ""
    return_type: Optional[str] = None
    language: Optional[str] = None
    definition: Optional[str] = None
    comment: Optional[str] = None

    @property
    def signature(self) -> str:
        """``name(args)`` identifying one overload."""
        return f"{self.name}({self.arguments})"

    def key(self) -> tuple[str, str, str]:
        """Join key across schemas; overloads share a name.

        Argument types qualified with the owning schema are masked.
        """
        return (self.name, self.kind.value, mask_schema(self.arguments, self.schema_name))


class TriggerDefinition(_Definition):
    """Trigger definition model."""

    name: str
    table_name: str
    schema_name: str
    events: list[str] = Field(default_factory=list)
    timing: str = "BEFORE"
    orientation: str = "ROW"
    action_statement: Optional[str] = None
    condition: Optional[str] = None
    definition: Optional[str] = None
    comment: Optional[str] = None

    def key(self) -> tuple[str, str]:
        """Trigger names are unique per table, not per schema."""
        return (self.table_name, self.name)
