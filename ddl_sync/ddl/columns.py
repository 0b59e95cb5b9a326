"""Column definition rendering."""

import re
from typing import Optional

from ddl_sync.ddl.identifiers import quote_ident
from ddl_sync.models.schema import ColumnDefinition

_NEXTVAL = re.compile(r"nextval\('([^.']+)\.([^']+)'::regclass\)")
_NEXTVAL_UNQUALIFIED = re.compile(r"nextval\('([^.']+)'::regclass\)")

_PRECISION_TYPES = {"numeric", "decimal"}


def retarget_default(
    default: str,
    target_schema: Optional[str],
    source_schema: Optional[str] = None
) -> str:
    """Point ``nextval`` calls at sequences in ``target_schema``.

    Schema-qualified names are always rewritten. Unqualified names resolve
    through ``search_path`` and are only qualified when ``source_schema``
    is given and differs from the target.

    >>> retarget_default("nextval('dev.users_id_seq'::regclass)", "prod")
    "nextval('prod.users_id_seq'::regclass)"
    >>> retarget_default("nextval('users_id_seq'::regclass)", "prod", "public")
    "nextval('prod.users_id_seq'::regclass)"
    """
    if not target_schema or "nextval(" not in default:
        return default
    default = _NEXTVAL.sub(
        lambda m: f"nextval('{target_schema}.{m.group(2)}'::regclass)",
        default
    )
    if source_schema and source_schema != target_schema:
        default = _NEXTVAL_UNQUALIFIED.sub(
            lambda m: f"nextval('{target_schema}.{m.group(1)}'::regclass)",
            default
        )
    return default


def format_data_type(column: ColumnDefinition) -> str:
    """Render the column type including length or precision.

    ``ARRAY`` and ``USER-DEFINED`` are resolved through ``udt_name``.
    """
    data_type = column.data_type
    if data_type == "ARRAY" and column.udt_name:
        return f"{column.udt_name.lstrip('_')}[]"
    if data_type == "USER-DEFINED" and column.udt_name:
        return column.udt_name

    if column.max_length:
        return f"{data_type}({column.max_length})"
    if data_type in _PRECISION_TYPES and column.numeric_precision is not None:
        if column.numeric_scale is not None:
            return f"{data_type}({column.numeric_precision},{column.numeric_scale})"
        return f"{data_type}({column.numeric_precision})"
    return data_type


def build_column(
    column: ColumnDefinition,
    target_schema: Optional[str] = None,
    source_schema: Optional[str] = None
) -> str:
    """Render one column line for CREATE TABLE or ADD COLUMN.

    The result carries no trailing semicolon.

    Args:
        column: The column definition.
        target_schema: Schema that sequence defaults are rewritten to.
        source_schema: Schema the column was read from.

    Returns:
        ``"name" TYPE [NOT NULL] [DEFAULT ...]`` or the identity/generated
        variant.
    """
    sql = f"{quote_ident(column.name)} {format_data_type(column)}"

    if column.is_generated and column.generation_expression:
        sql += f" GENERATED ALWAYS AS ({column.generation_expression}) STORED"
    elif column.is_identity:
        generation = column.identity_generation.value if column.identity_generation else "BY DEFAULT"
        sql += f" GENERATED {generation} AS IDENTITY"

    if not column.nullable:
        sql += " NOT NULL"

    if column.default and not column.is_identity and not column.is_generated:
        sql += f" DEFAULT {retarget_default(column.default, target_schema, source_schema)}"

    return sql
