"""Index definition parsing and CREATE INDEX rendering."""

import re
from typing import Optional

from ddl_sync.ddl.identifiers import qualified, quote_ident
from ddl_sync.models.schema import IndexDefinition

_USING = re.compile(r"\bUSING\s+(\w+)\s*\(", re.IGNORECASE)
_ON_TABLE = re.compile(r"\bON\s+(?:ONLY\s+)?\S+\s*\(", re.IGNORECASE)
_WHERE = re.compile(r"WHERE\s+(.+)$", re.IGNORECASE | re.DOTALL)
_WHERE_KEYWORD = re.compile(r"\bWHERE\b", re.IGNORECASE)

_COMPLEX_MARKERS = ("(", "::", "+", "-", "*", "/", "||")
_COMPLEX_KEYWORDS = re.compile(r"\b(COALESCE|CASE)\b", re.IGNORECASE)


def _column_list_bounds(indexdef: str) -> Optional[tuple[int, int]]:
    """Locate the parenthesised column list of an index definition.

    Returns:
        ``(start, end)`` offsets of the text between the outer parentheses,
        or None when the definition has no column list.
    """
    match = _USING.search(indexdef) or _ON_TABLE.search(indexdef)
    if not match:
        return None

    start = match.end()
    depth = 1
    quote: Optional[str] = None
    i = start
    while i < len(indexdef):
        ch = indexdef[i]
        if quote:
            if ch == quote:
                # doubled quote is an escaped quote character
                if i + 1 < len(indexdef) and indexdef[i + 1] == quote:
                    i += 2
                    continue
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return start, i
        i += 1
    return None


def split_top_level(text: str) -> list[str]:
    """Split on commas outside of parentheses and quotes.

    >>> split_top_level("lower(email), coalesce(a, b), id")
    ['lower(email)', 'coalesce(a, b)', 'id']
    """
    parts: list[str] = []
    current: list[str] = []
    depth = 0
    quote: Optional[str] = None

    for ch in text:
        if quote:
            current.append(ch)
            if ch == quote:
                quote = None
            continue
        if ch in ("'", '"'):
            quote = ch
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        elif ch == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(ch)

    tail = "".join(current).strip()
    if tail:
        parts.append(tail)
    return [p for p in parts if p]


def extract_index_columns(indexdef: str) -> list[str]:
    """Column entries of a ``pg_get_indexdef`` string, in order."""
    bounds = _column_list_bounds(indexdef or "")
    if bounds is None:
        return []
    start, end = bounds
    return split_top_level(indexdef[start:end])


def extract_where_clause(indexdef: str) -> Optional[str]:
    """Partial index predicate, taken from the text after the column list."""
    if not indexdef:
        return None
    bounds = _column_list_bounds(indexdef)
    tail = indexdef[bounds[1] + 1:] if bounds else indexdef
    match = _WHERE.search(tail)
    return match.group(1).strip() if match else None


def extract_index_options(indexdef: str) -> Optional[str]:
    """Clauses between the column list and WHERE, kept verbatim.

    >>> extract_index_options("CREATE INDEX i ON s.t USING btree (a) INCLUDE (b) WHERE (b > 0)")
    'INCLUDE (b)'
    """
    bounds = _column_list_bounds(indexdef or "")
    if bounds is None:
        return None
    tail = indexdef[bounds[1] + 1:]
    match = _WHERE_KEYWORD.search(tail)
    options = (tail[:match.start()] if match else tail).strip()
    return options or None


def extract_index_method(indexdef: str) -> Optional[str]:
    match = _USING.search(indexdef or "")
    return match.group(1).lower() if match else None


def is_complex_expression(column: str) -> bool:
    """Whether an index entry must be emitted verbatim instead of quoted.

    Entries that are already quoted or carry an ordering/opclass suffix
    (``email DESC``) are treated like expressions.
    """
    if column.startswith('"') or any(ch.isspace() for ch in column):
        return True
    if any(marker in column for marker in _COMPLEX_MARKERS):
        return True
    return bool(_COMPLEX_KEYWORDS.search(column))


def render_index_column(column: str) -> str:
    return column if is_complex_expression(column) else quote_ident(column)


def build_index(index: IndexDefinition, schema: str, table_name: Optional[str] = None) -> str:
    """Render CREATE INDEX for ``index`` in ``schema``.

    Args:
        index: The index definition.
        schema: Schema the index is created in.
        table_name: Owning table, defaults to ``index.table_name``.

    Returns:
        A single terminated statement.
    """
    unique = "UNIQUE " if index.is_unique else ""
    sql = f"CREATE {unique}INDEX {quote_ident(index.name)} ON {qualified(schema, table_name or index.table_name)}"

    if index.method and index.method.lower() != "btree":
        sql += f" USING {index.method}"

    columns = ", ".join(render_index_column(c) for c in index.columns)
    sql += f" ({columns})"

    if index.options:
        sql += f" {index.options}"

    if index.where_clause:
        sql += f" WHERE {index.where_clause}"

    return sql + ";"
