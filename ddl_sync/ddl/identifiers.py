"""Identifier quoting."""


def quote_ident(name: str) -> str:
    """Double-quote an identifier, doubling embedded quotes.

    >>> quote_ident('my"table')
    '"my""table"'
    """
    return '"' + name.replace('"', '""') + '"'


def qualified(schema: str, name: str) -> str:
    """Render ``"schema"."name"``."""
    return f"{quote_ident(schema)}.{quote_ident(name)}"


def quote_list(names: list[str]) -> str:
    """Quote and comma-join a column list."""
    return ", ".join(quote_ident(n) for n in names)
