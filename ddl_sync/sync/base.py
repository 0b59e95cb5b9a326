"""Shared diff machinery."""

import asyncio
import logging
from typing import Any, Callable, Hashable, Iterable, NamedTuple, Optional, TypeVar

from ddl_sync.models.schema import TableDefinition
from ddl_sync.services.snapshot import SchemaReader
from ddl_sync.utils.formatting import BackupNamer

T = TypeVar("T")


class EntityDiff(NamedTuple):
    """Disjoint create/drop/update sets for one entity kind.

    ``to_create`` and ``to_update`` follow source order, ``to_drop``
    follows target order. ``to_update`` holds ``(source, target)`` pairs.
    """

    to_create: list
    to_drop: list
    to_update: list


def diff_entities(
    source: Iterable[T],
    target: Iterable[T],
    key: Callable[[T], Hashable],
    signature: Callable[[T], Any],
    target_signature: Optional[Callable[[T], Any]] = None,
) -> EntityDiff:
    """Match entities by ``key`` and compare matches by ``signature``.

    Args:
        source: Entities in the source schema.
        target: Entities in the target schema.
        key: Join key, normally the name.
        signature: Structural comparison value; unequal means changed.
        target_signature: Signature for target entities, when it must differ
            from the source one (e.g. masking a different schema name).

    Returns:
        The three disjoint sets.
    """
    source = list(source)
    target_signature = target_signature or signature
    target_by_key = {key(t): t for t in target}
    source_keys = {key(s) for s in source}

    to_create = []
    to_update = []
    for item in source:
        counterpart = target_by_key.get(key(item))
        if counterpart is None:
            to_create.append(item)
        elif signature(item) != target_signature(counterpart):
            to_update.append((item, counterpart))

    to_drop = [t for k, t in target_by_key.items() if k not in source_keys]
    return EntityDiff(to_create, to_drop, to_update)


def common_tables(
    source: list[TableDefinition],
    target: list[TableDefinition]
) -> list[tuple[TableDefinition, TableDefinition]]:
    """Tables present in both schemas, as (source, target) in source order."""
    target_by_name = {t.name: t for t in target}
    return [(s, target_by_name[s.name]) for s in source if s.name in target_by_name]


class SyncOperations:
    """Base class for one entity kind's diff engine.

    Subclasses implement :meth:`generate_operations`, returning script
    lines: statements, ``--`` comments and blank separators.
    """

    entity = "object"

    def __init__(
        self,
        source: SchemaReader,
        target: SchemaReader,
        namer: Optional[BackupNamer] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.source = source
        self.target = target
        self.namer = namer or BackupNamer()
        self.logger = logger or logging.getLogger(f"ddl-sync.sync.{self.entity}")

    @property
    def source_schema(self) -> str:
        return self.source.schema

    @property
    def target_schema(self) -> str:
        return self.target.schema

    async def fetch_tables(self) -> tuple[list[TableDefinition], list[TableDefinition]]:
        """Source and target tables, fetched concurrently."""
        source, target = await asyncio.gather(self.source.tables(), self.target.tables())
        return source, target

    def missing_in_source(self, label: str) -> str:
        return f"-- {label} exists in {self.target_schema} but not in {self.source_schema}"

    async def generate_operations(self) -> list[str]:
        raise NotImplementedError
