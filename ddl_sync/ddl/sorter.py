"""Dependency ordering for tables and sequences."""

import logging
from typing import NamedTuple

from ddl_sync.models.schema import (
    ConstraintDefinition,
    SequenceDefinition,
    TableDefinition,
)

logger = logging.getLogger("ddl-sync.sorter")


class DependencyOrder(NamedTuple):
    """Tables in creation order plus those left unresolved by a cycle."""

    tables: list[TableDefinition]
    cyclic: list[str]


class SelfReference(NamedTuple):
    """A foreign key whose referenced table is its owning table."""

    constraint: ConstraintDefinition
    schema: str
    table_name: str


def dependency_order(tables: list[TableDefinition]) -> DependencyOrder:
    """Order tables so every referenced table precedes its referrers.

    Works in passes over the input, placing each table once all of its
    in-set dependencies are placed; ties keep input order. Tables still
    unplaced when a pass makes no progress sit on or behind a foreign key
    cycle and are appended in input order.
    """
    names = {t.name for t in tables}
    dependencies = {t.name: t.foreign_key_targets() & names for t in tables}

    ordered: list[TableDefinition] = []
    placed: set[str] = set()
    remaining = list(tables)

    for _ in range(len(tables)):
        if not remaining:
            break
        pending = []
        for table in remaining:
            if dependencies[table.name] <= placed:
                ordered.append(table)
                placed.add(table.name)
            else:
                pending.append(table)
        if len(pending) == len(remaining):
            break
        remaining = pending

    cyclic = [t.name for t in remaining]
    if cyclic:
        logger.warning("Circular foreign key dependencies between: %s", ", ".join(cyclic))
    ordered.extend(remaining)
    return DependencyOrder(ordered, cyclic)


def sort_tables_by_dependencies(tables: list[TableDefinition]) -> list[TableDefinition]:
    return dependency_order(tables).tables


def cycle_comment(cyclic: list[str]) -> list[str]:
    """Comment lines flagging tables that could not be ordered."""
    if not cyclic:
        return []
    return [
        f"-- WARNING: circular foreign key dependencies between: {', '.join(cyclic)}",
        "-- Constraint ordering for these tables may need manual adjustment",
    ]


def extract_self_referencing_constraints(tables: list[TableDefinition]) -> list[SelfReference]:
    return [
        SelfReference(constraint, table.schema_name, table.name)
        for table in tables
        for constraint in table.constraints
        if constraint.is_self_referencing(table.name)
    ]


def extract_all_sequences(tables: list[TableDefinition]) -> list[SequenceDefinition]:
    """Sequences owned by any table, deduplicated and sorted by name."""
    seen: set[str] = set()
    sequences = []
    for table in tables:
        for sequence in table.sequences:
            key = f"{sequence.schema_name}.{sequence.name}"
            if key not in seen:
                seen.add(key)
                sequences.append(sequence)
    return sorted(sequences, key=lambda s: s.name)
