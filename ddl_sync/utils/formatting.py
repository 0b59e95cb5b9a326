"""Script formatting helpers: banners, backup names, output filenames."""

import time
from datetime import datetime
from typing import Callable, Optional

from ddl_sync.utils.constants import BANNER_WIDTH, TABLE_BANNER_WIDTH


def current_millis() -> int:
    """Wall clock in milliseconds since the epoch."""
    return int(time.time() * 1000)


class BackupNamer:
    """Generates sortable backup names for renamed objects.

    The clock is injectable so that tests can produce stable output.

    Args:
        clock: Zero-argument callable returning an integer timestamp.
    """

    def __init__(self, clock: Optional[Callable[[], int]] = None):
        self._clock = clock or current_millis

    def timestamp(self) -> str:
        return str(self._clock())

    def dropped(self, name: str) -> str:
        """Name for an object that exists only in the target."""
        return self.backup_name(name, "dropped")

    def old(self, name: str) -> str:
        """Name for the previous version of an object being replaced."""
        return self.backup_name(name, "old")

    def backup_name(self, name: str, suffix: str) -> str:
        return f"{name}_{suffix}_{self.timestamp()}"


def section_header(title: str) -> list[str]:
    """Banner lines opening a script section."""
    rule = "-- " + "=" * BANNER_WIDTH
    return [rule, f"-- {title}", rule]


def table_header(schema: str, table: str) -> str:
    """Banner opening a table block in generated schema files."""
    rule = "-- " + "=" * TABLE_BANNER_WIDTH
    return f"{rule}\n-- TABLE: {schema}.{table}\n{rule}\n\n"


def script_header(
    title: str,
    source: str,
    target: Optional[str] = None,
    generated_at: Optional[datetime] = None
) -> list[str]:
    """Lines opening a generated script.

    Args:
        title: Script title.
        source: Source schema name.
        target: Target schema name, omitted in single-schema mode.
        generated_at: Generation time, defaults to now.

    Returns:
        Header lines followed by a blank line.
    """
    stamp = (generated_at or datetime.now()).isoformat(timespec="seconds")
    rule = "-- " + "=" * BANNER_WIDTH
    lines = [rule, f"-- {title}", f"-- Source schema: {source}"]
    if target:
        lines.append(f"-- Target schema: {target}")
    lines.extend([f"-- Generated: {stamp}", rule, ""])
    return lines


def script_footer(title: str = "SCHEMA SYNC SCRIPT") -> list[str]:
    """Lines closing a generated script."""
    return ["", *section_header(f"END OF {title}")]


def output_filename(
    source: str,
    target: str,
    prefix: str = "schema-sync",
    generated_at: Optional[datetime] = None
) -> str:
    """Default filename for a saved sync script."""
    stamp = (generated_at or datetime.now()).strftime("%Y-%m-%dT%H-%M-%S")
    return f"{prefix}_{source}-to-{target}_{stamp}.sql"
