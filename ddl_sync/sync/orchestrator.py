"""Two-schema sync script assembly."""

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Awaitable, Callable, Optional

from ddl_sync.services.snapshot import SchemaReader
from ddl_sync.services.sql_validator import ScriptValidator
from ddl_sync.sync.columns import ColumnOperations
from ddl_sync.sync.constraints import ConstraintOperations
from ddl_sync.sync.functions import FunctionOperations
from ddl_sync.sync.indexes import IndexOperations
from ddl_sync.sync.sequences import SequenceOperations
from ddl_sync.sync.tables import TableOperations
from ddl_sync.sync.triggers import TriggerOperations
from ddl_sync.utils.exceptions import OutputError, SchemaValidationError
from ddl_sync.utils.formatting import BackupNamer, script_footer, script_header, section_header
from ddl_sync.utils.validation import schema_not_found, validate_not_empty, validate_schema_name

Phase = tuple[str, Callable[[], Awaitable[list[str]]]]


class SchemaSyncOrchestrator:
    """Generates the script that brings ``target`` in line with ``source``.

    Phases run in a fixed order: sequences, tables, columns, constraints,
    indexes, self-referencing constraints of new tables, functions and
    triggers. ``schema_only`` stops after the structural phases;
    ``procs_only`` and ``triggers_only`` emit a single phase.
    """

    def __init__(
        self,
        source: SchemaReader,
        target: SchemaReader,
        schema_only: bool = False,
        procs_only: bool = False,
        triggers_only: bool = False,
        namer: Optional[BackupNamer] = None,
        logger: Optional[logging.Logger] = None,
        validator: Optional[ScriptValidator] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """Initialize the orchestrator.

        Args:
            source: Reader for the schema holding the desired structure.
            target: Reader for the schema to be changed.
            schema_only: Skip functions and triggers.
            procs_only: Emit only functions and procedures.
            triggers_only: Emit only triggers.
            namer: Backup name generator shared by every engine.
            logger: Logger for progress output.
            validator: Optional sqlglot lint applied to the finished script.
            clock: Source of the header timestamp.

        Raises:
            SchemaValidationError: If more than one of the *_only flags is set.
        """
        if sum((schema_only, procs_only, triggers_only)) > 1:
            raise SchemaValidationError(
                "Only one of schema_only, procs_only and triggers_only may be set",
                field="options"
            )
        self.source = source
        self.target = target
        self.schema_only = schema_only
        self.procs_only = procs_only
        self.triggers_only = triggers_only
        self.namer = namer or BackupNamer()
        self.logger = logger or logging.getLogger("ddl-sync.orchestrator")
        self.validator = validator
        self.clock = clock or datetime.now

        engine_args = (source, target, self.namer, self.logger)
        self.sequences = SequenceOperations(*engine_args)
        self.tables = TableOperations(*engine_args)
        self.columns = ColumnOperations(*engine_args)
        self.constraints = ConstraintOperations(*engine_args)
        self.indexes = IndexOperations(*engine_args)
        self.functions = FunctionOperations(*engine_args)
        self.triggers = TriggerOperations(*engine_args)

    def phases(self) -> list[Phase]:
        """The (title, generator) pairs enabled by the current flags."""
        structural: list[Phase] = [
            ("SEQUENCE OPERATIONS", self.sequences.generate_operations),
            ("TABLE OPERATIONS", self.tables.generate_operations),
            ("COLUMN OPERATIONS", self.columns.generate_operations),
            ("CONSTRAINT OPERATIONS", self.constraints.generate_operations),
            ("INDEX OPERATIONS", self.indexes.generate_operations),
            ("SELF-REFERENCING CONSTRAINTS", self.tables.generate_self_referencing_operations),
        ]
        routines: Phase = ("FUNCTION/PROCEDURE OPERATIONS", self.functions.generate_operations)
        triggers: Phase = ("TRIGGER OPERATIONS", self.triggers.generate_operations)

        if self.procs_only:
            return [routines]
        if self.triggers_only:
            return [triggers]
        if self.schema_only:
            return structural
        return structural + [routines, triggers]

    async def validate(self) -> None:
        """Pre-flight checks run before any diff work.

        Raises:
            SchemaValidationError: If a schema name is invalid, a schema does
                not exist, or the source schema has no tables.
        """
        validate_schema_name(self.source.schema)
        validate_schema_name(self.target.schema)

        source_exists, target_exists = await asyncio.gather(self.source.exists(), self.target.exists())
        if not source_exists:
            raise schema_not_found(self.source.schema, await self.source.available_schemas())
        if not target_exists:
            raise schema_not_found(self.target.schema, await self.target.available_schemas())

        tables = await self.source.tables()
        validate_not_empty(tables, "tables", self.source.schema)
        self.logger.info("Found %d tables in %s", len(tables), self.source.schema)

    async def generate_script(self) -> str:
        """Run every enabled phase and assemble the script text."""
        lines = script_header(
            "SCHEMA SYNC SCRIPT",
            self.source.schema,
            self.target.schema,
            generated_at=self.clock()
        )

        for title, generate in self.phases():
            self.logger.info("Generating %s...", title)
            operations = await generate()
            lines.extend(section_header(title))
            lines.extend(operations if operations else ["-- No changes required"])
            lines.append("")

        lines.extend(script_footer())
        return "\n".join(lines) + "\n"

    async def execute(self, output_path: Optional[str] = None) -> str:
        """Validate, generate and optionally write the sync script.

        Args:
            output_path: File to write the script to, if any.

        Returns:
            The script text.

        Raises:
            SchemaValidationError: On failed pre-flight checks.
            IntrospectionError: If a catalog query fails.
            OutputError: If the script cannot be written.
        """
        self.logger.info(
            "Comparing schema %s (source) to %s (target)", self.source.schema, self.target.schema
        )
        await self.validate()
        script = await self.generate_script()

        if self.validator is not None:
            issues = self.validator.validate(script)
            self.logger.info("Lint finished with %d issue(s)", len(issues))

        if output_path:
            write_script(output_path, script)
            self.logger.info("Sync script written to %s", output_path)
        return script


def write_script(path: str, content: str) -> None:
    """Write ``content`` to ``path``, creating parent directories.

    Raises:
        OutputError: If the file cannot be written.
    """
    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    except OSError as e:
        raise OutputError(f"Could not write {path}: {e}", path=path) from e
