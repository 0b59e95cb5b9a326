"""Common generator lifecycle: skip, validate, generate, output."""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, TextIO

from ddl_sync.models.output import GeneratedFile, GenerationResult
from ddl_sync.services.snapshot import SchemaReader
from ddl_sync.services.sql_validator import ScriptValidator
from ddl_sync.utils.exceptions import DdlSyncError, OutputError
from ddl_sync.utils.formatting import script_footer, section_header
from ddl_sync.utils.validation import schema_not_found, validate_schema_name


class BaseGenerator:
    """Base class for gen-mode generators.

    Subclasses provide :attr:`name`, :meth:`generate` and optionally
    :meth:`should_skip` and :meth:`validate_data`.
    """

    name = "Generator"

    def __init__(
        self,
        reader: SchemaReader,
        output_dir: str = "output",
        stdout: bool = False,
        schema_only: bool = False,
        procs_only: bool = False,
        triggers_only: bool = False,
        logger: Optional[logging.Logger] = None,
        validator: Optional[ScriptValidator] = None,
        clock: Optional[Callable[[], datetime]] = None,
        stream: Optional[TextIO] = None
    ):
        self.reader = reader
        self.schema = reader.schema
        self.output_dir = output_dir
        self.stdout = stdout
        self.schema_only = schema_only
        self.procs_only = procs_only
        self.triggers_only = triggers_only
        self.logger = logger or logging.getLogger(f"ddl-sync.{self.name.lower().replace(' ', '-')}")
        self.validator = validator
        self.clock = clock or datetime.now
        self.stream = stream

    def should_skip(self) -> bool:
        return False

    async def validate_schema(self) -> None:
        """Check the schema name and that the schema exists."""
        validate_schema_name(self.schema)
        if not await self.reader.exists():
            raise schema_not_found(self.schema, await self.reader.available_schemas())

    async def validate_data(self) -> None:
        await self.validate_schema()

    async def generate(self) -> list[GeneratedFile]:
        raise NotImplementedError

    async def execute(self) -> GenerationResult:
        """Run the generator and write its files.

        Failures are reported in the result rather than raised.
        """
        self.logger.info("Generating %s...", self.name)

        if self.should_skip():
            self.logger.info("Skipping %s generation", self.name)
            return GenerationResult(success=True, skipped=True)

        try:
            await self.validate_data()
            files = await self.generate()

            if self.validator is not None:
                for file in files:
                    self.validator.validate(file.content)

            if self.stdout:
                self.output_to_stream(files)
            else:
                self.output_to_files(files)
        except DdlSyncError as e:
            self.logger.error("%s generation failed: %s", self.name, e.message)
            return GenerationResult(success=False, error=e.message)

        self.logger.info("%s generation completed successfully", self.name)
        return GenerationResult(success=True, files=files)

    def output_to_stream(self, files: list[GeneratedFile]) -> None:
        stream = self.stream or sys.stdout
        for index, file in enumerate(files):
            if index > 0:
                stream.write("\n" + "=" * 80 + "\n\n")
            stream.write(f"-- {file.filename}\n\n")
            stream.write(file.content)
            stream.write("\n")

    def output_to_files(self, files: list[GeneratedFile]) -> None:
        directory = Path(self.output_dir)
        try:
            directory.mkdir(parents=True, exist_ok=True)
            for file in files:
                path = directory / file.filename
                path.write_text(file.content, encoding="utf-8")
                self.logger.info("Generated: %s", path)
        except OSError as e:
            raise OutputError(f"Could not write to {directory}: {e}", path=str(directory)) from e

    def header(self, title: str, description: str) -> str:
        rule = section_header(title)
        lines = [
            rule[0],
            rule[1],
            rule[2],
            f"-- Generated: {self.clock().isoformat(timespec='seconds')}",
            f"-- Schema: {self.schema}",
            f"-- Description: {description}",
            rule[0],
            "",
            "",
        ]
        return "\n".join(lines)

    def footer(self) -> str:
        return "\n".join(script_footer(self.name.upper())) + "\n"
