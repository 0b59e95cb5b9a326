"""Command line entry point for ddl-sync."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from ddl_sync.config import Settings
from ddl_sync.generators import ProcsGenerator, SchemaGenerator, TriggersGenerator
from ddl_sync.models.database import DatabaseConfig
from ddl_sync.services.connections import ConnectionManager
from ddl_sync.services.introspection import IntrospectionService
from ddl_sync.services.snapshot import SchemaReader
from ddl_sync.services.sql_validator import ScriptValidator
from ddl_sync.sync.orchestrator import SchemaSyncOrchestrator
from ddl_sync.utils.constants import SYNC_FILE
from ddl_sync.utils.exceptions import DdlSyncError
from ddl_sync.utils.formatting import output_filename

logger = logging.getLogger("ddl-sync")


def build_parser() -> argparse.ArgumentParser:
    """Build the ``gen`` / ``sync`` argument parser."""
    parser = argparse.ArgumentParser(
        prog="ddl-sync",
        description="Generate DDL for a PostgreSQL schema or a sync script between two schemas"
    )
    parser.add_argument("--log-level", type=str, help="Logging level (DEBUG, INFO, WARNING, ERROR)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--source-dsn", type=str, help="Source database DSN")
    common.add_argument("--source", type=str, dest="source_schema", help="Source schema name")
    common.add_argument("--output-dir", type=str, help="Directory for generated files")
    common.add_argument("--stdout", action="store_true", default=None, help="Print to standard output")
    common.add_argument("--validate", action="store_true", default=None, dest="validate_output",
                        help="Lint generated statements with sqlglot")
    only = common.add_mutually_exclusive_group()
    only.add_argument("--schema-only", action="store_true", default=None, help="Tables, sequences and indexes only")
    only.add_argument("--procs-only", action="store_true", default=None, help="Functions and procedures only")
    only.add_argument("--triggers-only", action="store_true", default=None, help="Triggers only")

    subparsers.add_parser("gen", parents=[common], help="Generate schema.sql, procs.sql and triggers.sql")

    sync = subparsers.add_parser("sync", parents=[common], help="Generate a sync script from source to target")
    sync.add_argument("--target-dsn", type=str, help="Target database DSN (defaults to the source DSN)")
    sync.add_argument("--target", type=str, dest="target_schema", help="Target schema name")
    sync.add_argument("--output", type=str, dest="output_file", help="File to write the sync script to")
    sync.add_argument("--save", action="store_true", default=None, help="Save to an auto-named file in the output directory")

    return parser


def load_settings(args: argparse.Namespace) -> Settings:
    """Settings from the environment, overridden by command line flags."""
    overrides = {
        key: value
        for key, value in vars(args).items()
        if key != "command" and value is not None
    }
    return Settings(**overrides)


def _database_config(name: str, dsn: str, settings: Settings) -> DatabaseConfig:
    return DatabaseConfig(
        name=name,
        dsn=dsn,
        ssl=settings.ssl,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
        command_timeout=settings.command_timeout
    )


def _connection_manager(settings: Settings) -> ConnectionManager:
    return ConnectionManager(
        retry_max_attempts=settings.retry_max_attempts,
        retry_base_delay=settings.retry_base_delay,
        retry_max_delay=settings.retry_max_delay
    )


async def run_gen(settings: Settings) -> int:
    """Generate the single-schema files.

    Returns:
        Process exit code.
    """
    validator = ScriptValidator() if settings.validate_output else None

    async with _connection_manager(settings) as manager:
        manager.add_database(_database_config("source", settings.get_source_dsn(), settings))
        await manager.verify("source")
        pool = await manager.get_pool("source")
        reader = SchemaReader(IntrospectionService(pool, settings.source_schema))

        options = dict(
            output_dir=settings.output_dir,
            stdout=settings.stdout,
            schema_only=settings.schema_only,
            procs_only=settings.procs_only,
            triggers_only=settings.triggers_only,
            validator=validator,
        )
        results = []
        for generator_class in (SchemaGenerator, ProcsGenerator, TriggersGenerator):
            results.append(await generator_class(reader, **options).execute())

    failed = [r for r in results if not r.success]
    for result in failed:
        print(f"Error: {result.error}", file=sys.stderr)
    return 1 if failed else 0


def sync_output_path(settings: Settings) -> Optional[str]:
    """Where the sync script goes; None means standard output only."""
    target = settings.target_schema or ""
    if settings.output_file:
        return settings.output_file
    if settings.save:
        return str(Path(settings.output_dir) / output_filename(settings.source_schema, target))
    if settings.stdout:
        return None
    return str(Path(settings.output_dir) / SYNC_FILE)


async def run_sync(settings: Settings) -> int:
    """Generate the source-to-target sync script.

    Returns:
        Process exit code.
    """
    async with _connection_manager(settings) as manager:
        manager.add_database(_database_config("source", settings.get_source_dsn(), settings))
        manager.add_database(_database_config("target", settings.get_target_dsn(), settings))
        await manager.verify("source", "target")
        source_pool = await manager.get_pool("source")
        target_pool = await manager.get_pool("target")

        orchestrator = SchemaSyncOrchestrator(
            SchemaReader(IntrospectionService(source_pool, settings.source_schema)),
            SchemaReader(IntrospectionService(target_pool, settings.target_schema or "")),
            schema_only=settings.schema_only,
            procs_only=settings.procs_only,
            triggers_only=settings.triggers_only,
            logger=logging.getLogger("ddl-sync.orchestrator"),
            validator=ScriptValidator() if settings.validate_output else None
        )
        output_path = sync_output_path(settings)
        script = await orchestrator.execute(output_path)

    if output_path is None:
        sys.stdout.write(script)
    return 0


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args)
    except ValidationError as e:
        parser.error(str(e))

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        stream=sys.stderr,
    )

    if args.command == "sync" and not settings.target_schema:
        parser.error("sync requires a target schema (--target or DDL_SYNC_TARGET_SCHEMA)")

    logger.info("Starting ddl-sync %s", args.command)
    runner = run_sync if args.command == "sync" else run_gen

    try:
        code = asyncio.run(runner(settings))
    except DdlSyncError as e:
        logger.error("%s: %s", e.code.value, e.message)
        print(f"Error: {e.message}", file=sys.stderr)
        for key in ("suggestion", "available_schemas"):
            if key in e.details:
                print(f"  {key.replace('_', ' ')}: {e.details[key]}", file=sys.stderr)
        code = 1

    sys.exit(code)


if __name__ == "__main__":
    main()
