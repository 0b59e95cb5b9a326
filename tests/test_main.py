"""Tests for the command line entry point."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from ddl_sync import main as cli
from ddl_sync.config import Settings
from ddl_sync.utils.exceptions import DatabaseConnectionError


class TestParser:
    """Argument parsing tests."""

    def test_gen_arguments(self):
        """Test gen options map onto settings names."""
        args = cli.build_parser().parse_args(["gen", "--source", "dev", "--schema-only", "--stdout"])
        assert args.command == "gen"
        assert args.source_schema == "dev"
        assert args.schema_only is True
        assert args.procs_only is None

    def test_sync_arguments(self):
        """Test sync-only options."""
        args = cli.build_parser().parse_args([
            "sync", "--source", "dev", "--target", "prod", "--output", "out.sql", "--target-dsn", "postgresql://t/db"
        ])
        assert args.target_schema == "prod"
        assert args.output_file == "out.sql"
        assert args.target_dsn == "postgresql://t/db"

    def test_exclusive_flags_rejected(self):
        """Test combining *_only flags is a usage error."""
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["gen", "--schema-only", "--procs-only"])

    def test_command_required(self):
        """Test a subcommand must be given."""
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])


class TestLoadSettings:
    """Settings override tests."""

    def test_only_given_flags_override(self, monkeypatch):
        """Test unset flags leave environment values alone."""
        monkeypatch.setenv("DDL_SYNC_OUTPUT_DIR", "from-env")
        args = cli.build_parser().parse_args(["sync", "--source", "dev", "--target", "prod"])
        settings = cli.load_settings(args)
        assert settings.source_schema == "dev"
        assert settings.target_schema == "prod"
        assert settings.output_dir == "from-env"
        assert settings.stdout is False


class TestSyncOutputPath:
    """Output destination tests."""

    def test_explicit_file(self):
        """Test --output wins."""
        settings = Settings(_env_file=None, target_schema="prod", output_file="x.sql", save=True)
        assert cli.sync_output_path(settings) == "x.sql"

    def test_save_uses_generated_name(self):
        """Test --save picks a timestamped name in the output directory."""
        settings = Settings(_env_file=None, source_schema="dev", target_schema="prod", output_dir="out", save=True)
        path = cli.sync_output_path(settings)
        assert path.startswith("out/schema-sync_dev-to-prod_")
        assert path.endswith(".sql")

    def test_stdout(self):
        """Test --stdout alone writes no file."""
        settings = Settings(_env_file=None, target_schema="prod", stdout=True)
        assert cli.sync_output_path(settings) is None

    def test_default(self):
        """Test the default alter.sql location."""
        settings = Settings(_env_file=None, target_schema="prod", output_dir="out")
        assert cli.sync_output_path(settings) == "out/alter.sql"


class TestMain:
    """Entry point tests."""

    def test_sync_requires_target(self, monkeypatch):
        """Test sync without a target schema exits with a usage error."""
        monkeypatch.delenv("DDL_SYNC_TARGET_SCHEMA", raising=False)
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["sync", "--source", "dev"])
        assert exc_info.value.code == 2

    def test_errors_reported(self, monkeypatch, capsys):
        """Test a DdlSyncError becomes exit code 1 with its suggestion."""
        from ddl_sync.utils.validation import schema_not_found

        async def failing_run(settings):
            raise schema_not_found("ghost", ["public"])

        monkeypatch.setattr(cli, "run_gen", failing_run)
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["gen", "--source", "ghost"])
        assert exc_info.value.code == 1
        err = capsys.readouterr().err
        assert "Error: Schema 'ghost' does not exist" in err
        assert "available schemas: ['public']" in err

    def test_success_exit_code(self, monkeypatch):
        """Test the runner's code is the exit status."""
        async def ok_run(settings):
            return 0

        monkeypatch.setattr(cli, "run_sync", ok_run)
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["sync", "--source", "dev", "--target", "prod"])
        assert exc_info.value.code == 0


class TestConnectionCheck:
    """Runners check connectivity before reading any schema."""

    @pytest.mark.asyncio
    async def test_sync_stops_on_unreachable_database(self):
        """Test run_sync verifies both sides and reads nothing when one is down."""
        verify = AsyncMock(side_effect=DatabaseConnectionError("Connection check failed for target database"))
        introspection = MagicMock()
        settings = Settings(_env_file=None, source_schema="dev", target_schema="prod")
        with patch.object(cli.ConnectionManager, "verify", verify), \
                patch.object(cli, "IntrospectionService", introspection):
            with pytest.raises(DatabaseConnectionError):
                await cli.run_sync(settings)
        verify.assert_awaited_once_with("source", "target")
        introspection.assert_not_called()

    @pytest.mark.asyncio
    async def test_gen_checks_source(self):
        """Test run_gen verifies the source database."""
        verify = AsyncMock(side_effect=DatabaseConnectionError("Connection check failed for source database"))
        settings = Settings(_env_file=None, source_schema="dev")
        with patch.object(cli.ConnectionManager, "verify", verify):
            with pytest.raises(DatabaseConnectionError):
                await cli.run_gen(settings)
        verify.assert_awaited_once_with("source")
