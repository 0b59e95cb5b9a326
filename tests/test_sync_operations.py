"""Tests for the per-entity diff engines."""

import pytest

from ddl_sync.sync.base import common_tables, diff_entities
from ddl_sync.sync.columns import ColumnOperations
from ddl_sync.sync.constraints import ConstraintOperations
from ddl_sync.sync.functions import FunctionOperations
from ddl_sync.sync.indexes import IndexOperations
from ddl_sync.sync.sequences import SequenceOperations
from ddl_sync.sync.tables import TableOperations
from ddl_sync.sync.triggers import TriggerOperations
from tests.fakes import (
    column_row,
    constraint_row,
    function_row,
    index_row,
    make_reader,
    nodes_table,
    orders_table,
    sequence_row,
    table_fixture,
    trigger_rows,
    users_table,
)

ENGINES = [
    SequenceOperations,
    TableOperations,
    ColumnOperations,
    ConstraintOperations,
    IndexOperations,
    FunctionOperations,
    TriggerOperations,
]


def full_schema(schema):
    return {
        "tables": {
            "users": users_table(schema),
            "orders": orders_table(schema),
            "nodes": nodes_table(schema),
        },
        "sequences": [sequence_row("users_id_seq", schema, data_type="integer", maximum="2147483647")],
        "functions": [
            function_row("add", schema, arguments="a integer, b integer", body="SELECT a + b"),
            function_row("purge", schema, kind="PROCEDURE", body="DELETE FROM orders"),
        ],
        "triggers": trigger_rows("touch", "users", schema, events=("INSERT", "UPDATE")),
    }


class TestDiffEntities:
    """Generic diff tests."""

    def test_disjoint_sets(self):
        """Test create, drop and update are computed by key and signature."""
        source = [("a", 1), ("b", 2), ("c", 3)]
        target = [("b", 2), ("c", 30), ("d", 4)]
        diff = diff_entities(source, target, key=lambda x: x[0], signature=lambda x: x[1])
        assert diff.to_create == [("a", 1)]
        assert diff.to_drop == [("d", 4)]
        assert diff.to_update == [(("c", 3), ("c", 30))]

    def test_identical(self):
        """Test identical inputs give empty sets."""
        items = [("a", 1)]
        assert diff_entities(items, items, key=lambda x: x[0], signature=lambda x: x[1]) == ([], [], [])


class TestIdentity:
    """Schemas with identical content produce no operations."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("engine", ENGINES)
    async def test_no_changes_across_schema_names(self, engine, namer):
        """Test content-equal schemas under different names diff to nothing."""
        source = make_reader("dev", **full_schema("dev"))
        target = make_reader("prod", **full_schema("prod"))
        assert await engine(source, target, namer).generate_operations() == []

    @pytest.mark.asyncio
    async def test_no_self_references_without_new_tables(self, namer):
        """Test existing self-referencing tables are not re-emitted."""
        source = make_reader("dev", **full_schema("dev"))
        target = make_reader("prod", **full_schema("prod"))
        ops = TableOperations(source, target, namer)
        assert await ops.generate_self_referencing_operations() == []


class TestTableOperations:
    """Table engine tests."""

    def setup_method(self):
        """Source has three tables, target has one shared and one obsolete."""
        self.source = make_reader("dev", tables={
            "orders": orders_table("dev"),
            "users": users_table("dev"),
            "nodes": nodes_table("dev"),
        })
        self.target = make_reader("prod", tables={
            "nodes": nodes_table("prod"),
            "legacy": table_fixture(columns=[column_row("id")]),
        })

    @pytest.mark.asyncio
    async def test_creates_in_dependency_order(self, namer):
        """Test referenced tables are created first."""
        script = "\n".join(await TableOperations(self.source, self.target, namer).generate_operations())
        assert script.index("-- Create missing table users") < script.index("-- Create missing table orders")
        assert 'CREATE TABLE "prod"."orders"' in script
        assert 'REFERENCES "prod"."users" ("id") ON DELETE CASCADE;' in script
        assert "nextval('prod.users_id_seq'::regclass)" in script
        assert "-- Create missing table nodes" not in script

    @pytest.mark.asyncio
    async def test_obsolete_table_renamed_not_dropped(self, namer):
        """Test target-only tables are renamed with a TODO."""
        lines = await TableOperations(self.source, self.target, namer).generate_operations()
        assert "-- Table legacy exists in prod but not in dev" in lines
        assert 'ALTER TABLE "prod"."legacy" RENAME TO "legacy_dropped_1700000000000";' in lines
        assert not any(line.startswith("DROP TABLE") for line in lines)

    @pytest.mark.asyncio
    async def test_self_reference_deferred(self, namer):
        """Test self-referencing keys of new tables come from the separate phase."""
        source = make_reader("dev", tables={"nodes": nodes_table("dev")})
        target = make_reader("prod", tables={})
        ops = TableOperations(source, target, namer)
        created = "\n".join(await ops.generate_operations())
        deferred = await ops.generate_self_referencing_operations()
        assert "nodes_parent_id_fkey" not in created
        assert (
            'ALTER TABLE "prod"."nodes" ADD CONSTRAINT "nodes_parent_id_fkey" FOREIGN KEY ("parent_id") '
            'REFERENCES "prod"."nodes" ("id");'
        ) in deferred

    @pytest.mark.asyncio
    async def test_missing_tables(self, namer):
        """Test the set of source-only tables."""
        missing = await TableOperations(self.source, self.target, namer).missing_tables()
        assert [t.name for t in missing] == ["orders", "users"]

    @pytest.mark.asyncio
    async def test_common_tables(self):
        """Test pairing of shared tables."""
        pairs = common_tables(await self.source.tables(), await self.target.tables())
        assert [(s.schema_name, t.schema_name, s.name) for s, t in pairs] == [("dev", "prod", "nodes")]


class TestColumnOperations:
    """Column engine tests."""

    @pytest.mark.asyncio
    async def test_changed_column_renamed_and_readded(self, namer):
        """Test a length change is handled by rename plus add."""
        source = make_reader("dev", tables={"users": users_table("dev", email_length=255)})
        target = make_reader("prod", tables={"users": users_table("prod", email_length=120)})
        lines = await ColumnOperations(source, target, namer).generate_operations()
        assert "-- Modifying column users.email" in lines
        assert "--   dev: character varying(255) NOT NULL" in lines
        assert "--   prod: character varying(120) NOT NULL" in lines
        rename = 'ALTER TABLE "prod"."users" RENAME COLUMN "email" TO "email_old_1700000000000";'
        add = 'ALTER TABLE "prod"."users" ADD COLUMN "email" character varying(255) NOT NULL;'
        assert lines.index(rename) < lines.index(add)
        assert not any("ALTER COLUMN" in line for line in lines)

    @pytest.mark.asyncio
    async def test_missing_and_obsolete_columns(self, namer):
        """Test added and target-only columns."""
        source_users = users_table("dev")
        source_users["columns"].append(column_row("nickname", "text", 3))
        target_users = users_table("prod")
        target_users["columns"].append(column_row("legacy_flag", "boolean", 3))
        source = make_reader("dev", tables={"users": source_users})
        target = make_reader("prod", tables={"users": target_users})

        lines = await ColumnOperations(source, target, namer).generate_operations()
        assert 'ALTER TABLE "prod"."users" ADD COLUMN "nickname" text;' in lines
        assert (
            'ALTER TABLE "prod"."users" RENAME COLUMN "legacy_flag" TO "legacy_flag_dropped_1700000000000";'
        ) in lines
        assert "-- Column users.legacy_flag exists in prod but not in dev" in lines
        assert not any("DROP COLUMN" in line for line in lines)

    @pytest.mark.asyncio
    async def test_tables_only_in_one_schema_ignored(self, namer):
        """Test columns of unshared tables are left to the table engine."""
        source = make_reader("dev", tables={"users": users_table("dev")})
        target = make_reader("prod", tables={"orders": orders_table("prod")})
        assert await ColumnOperations(source, target, namer).generate_operations() == []

    @pytest.mark.asyncio
    async def test_schema_in_default_expression_masked(self, namer):
        """Test defaults calling a function in each side's own schema compare equal."""
        tables = {}
        for schema in ("dev", "prod"):
            users = users_table(schema)
            users["columns"].append(column_row("code", "text", 3, default=f"{schema}.next_code()"))
            tables[schema] = {"users": users}
        source = make_reader("dev", tables=tables["dev"])
        target = make_reader("prod", tables=tables["prod"])
        assert await ColumnOperations(source, target, namer).generate_operations() == []

    @pytest.mark.asyncio
    async def test_unqualified_sequence_default_retargeted(self, namer):
        """Test a search_path-relative sequence default is pinned to the target schema."""
        source_users = users_table("public")
        source_users["columns"].append(
            column_row("ticket", "integer", 3, default="nextval('tickets_seq'::regclass)")
        )
        source = make_reader("public", tables={"users": source_users})
        target = make_reader("prod", tables={"users": users_table("prod")})

        lines = await ColumnOperations(source, target, namer).generate_operations()
        assert (
            'ALTER TABLE "prod"."users" ADD COLUMN "ticket" integer '
            "DEFAULT nextval('prod.tickets_seq'::regclass);"
        ) in lines


class TestConstraintOperations:
    """Constraint engine tests."""

    def setup_method(self):
        """Source adds a FK and a UNIQUE and changes a CHECK; target has an extra CHECK."""
        source_orders = orders_table("dev")
        source_orders["constraints"].append(
            constraint_row("orders_amount_check", "CHECK", None, check="(amount > 0)")
        )
        target_orders = orders_table("prod")
        target_orders["constraints"] = [
            constraint_row("orders_pkey", "PRIMARY KEY", "id"),
            constraint_row("orders_amount_check", "CHECK", None, check="(amount >= 0)"),
            constraint_row("orders_legacy_check", "CHECK", None, check="(id > 0)"),
            constraint_row("2200_16400_1_not_null", "CHECK", "id"),
        ]
        source_users = users_table("dev")
        source_users["constraints"].append(constraint_row("users_email_lower_key", "UNIQUE", "email"))

        self.source = make_reader("dev", tables={"orders": source_orders, "users": source_users})
        self.target = make_reader("prod", tables={"orders": target_orders, "users": users_table("prod")})

    @pytest.mark.asyncio
    async def test_drop_then_create_then_update(self, namer):
        """Test drops precede creates, which precede replacements."""
        lines = await ConstraintOperations(self.source, self.target, namer).generate_operations()
        drop = 'ALTER TABLE "prod"."orders" DROP CONSTRAINT "orders_legacy_check";'
        unique = 'ALTER TABLE "prod"."users" ADD CONSTRAINT "users_email_lower_key" UNIQUE ("email");'
        fk = (
            'ALTER TABLE "prod"."orders" ADD CONSTRAINT "orders_user_id_fkey" FOREIGN KEY ("user_id") '
            'REFERENCES "prod"."users" ("id") ON DELETE CASCADE;'
        )
        rename = (
            'ALTER TABLE "prod"."orders" RENAME CONSTRAINT "orders_amount_check" '
            'TO "orders_amount_check_old_1700000000000";'
        )
        assert lines.index(drop) < lines.index(unique) < lines.index(fk) < lines.index(rename)
        assert 'ALTER TABLE "prod"."orders" ADD CONSTRAINT "orders_amount_check" CHECK ((amount > 0));' in lines

    @pytest.mark.asyncio
    async def test_not_null_ignored(self, namer):
        """Test system NOT NULL checks never appear."""
        script = "\n".join(await ConstraintOperations(self.source, self.target, namer).generate_operations())
        assert "not_null" not in script

    @pytest.mark.asyncio
    async def test_deferrable_unique_recreated(self, namer):
        """Test a UNIQUE constraint made deferrable is renamed and recreated as deferrable."""
        source_users = users_table("dev")
        source_users["constraints"].append(
            constraint_row("users_email_unique", "UNIQUE", "email", deferrable=True)
        )
        target_users = users_table("prod")
        target_users["constraints"].append(constraint_row("users_email_unique", "UNIQUE", "email"))
        source = make_reader("dev", tables={"users": source_users})
        target = make_reader("prod", tables={"users": target_users})

        lines = await ConstraintOperations(source, target, namer).generate_operations()
        rename = (
            'ALTER TABLE "prod"."users" RENAME CONSTRAINT "users_email_unique" '
            'TO "users_email_unique_old_1700000000000";'
        )
        create = 'ALTER TABLE "prod"."users" ADD CONSTRAINT "users_email_unique" UNIQUE ("email") DEFERRABLE;'
        assert lines.index(rename) < lines.index(create)

    @pytest.mark.asyncio
    async def test_schema_in_check_clause_masked(self, namer):
        """Test a check calling a schema-qualified function is not a change."""
        tables = {}
        for schema in ("dev", "prod"):
            orders = orders_table(schema)
            orders["constraints"].append(
                constraint_row("orders_code_check", "CHECK", None, check=f"({schema}.valid_code(id))")
            )
            tables[schema] = {"orders": orders}
        source = make_reader("dev", tables=tables["dev"])
        target = make_reader("prod", tables=tables["prod"])
        assert await ConstraintOperations(source, target, namer).generate_operations() == []


class TestIndexOperations:
    """Index engine tests."""

    def setup_method(self):
        """Source adds and changes indexes; target has an obsolete one."""
        source_users = users_table("dev")
        source_users["indexes"] += [
            index_row("users_created_idx", "users", "dev", "created_at"),
            index_row("users_active_idx", "users", "dev", "email", where="(active = true)"),
        ]
        target_users = users_table("prod")
        target_users["indexes"] = [
            index_row("users_pkey", "users", "prod", "id", primary=True),
            index_row("users_email_key", "users", "prod", "lower(email)", unique=True),
            index_row("users_active_idx", "users", "prod", "email"),
            index_row("users_legacy_idx", "users", "prod", "legacy"),
        ]
        self.source = make_reader("dev", tables={"users": source_users})
        self.target = make_reader("prod", tables={"users": target_users})

    @pytest.mark.asyncio
    async def test_create_rename_and_replace(self, namer):
        """Test each index change kind."""
        lines = await IndexOperations(self.source, self.target, namer).generate_operations()
        assert 'CREATE INDEX "users_created_idx" ON "prod"."users" ("created_at");' in lines
        assert (
            'ALTER INDEX "prod"."users_legacy_idx" RENAME TO "users_legacy_idx_dropped_1700000000000";'
        ) in lines
        rename = 'ALTER INDEX "prod"."users_active_idx" RENAME TO "users_active_idx_old_1700000000000";'
        create = 'CREATE INDEX "users_active_idx" ON "prod"."users" ("email") WHERE (active = true);'
        assert lines.index(rename) < lines.index(create)
        assert not any(line.startswith("DROP INDEX") for line in lines)

    @pytest.mark.asyncio
    async def test_constraint_backed_indexes_skipped(self, namer):
        """Test primary and unique-constraint indexes are excluded."""
        script = "\n".join(await IndexOperations(self.source, self.target, namer).generate_operations())
        assert "users_email_key" not in script
        assert "users_pkey" not in script

    @pytest.mark.asyncio
    async def test_include_columns_compared_and_rendered(self, namer):
        """Test an INCLUDE list difference replaces the index with the list kept."""
        source_orders = orders_table("dev")
        source_orders["indexes"][1] = index_row(
            "orders_user_id_idx", "orders", "dev", "user_id", options="INCLUDE (total)"
        )
        source = make_reader("dev", tables={"orders": source_orders})
        target = make_reader("prod", tables={"orders": orders_table("prod")})

        lines = await IndexOperations(source, target, namer).generate_operations()
        rename = 'ALTER INDEX "prod"."orders_user_id_idx" RENAME TO "orders_user_id_idx_old_1700000000000";'
        create = 'CREATE INDEX "orders_user_id_idx" ON "prod"."orders" ("user_id") INCLUDE (total);'
        assert lines.index(rename) < lines.index(create)


class TestSequenceOperations:
    """Sequence engine tests."""

    def setup_method(self):
        """Source has a new and a changed sequence; target has an obsolete one."""
        self.source = make_reader("dev", sequences=[
            sequence_row("users_id_seq", "dev", increment="10"),
            sequence_row("invoices_seq", "dev"),
        ])
        self.target = make_reader("prod", sequences=[
            sequence_row("users_id_seq", "prod"),
            sequence_row("old_seq", "prod"),
        ])

    @pytest.mark.asyncio
    async def test_create_update_then_drop(self, namer):
        """Test ordering and rendering."""
        lines = await SequenceOperations(self.source, self.target, namer).generate_operations()
        create = 'CREATE SEQUENCE IF NOT EXISTS "prod"."invoices_seq" NO CYCLE;'
        rename = 'ALTER SEQUENCE "prod"."users_id_seq" RENAME TO "users_id_seq_old_1700000000000";'
        recreate = 'CREATE SEQUENCE IF NOT EXISTS "prod"."users_id_seq" INCREMENT BY 10 NO CYCLE;'
        dropped = '-- ALTER SEQUENCE "prod"."old_seq" RENAME TO "old_seq_dropped_1700000000000";'
        assert lines.index(create) < lines.index(rename) < lines.index(recreate) < lines.index(dropped)

    @pytest.mark.asyncio
    async def test_obsolete_sequence_only_commented(self, namer):
        """Test target-only sequences produce comments only."""
        lines = await SequenceOperations(self.source, self.target, namer).generate_operations()
        old_seq_lines = [line for line in lines if "old_seq" in line]
        assert old_seq_lines
        assert all(line.startswith("--") for line in old_seq_lines)


class TestFunctionOperations:
    """Function engine tests."""

    def setup_method(self):
        """Source adds an overload and changes a body; target has obsolete routines."""
        self.source = make_reader("dev", functions=[
            function_row("add", "dev", arguments="a integer, b integer", body="SELECT a + b"),
            function_row("add", "dev", arguments="a numeric", body="SELECT a"),
        ])
        self.target = make_reader("prod", functions=[
            function_row("add", "prod", arguments="a integer, b integer", body="SELECT b + a"),
            function_row("legacy", "prod"),
            function_row("purge", "prod", kind="PROCEDURE"),
        ])

    @pytest.mark.asyncio
    async def test_overload_created_with_target_schema(self, namer):
        """Test a new overload is created with the schema swapped."""
        lines = await FunctionOperations(self.source, self.target, namer).generate_operations()
        assert "-- Create missing function add(a numeric)" in lines
        created = [line for line in lines if line.startswith("CREATE OR REPLACE FUNCTION prod.add(a numeric)")]
        assert len(created) == 1
        assert created[0].endswith("$function$;")
        assert "dev." not in "\n".join(lines)

    @pytest.mark.asyncio
    async def test_changed_body_renamed_and_recreated(self, namer):
        """Test a changed overload is renamed before recreation."""
        lines = await FunctionOperations(self.source, self.target, namer).generate_operations()
        rename = 'ALTER FUNCTION "prod"."add"(a integer, b integer) RENAME TO "add_old_1700000000000";'
        assert rename in lines
        recreated = next(i for i, line in enumerate(lines) if "SELECT a + b" in line)
        assert lines.index(rename) < recreated

    @pytest.mark.asyncio
    async def test_obsolete_routines_renamed(self, namer):
        """Test target-only functions and procedures are renamed."""
        lines = await FunctionOperations(self.source, self.target, namer).generate_operations()
        assert 'ALTER FUNCTION "prod"."legacy"() RENAME TO "legacy_dropped_1700000000000";' in lines
        assert 'ALTER PROCEDURE "prod"."purge"() RENAME TO "purge_dropped_1700000000000";' in lines
        assert not any(line.startswith("DROP ") for line in lines)

    @pytest.mark.asyncio
    async def test_schema_qualified_types_match(self, namer):
        """Test argument and return types qualified with each schema compare equal."""
        source = make_reader("dev", functions=[
            function_row("active_users", "dev", return_type="SETOF dev.users"),
            function_row("touch", "dev", arguments="u dev.users"),
        ])
        target = make_reader("prod", functions=[
            function_row("active_users", "prod", return_type="SETOF prod.users"),
            function_row("touch", "prod", arguments="u prod.users"),
        ])
        assert await FunctionOperations(source, target, namer).generate_operations() == []


class TestTriggerOperations:
    """Trigger engine tests."""

    @pytest.mark.asyncio
    async def test_matched_per_table(self, namer):
        """Test a same-named trigger on another table is a create plus a drop."""
        source = make_reader("dev", triggers=trigger_rows("touch", "users", "dev"))
        target = make_reader("prod", triggers=trigger_rows("touch", "orders", "prod"))
        lines = await TriggerOperations(source, target, namer).generate_operations()
        assert (
            "CREATE TRIGGER touch BEFORE INSERT ON prod.users FOR EACH ROW "
            "EXECUTE FUNCTION prod.set_updated_at();"
        ) in lines
        assert 'ALTER TRIGGER "touch" ON "prod"."orders" RENAME TO "touch_dropped_1700000000000";' in lines

    @pytest.mark.asyncio
    async def test_changed_timing(self, namer):
        """Test a timing change renames and recreates."""
        source = make_reader("dev", triggers=trigger_rows("touch", "users", "dev", timing="AFTER"))
        target = make_reader("prod", triggers=trigger_rows("touch", "users", "prod", timing="BEFORE"))
        lines = await TriggerOperations(source, target, namer).generate_operations()
        rename = 'ALTER TRIGGER "touch" ON "prod"."users" RENAME TO "touch_old_1700000000000";'
        assert rename in lines
        assert any(line.startswith("CREATE TRIGGER touch AFTER INSERT ON prod.users") for line in lines)

    @pytest.mark.asyncio
    async def test_triggers_move_with_renamed_table(self, namer):
        """Test triggers of a target-only table are not renamed on their own."""
        source = make_reader("dev", tables={"users": users_table("dev")})
        target = make_reader(
            "prod",
            tables={"users": users_table("prod"), "legacy": table_fixture(columns=[column_row("id")])},
            triggers=trigger_rows("legacy_audit", "legacy", "prod"),
        )
        table_lines = await TableOperations(source, target, namer).generate_operations()
        trigger_lines = await TriggerOperations(source, target, namer).generate_operations()

        assert 'ALTER TABLE "prod"."legacy" RENAME TO "legacy_dropped_1700000000000";' in table_lines
        assert "-- Trigger legacy_audit moves with renamed table legacy" in trigger_lines
        assert not any(line.startswith("ALTER TRIGGER") for line in trigger_lines)

    @pytest.mark.asyncio
    async def test_trigger_on_shared_table_still_renamed(self, namer):
        """Test a target-only trigger on a shared table keeps the rename."""
        source = make_reader("dev", tables={"users": users_table("dev")})
        target = make_reader(
            "prod",
            tables={"users": users_table("prod")},
            triggers=trigger_rows("users_audit", "users", "prod"),
        )
        lines = await TriggerOperations(source, target, namer).generate_operations()
        assert 'ALTER TRIGGER "users_audit" ON "prod"."users" RENAME TO "users_audit_dropped_1700000000000";' in lines
