"""Trigger sync."""

import asyncio

from ddl_sync.ddl.routines import build_rename_trigger, build_trigger, trigger_signature
from ddl_sync.sync.base import SyncOperations, diff_entities


class TriggerOperations(SyncOperations):
    """Creates, renames and replaces triggers, matched per table and name.

    Triggers on a table that exists only in the target move with that
    table when the table phase renames it, so they are left alone.
    """

    entity = "trigger"

    async def generate_operations(self) -> list[str]:
        source, target = await asyncio.gather(self.source.triggers(), self.target.triggers())
        source_tables, target_tables = await self.fetch_tables()
        renamed_tables = {t.name for t in target_tables} - {t.name for t in source_tables}

        diff = diff_entities(
            source,
            target,
            key=lambda t: t.key(),
            signature=trigger_signature,
        )
        statements: list[str] = []

        for trigger in diff.to_drop:
            if trigger.table_name in renamed_tables:
                statements.extend([
                    self.missing_in_source(f"Trigger {trigger.name} on table {trigger.table_name}"),
                    f"-- Trigger {trigger.name} moves with renamed table {trigger.table_name}",
                    "",
                ])
                continue

            backup = self.namer.dropped(trigger.name)
            statements.extend([
                self.missing_in_source(f"Trigger {trigger.name} on table {trigger.table_name}"),
                "-- Renaming trigger to preserve it before manual drop",
                build_rename_trigger(trigger, self.target_schema, backup),
                f"-- TODO: Manually drop trigger {backup} on {self.target_schema}.{trigger.table_name} "
                "after confirming it is no longer needed",
                "",
            ])

        for trigger in diff.to_create:
            statements.extend([
                f"-- Create missing trigger {trigger.name} on table {trigger.table_name}",
                build_trigger(trigger, self.target_schema, self.source_schema),
                "",
            ])

        for source_tg, _ in diff.to_update:
            backup = self.namer.old(source_tg.name)
            statements.extend([
                f"-- Trigger {source_tg.name} on table {source_tg.table_name} differs between "
                f"{self.source_schema} and {self.target_schema}",
                "-- Renaming existing trigger before recreating it",
                build_rename_trigger(source_tg, self.target_schema, backup),
                build_trigger(source_tg, self.target_schema, self.source_schema),
                f"-- TODO: Drop trigger {backup} on {self.target_schema}.{source_tg.table_name} "
                "after confirming the new trigger is correct",
                "",
            ])

        return statements
