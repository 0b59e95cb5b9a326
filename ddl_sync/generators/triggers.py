"""triggers.sql: every trigger in one schema, grouped by table."""

from itertools import groupby

from ddl_sync.ddl.routines import build_trigger
from ddl_sync.generators.base import BaseGenerator
from ddl_sync.models.output import GeneratedFile
from ddl_sync.models.schema import TriggerDefinition
from ddl_sync.utils.constants import TRIGGERS_FILE


class TriggersGenerator(BaseGenerator):
    """Writes trigger definitions. A schema without triggers yields an
    empty section rather than an error."""

    name = "Triggers Generator"

    def should_skip(self) -> bool:
        return self.schema_only or self.procs_only

    async def generate(self) -> list[GeneratedFile]:
        triggers = await self.reader.triggers()
        self.logger.info("Found %d triggers in schema %s", len(triggers), self.schema)
        return [GeneratedFile(
            filename=TRIGGERS_FILE,
            content=self.render(triggers),
            description="Triggers",
        )]

    def render(self, triggers: list[TriggerDefinition]) -> str:
        sql = self.header("TRIGGERS", "Table triggers")

        if not triggers:
            sql += "-- No triggers found\n"

        ordered = sorted(triggers, key=lambda t: (t.table_name, t.name))
        for table_name, group in groupby(ordered, key=lambda t: t.table_name):
            sql += f"-- Table: {table_name}\n\n"
            for trigger in group:
                sql += f"-- Trigger: {trigger.name} ({trigger.timing} {' OR '.join(trigger.events)})\n"
                sql += build_trigger(trigger, self.schema) + "\n\n"

        return sql + self.footer()
