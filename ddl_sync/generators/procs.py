"""procs.sql: every function and procedure in one schema."""

from ddl_sync.ddl.routines import build_function
from ddl_sync.generators.base import BaseGenerator
from ddl_sync.models.output import GeneratedFile
from ddl_sync.models.schema import FunctionDefinition, RoutineKind
from ddl_sync.utils.constants import PROCS_FILE
from ddl_sync.utils.validation import validate_not_empty


class ProcsGenerator(BaseGenerator):
    """Writes function and procedure definitions."""

    name = "Procedures Generator"

    def should_skip(self) -> bool:
        return self.schema_only or self.triggers_only

    async def validate_data(self) -> None:
        await self.validate_schema()
        validate_not_empty(await self.reader.functions(), "functions or procedures", self.schema)

    async def generate(self) -> list[GeneratedFile]:
        functions = await self.reader.functions()
        return [GeneratedFile(
            filename=PROCS_FILE,
            content=self.render(functions),
            description="Functions and procedures",
        )]

    def render(self, functions: list[FunctionDefinition]) -> str:
        sql = self.header("FUNCTIONS AND PROCEDURES", "Stored functions and procedures")

        for kind, title in ((RoutineKind.FUNCTION, "Functions"), (RoutineKind.PROCEDURE, "Procedures")):
            routines = [f for f in functions if f.kind == kind]
            if not routines:
                continue
            sql += f"-- {title}\n\n"
            for routine in routines:
                sql += f"-- {kind.value}: {routine.signature}\n"
                if routine.comment:
                    sql += f"-- {routine.comment}\n"
                sql += build_function(routine, self.schema) + "\n\n"

        return sql + self.footer()
