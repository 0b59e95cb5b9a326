"""Function and procedure sync."""

import asyncio

from ddl_sync.ddl.routines import build_function, build_rename_function, function_signature
from ddl_sync.sync.base import SyncOperations, diff_entities


class FunctionOperations(SyncOperations):
    """Creates, renames and replaces routines.

    Overloads are matched on name, kind and identity arguments. Bodies
    are compared with the schema name masked.
    """

    entity = "function"

    async def generate_operations(self) -> list[str]:
        source, target = await asyncio.gather(self.source.functions(), self.target.functions())
        diff = diff_entities(
            source,
            target,
            key=lambda f: f.key(),
            signature=function_signature,
        )
        statements: list[str] = []

        for function in diff.to_drop:
            backup = self.namer.dropped(function.name)
            kind = function.kind.value.lower()
            statements.extend([
                self.missing_in_source(f"{function.kind.value.capitalize()} {function.signature}"),
                f"-- Renaming {kind} to preserve it before manual drop",
                build_rename_function(function, self.target_schema, backup),
                f"-- TODO: Manually drop {kind} {self.target_schema}.{backup}({function.arguments}) "
                "after confirming it is no longer needed",
                "",
            ])

        for function in diff.to_create:
            statements.extend([
                f"-- Create missing {function.kind.value.lower()} {function.signature}",
                build_function(function, self.target_schema, self.source_schema),
                "",
            ])

        for source_fn, target_fn in diff.to_update:
            backup = self.namer.old(source_fn.name)
            kind = source_fn.kind.value.lower()
            statements.extend([
                f"-- {source_fn.kind.value.capitalize()} {source_fn.signature} differs between "
                f"{self.source_schema} and {self.target_schema}",
                f"-- Renaming existing {kind} before recreating it",
                build_rename_function(target_fn, self.target_schema, backup),
                build_function(source_fn, self.target_schema, self.source_schema),
                f"-- TODO: Drop {kind} {self.target_schema}.{backup}({target_fn.arguments}) "
                "after confirming the new version is correct",
                "",
            ])

        return statements
