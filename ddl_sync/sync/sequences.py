"""Schema-wide sequence sync."""

import asyncio

from ddl_sync.ddl.identifiers import qualified, quote_ident
from ddl_sync.ddl.sequences import build_sequence
from ddl_sync.sync.base import SyncOperations, diff_entities


class SequenceOperations(SyncOperations):
    """Creates and replaces sequences.

    Target-only sequences are never renamed or dropped automatically;
    the suggested rename is emitted as a comment for review.
    """

    entity = "sequence"

    async def generate_operations(self) -> list[str]:
        source, target = await asyncio.gather(self.source.sequences(), self.target.sequences())
        diff = diff_entities(
            source,
            target,
            key=lambda s: s.name,
            signature=lambda s: s.comparison_key(),
        )
        statements: list[str] = []

        for sequence in diff.to_create:
            statements.extend([
                f"-- Create missing sequence {sequence.name}",
                build_sequence(sequence, self.target_schema),
                "",
            ])

        for source_seq, _ in diff.to_update:
            backup = self.namer.old(source_seq.name)
            statements.extend([
                f"-- Sequence {source_seq.name} differs between {self.source_schema} and {self.target_schema}",
                f"ALTER SEQUENCE {qualified(self.target_schema, source_seq.name)} RENAME TO {quote_ident(backup)};",
                build_sequence(source_seq, self.target_schema),
                f"-- TODO: Column defaults still use {self.target_schema}.{backup}; "
                "reset the new sequence value and drop the old one after review",
                "",
            ])

        for sequence in diff.to_drop:
            backup = self.namer.dropped(sequence.name)
            statements.extend([
                self.missing_in_source(f"Sequence {sequence.name}"),
                f"-- ALTER SEQUENCE {qualified(self.target_schema, sequence.name)} RENAME TO {quote_ident(backup)};",
                f"-- TODO: Manually drop sequence {self.target_schema}.{sequence.name} "
                "after confirming it's no longer needed",
                "",
            ])

        return statements
