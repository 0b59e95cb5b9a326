"""Syntax lint for generated DDL."""

import logging
import re
from typing import NamedTuple

import sqlglot
from sqlglot.errors import ParseError, TokenError

logger = logging.getLogger("ddl-sync.sql-validator")


class LintIssue(NamedTuple):
    """A statement sqlglot could not parse."""

    statement: str
    error: str


class ScriptValidator:
    """Parses generated statements with sqlglot's postgres dialect.

    Only structural DDL is checked. Routine and trigger definitions are
    opaque and skipped, as are comment lines. Linting never changes the
    script; issues are logged and returned.
    """

    # Statements whose bodies are copied verbatim from the catalog
    OPAQUE_PATTERNS = [
        r"^\s*CREATE\s+(OR\s+REPLACE\s+)?(FUNCTION|PROCEDURE)\b",
        r"^\s*CREATE\s+(CONSTRAINT\s+)?TRIGGER\b",
        r"^\s*ALTER\s+(FUNCTION|PROCEDURE|TRIGGER)\b",
    ]

    def __init__(self, dialect: str = "postgres"):
        self.dialect = dialect
        self._opaque = [re.compile(p, re.IGNORECASE) for p in self.OPAQUE_PATTERNS]

    def split_statements(self, script: str) -> list[str]:
        """Split a script into statements, dropping comment-only lines.

        Opaque routine definitions span lines and may contain semicolons, so
        everything from an opaque statement start up to the next blank line
        is kept as one statement.
        """
        statements: list[str] = []
        current: list[str] = []
        in_opaque = False

        for line in script.splitlines():
            stripped = line.strip()
            if in_opaque:
                if not stripped:
                    statements.append("\n".join(current))
                    current = []
                    in_opaque = False
                else:
                    current.append(line)
                continue

            if not stripped or stripped.startswith("--"):
                continue

            if not current and self.is_opaque(stripped):
                in_opaque = True
                current.append(line)
                continue

            current.append(line)
            if stripped.endswith(";"):
                statements.append("\n".join(current))
                current = []

        if current:
            statements.append("\n".join(current))
        return statements

    def is_opaque(self, statement: str) -> bool:
        return any(p.search(statement) for p in self._opaque)

    def validate(self, script: str) -> list[LintIssue]:
        """Lint every non-opaque statement in ``script``.

        Args:
            script: Generated SQL text.

        Returns:
            Issues for statements that failed to parse.
        """
        issues = []
        for statement in self.split_statements(script):
            if self.is_opaque(statement):
                continue
            try:
                sqlglot.parse(statement, read=self.dialect)
            except (ParseError, TokenError) as e:
                issues.append(LintIssue(statement, str(e)))

        for issue in issues:
            logger.warning("Generated statement did not parse: %s (%s)", issue.statement, issue.error)
        return issues
