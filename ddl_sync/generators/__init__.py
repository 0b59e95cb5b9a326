"""Single-schema DDL generators (gen mode)."""

from ddl_sync.generators.base import BaseGenerator
from ddl_sync.generators.procs import ProcsGenerator
from ddl_sync.generators.schema import SchemaGenerator
from ddl_sync.generators.triggers import TriggersGenerator

__all__ = ["BaseGenerator", "ProcsGenerator", "SchemaGenerator", "TriggersGenerator"]
