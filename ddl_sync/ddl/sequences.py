"""CREATE SEQUENCE rendering."""

from ddl_sync.ddl.identifiers import qualified
from ddl_sync.models.schema import SequenceDefinition

DEFAULT_DATA_TYPE = "bigint"
DEFAULT_START = "1"
DEFAULT_INCREMENT = "1"
DEFAULT_MIN_VALUE = "1"
DEFAULT_MAX_VALUE = "9223372036854775807"


def build_sequence(sequence: SequenceDefinition, schema: str, if_not_exists: bool = True) -> str:
    """Render CREATE SEQUENCE, omitting clauses equal to PostgreSQL defaults.

    The cycle option is always stated.
    """
    sql = "CREATE SEQUENCE "
    if if_not_exists:
        sql += "IF NOT EXISTS "
    sql += qualified(schema, sequence.name)

    if sequence.data_type and sequence.data_type != DEFAULT_DATA_TYPE:
        sql += f" AS {sequence.data_type}"
    if sequence.increment and sequence.increment != DEFAULT_INCREMENT:
        sql += f" INCREMENT BY {sequence.increment}"
    if sequence.min_value and sequence.min_value != DEFAULT_MIN_VALUE:
        sql += f" MINVALUE {sequence.min_value}"
    if sequence.max_value and sequence.max_value != DEFAULT_MAX_VALUE:
        sql += f" MAXVALUE {sequence.max_value}"
    if sequence.start_value and sequence.start_value != DEFAULT_START:
        sql += f" START WITH {sequence.start_value}"

    sql += " CYCLE" if sequence.cycle else " NO CYCLE"
    return sql + ";"
