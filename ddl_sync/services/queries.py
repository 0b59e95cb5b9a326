"""Catalog queries used for introspection.

Every query takes the schema name as ``$1`` and, for per-table queries,
the table name as ``$2``. Column aliases are the keys the converters in
:mod:`ddl_sync.ddl.converters` read.
"""

SCHEMA_EXISTS_QUERY = """
    SELECT EXISTS (
        SELECT 1 FROM pg_catalog.pg_namespace WHERE nspname = $1
    )
"""

AVAILABLE_SCHEMAS_QUERY = """
    SELECT nspname AS schema_name
    FROM pg_catalog.pg_namespace
    WHERE nspname NOT LIKE 'pg\\_%'
        AND nspname <> 'information_schema'
    ORDER BY nspname
"""

TABLES_QUERY = """
    SELECT
        t.relname AS table_name,
        n.nspname AS table_schema,
        COALESCE(obj_description(t.oid, 'pg_class'), '') AS table_comment
    FROM pg_catalog.pg_class t
    JOIN pg_catalog.pg_namespace n ON n.oid = t.relnamespace
    WHERE n.nspname = $1
        AND t.relkind IN ('r', 'p')
        AND NOT t.relispartition
    ORDER BY t.relname
"""

COLUMNS_QUERY = """
    SELECT
        c.column_name,
        c.ordinal_position,
        c.column_default,
        c.is_nullable,
        c.data_type,
        c.udt_name,
        c.character_maximum_length,
        c.numeric_precision,
        c.numeric_scale,
        c.is_identity,
        c.identity_generation,
        c.is_generated,
        c.generation_expression,
        COALESCE(col_description(t.oid, a.attnum), '') AS column_comment
    FROM information_schema.columns c
    JOIN pg_catalog.pg_namespace n ON n.nspname = c.table_schema
    JOIN pg_catalog.pg_class t ON t.relnamespace = n.oid AND t.relname = c.table_name
    JOIN pg_catalog.pg_attribute a ON a.attrelid = t.oid AND a.attname = c.column_name
    WHERE c.table_schema = $1
        AND c.table_name = $2
    ORDER BY c.ordinal_position
"""

CONSTRAINTS_QUERY = """
    SELECT
        con.conname AS constraint_name,
        CASE con.contype
            WHEN 'p' THEN 'PRIMARY KEY'
            WHEN 'f' THEN 'FOREIGN KEY'
            WHEN 'u' THEN 'UNIQUE'
            WHEN 'c' THEN 'CHECK'
            WHEN 'n' THEN 'NOT NULL'
            WHEN 'x' THEN 'EXCLUDE'
            ELSE con.contype::text
        END AS constraint_type,
        (
            SELECT string_agg(a.attname, ',' ORDER BY k.ord)
            FROM unnest(con.conkey) WITH ORDINALITY AS k(attnum, ord)
            JOIN pg_catalog.pg_attribute a
                ON a.attrelid = con.conrelid AND a.attnum = k.attnum
        ) AS column_names,
        ft.relname AS foreign_table_name,
        (
            SELECT a.attname
            FROM pg_catalog.pg_attribute a
            WHERE a.attrelid = con.confrelid AND a.attnum = con.confkey[1]
        ) AS foreign_column_name,
        CASE con.confupdtype
            WHEN 'a' THEN 'NO ACTION'
            WHEN 'r' THEN 'RESTRICT'
            WHEN 'c' THEN 'CASCADE'
            WHEN 'n' THEN 'SET NULL'
            WHEN 'd' THEN 'SET DEFAULT'
        END AS update_rule,
        CASE con.confdeltype
            WHEN 'a' THEN 'NO ACTION'
            WHEN 'r' THEN 'RESTRICT'
            WHEN 'c' THEN 'CASCADE'
            WHEN 'n' THEN 'SET NULL'
            WHEN 'd' THEN 'SET DEFAULT'
        END AS delete_rule,
        CASE WHEN con.contype = 'c' THEN
            regexp_replace(pg_get_constraintdef(con.oid), '^CHECK \\((.*)\\)( NOT VALID)?$', '\\1')
        END AS check_clause,
        CASE WHEN con.condeferrable THEN 'YES' ELSE 'NO' END AS is_deferrable,
        CASE WHEN con.condeferred THEN 'YES' ELSE 'NO' END AS initially_deferred
    FROM pg_catalog.pg_constraint con
    JOIN pg_catalog.pg_class t ON t.oid = con.conrelid
    JOIN pg_catalog.pg_namespace n ON n.oid = t.relnamespace
    LEFT JOIN pg_catalog.pg_class ft ON ft.oid = con.confrelid
    WHERE n.nspname = $1
        AND t.relname = $2
    ORDER BY con.conname
"""

INDEXES_QUERY = """
    SELECT
        i.relname AS indexname,
        t.relname AS tablename,
        n.nspname AS schemaname,
        pg_get_indexdef(i.oid) AS indexdef,
        am.amname AS index_type,
        ix.indisunique AS is_unique,
        ix.indisprimary AS is_primary
    FROM pg_catalog.pg_index ix
    JOIN pg_catalog.pg_class i ON i.oid = ix.indexrelid
    JOIN pg_catalog.pg_class t ON t.oid = ix.indrelid
    JOIN pg_catalog.pg_namespace n ON n.oid = t.relnamespace
    JOIN pg_catalog.pg_am am ON am.oid = i.relam
    WHERE n.nspname = $1
        AND t.relname = $2
    ORDER BY i.relname
"""

_SEQUENCE_COLUMNS = """
        s.relname AS sequence_name,
        n.nspname AS sequence_schema,
        format_type(seq.seqtypid, NULL) AS data_type,
        seq.seqstart::text AS start_value,
        seq.seqmin::text AS minimum_value,
        seq.seqmax::text AS maximum_value,
        seq.seqincrement::text AS increment,
        CASE WHEN seq.seqcycle THEN 'YES' ELSE 'NO' END AS cycle_option,
        COALESCE(obj_description(s.oid, 'pg_class'), '') AS sequence_comment
"""

# Sequences owned by a table's serial columns (identity sequences are implicit)
TABLE_SEQUENCES_QUERY = f"""
    SELECT {_SEQUENCE_COLUMNS}
    FROM pg_catalog.pg_class s
    JOIN pg_catalog.pg_namespace n ON n.oid = s.relnamespace
    JOIN pg_catalog.pg_sequence seq ON seq.seqrelid = s.oid
    JOIN pg_catalog.pg_depend d
        ON d.objid = s.oid
        AND d.classid = 'pg_catalog.pg_class'::regclass
        AND d.deptype = 'a'
    JOIN pg_catalog.pg_class t ON t.oid = d.refobjid
    WHERE n.nspname = $1
        AND t.relname = $2
    ORDER BY s.relname
"""

SEQUENCES_QUERY = f"""
    SELECT {_SEQUENCE_COLUMNS}
    FROM pg_catalog.pg_class s
    JOIN pg_catalog.pg_namespace n ON n.oid = s.relnamespace
    JOIN pg_catalog.pg_sequence seq ON seq.seqrelid = s.oid
    WHERE n.nspname = $1
        AND s.relkind = 'S'
        AND NOT EXISTS (
            SELECT 1 FROM pg_catalog.pg_depend d
            WHERE d.objid = s.oid
                AND d.classid = 'pg_catalog.pg_class'::regclass
                AND d.deptype = 'i'
        )
    ORDER BY s.relname
"""

FUNCTIONS_QUERY = """
    SELECT
        p.proname AS function_name,
        n.nspname AS function_schema,
        CASE p.prokind WHEN 'p' THEN 'PROCEDURE' ELSE 'FUNCTION' END AS routine_type,
        pg_get_function_identity_arguments(p.oid) AS arguments,
        pg_get_function_result(p.oid) AS return_type,
        l.lanname AS language_name,
        pg_get_functiondef(p.oid) AS full_definition,
        COALESCE(obj_description(p.oid, 'pg_proc'), '') AS function_comment
    FROM pg_catalog.pg_proc p
    JOIN pg_catalog.pg_namespace n ON n.oid = p.pronamespace
    LEFT JOIN pg_catalog.pg_language l ON l.oid = p.prolang
    WHERE n.nspname = $1
        AND p.prokind IN ('f', 'p')
        AND NOT EXISTS (
            SELECT 1 FROM pg_catalog.pg_depend d
            WHERE d.objid = p.oid AND d.deptype = 'e'
        )
    ORDER BY p.proname, pg_get_function_identity_arguments(p.oid)
"""

# One row per (trigger, event)
TRIGGERS_QUERY = """
    SELECT
        t.trigger_name,
        t.event_manipulation,
        t.event_object_table,
        t.event_object_schema,
        t.action_timing,
        t.action_orientation,
        t.action_condition,
        t.action_statement,
        pg_get_triggerdef(tg.oid) AS full_definition,
        COALESCE(obj_description(tg.oid, 'pg_trigger'), '') AS trigger_comment
    FROM information_schema.triggers t
    JOIN pg_catalog.pg_namespace n ON n.nspname = t.event_object_schema
    JOIN pg_catalog.pg_class c ON c.relnamespace = n.oid AND c.relname = t.event_object_table
    JOIN pg_catalog.pg_trigger tg ON tg.tgrelid = c.oid AND tg.tgname = t.trigger_name
    WHERE t.event_object_schema = $1
    ORDER BY t.event_object_table, t.trigger_name, t.event_manipulation
"""
