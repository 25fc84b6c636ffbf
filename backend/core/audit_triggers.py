"""PostgreSQL trigger definitions used when AUDIT_MODE is 'database'"""
from .audit import AUDITED_TABLES, EXCLUDED_FIELDS

FUNCTION_NAME = 'audit_trigger_function'

_excluded = ', '.join(f"'{name}'" for name in EXCLUDED_FIELDS)

DROP_FUNCTION_SQL = f"DROP FUNCTION IF EXISTS {FUNCTION_NAME}() CASCADE;"

# Rows are compared through to_jsonb so one function serves every table.
# The acting user comes from the transaction-local app.user_id setting.
CREATE_FUNCTION_SQL = f"""
CREATE OR REPLACE FUNCTION {FUNCTION_NAME}() RETURNS TRIGGER AS $$
DECLARE
    old_data jsonb;
    new_data jsonb;
    col text;
    old_val text;
    new_val text;
    record_key text;
    actor text := NULLIF(current_setting('app.user_id', true), '');
    changed timestamptz := now();
BEGIN
    IF TG_OP = 'INSERT' THEN
        new_data := to_jsonb(NEW);
        record_key := new_data->>'id';
        FOR col, new_val IN SELECT key, value FROM jsonb_each_text(new_data) LOOP
            IF col NOT IN ({_excluded}) AND new_val IS NOT NULL THEN
                INSERT INTO tracer_updates
                    (source_table, source_key, field_name, old_value, new_value, action_type, changed_at, changed_by)
                VALUES (TG_TABLE_NAME, record_key, col, NULL, new_val, 'INSERT', changed, actor);
            END IF;
        END LOOP;
        RETURN NEW;
    ELSIF TG_OP = 'UPDATE' THEN
        old_data := to_jsonb(OLD);
        new_data := to_jsonb(NEW);
        record_key := new_data->>'id';
        FOR col, new_val IN SELECT key, value FROM jsonb_each_text(new_data) LOOP
            old_val := old_data->>col;
            IF col NOT IN ({_excluded}) AND old_val IS DISTINCT FROM new_val THEN
                INSERT INTO tracer_updates
                    (source_table, source_key, field_name, old_value, new_value, action_type, changed_at, changed_by)
                VALUES (TG_TABLE_NAME, record_key, col, old_val, new_val, 'UPDATE', changed, actor);
            END IF;
        END LOOP;
        RETURN NEW;
    ELSIF TG_OP = 'DELETE' THEN
        old_data := to_jsonb(OLD);
        record_key := old_data->>'id';
        FOR col, old_val IN SELECT key, value FROM jsonb_each_text(old_data) LOOP
            IF col NOT IN ({_excluded}) AND old_val IS NOT NULL THEN
                INSERT INTO tracer_updates
                    (source_table, source_key, field_name, old_value, new_value, action_type, changed_at, changed_by)
                VALUES (TG_TABLE_NAME, record_key, col, old_val, NULL, 'DELETE', changed, actor);
            END IF;
        END LOOP;
        RETURN OLD;
    END IF;
    RETURN NULL;
END;
$$ LANGUAGE plpgsql;
"""


def trigger_name(table):
    return f"audit_trigger_{table}"


def drop_trigger_sql(table):
    return f'DROP TRIGGER IF EXISTS {trigger_name(table)} ON "{table}";'


def create_trigger_sql(table):
    return (
        f'CREATE TRIGGER {trigger_name(table)} '
        f'AFTER INSERT OR UPDATE OR DELETE ON "{table}" '
        f'FOR EACH ROW EXECUTE FUNCTION {FUNCTION_NAME}();'
    )


FUNCTION_EXISTS_SQL = "SELECT EXISTS(SELECT 1 FROM pg_proc WHERE proname = %s);"

LIST_TRIGGERS_SQL = """
SELECT trigger_name, event_object_table, action_timing, event_manipulation
FROM information_schema.triggers
WHERE trigger_name LIKE 'audit_trigger_%'
ORDER BY event_object_table, trigger_name;
"""

TABLE_EXISTS_SQL = "SELECT EXISTS(SELECT 1 FROM information_schema.tables WHERE table_name = %s);"

LOGS_BY_TABLE_SQL = """
SELECT source_table, COUNT(*) AS count
FROM tracer_updates
GROUP BY source_table
ORDER BY count DESC
LIMIT 10;
"""
