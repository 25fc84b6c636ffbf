"""
Report the state of the PostgreSQL audit triggers
Usage: python manage.py check_audit_triggers
"""
from django.core.management.base import BaseCommand, CommandError
from django.db import connection

from backend.core.audit_triggers import (
    FUNCTION_EXISTS_SQL, FUNCTION_NAME, LIST_TRIGGERS_SQL, LOGS_BY_TABLE_SQL, TABLE_EXISTS_SQL,
)


class Command(BaseCommand):
    help = 'Check that the audit trigger function, triggers and tracer_updates table are installed'

    def handle(self, *args, **options):
        if connection.vendor != 'postgresql':
            raise CommandError(
                f'Audit triggers need PostgreSQL, the default database is {connection.vendor}.'
            )

        with connection.cursor() as cursor:
            cursor.execute(FUNCTION_EXISTS_SQL, [FUNCTION_NAME])
            function_exists = cursor.fetchone()[0]
            self.stdout.write(f'Trigger function exists: {function_exists}')

            cursor.execute(LIST_TRIGGERS_SQL)
            triggers = cursor.fetchall()
            self.stdout.write(f'\nFound {len(triggers)} audit triggers:')
            if not triggers:
                self.stdout.write(self.style.ERROR('  No triggers found! Run: python manage.py setup_audit_triggers'))
            for name, table, timing, event in triggers:
                self.stdout.write(f'  ✓ {name} on {table} ({timing} {event})')

            cursor.execute(TABLE_EXISTS_SQL, ['tracer_updates'])
            table_exists = cursor.fetchone()[0]
            self.stdout.write(f'\ntracer_updates table exists: {table_exists}')
            if not table_exists:
                return

            cursor.execute(LOGS_BY_TABLE_SQL)
            rows = cursor.fetchall()

        self.stdout.write('\nAudit logs by table:')
        if not rows:
            self.stdout.write(self.style.WARNING('  No audit logs found'))
        for table, count in rows:
            self.stdout.write(f'  - {table}: {count} logs')
