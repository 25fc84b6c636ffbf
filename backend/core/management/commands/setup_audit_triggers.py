"""
Install the PostgreSQL audit triggers that fill tracer_updates
Usage: python manage.py setup_audit_triggers
"""
from django.core.management.base import BaseCommand, CommandError
from django.db import connection, transaction

from backend.core.audit_triggers import (
    AUDITED_TABLES, CREATE_FUNCTION_SQL, DROP_FUNCTION_SQL,
    create_trigger_sql, drop_trigger_sql,
)


class Command(BaseCommand):
    help = 'Create audit_trigger_function() and an audit trigger on every audited table (PostgreSQL only)'

    def handle(self, *args, **options):
        if connection.vendor != 'postgresql':
            raise CommandError(
                f'Audit triggers need PostgreSQL, the default database is {connection.vendor}.'
            )

        self.stdout.write('Creating audit trigger function...')
        with connection.cursor() as cursor:
            cursor.execute(DROP_FUNCTION_SQL)
            cursor.execute(CREATE_FUNCTION_SQL)
        self.stdout.write(self.style.SUCCESS('  ✓ audit_trigger_function() created'))

        self.stdout.write('\nCreating triggers for tables...')
        created = 0
        for table in AUDITED_TABLES:
            try:
                with transaction.atomic():
                    with connection.cursor() as cursor:
                        cursor.execute(drop_trigger_sql(table))
                        cursor.execute(create_trigger_sql(table))
                created += 1
                self.stdout.write(self.style.SUCCESS(f'  ✓ Trigger created for table: {table}'))
            except Exception as e:
                # Keep going with the remaining tables
                self.stdout.write(self.style.ERROR(f'  ✗ Error creating trigger for {table}: {e}'))

        self.stdout.write('\nSummary:')
        self.stdout.write('  - Function: audit_trigger_function()')
        self.stdout.write(f'  - Triggers created: {created}/{len(AUDITED_TABLES)}')
        self.stdout.write('  - Audit table: tracer_updates')
        self.stdout.write(
            "\nSet AUDIT_MODE=database so the signal receivers stop writing duplicate rows."
        )
        self.stdout.write(self.style.SUCCESS('\nAudit trigger setup completed.'))
