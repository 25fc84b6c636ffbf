"""
Delete every row from tracer_updates
Usage: python manage.py clear_tracer_updates [--noinput]
"""
from django.core.management.base import BaseCommand

from backend.core.models import TracerUpdate


class Command(BaseCommand):
    help = 'Delete all tracer updates (audit history)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--noinput', '--no-input',
            action='store_false',
            dest='interactive',
            help='Skip confirmation prompt',
        )

    def handle(self, *args, **options):
        count = TracerUpdate.objects.count()
        self.stdout.write(f'Current records in tracer_updates: {count}')

        if count == 0:
            self.stdout.write(self.style.SUCCESS('Table is already empty. Nothing to delete.'))
            return

        if options['interactive']:
            self.stdout.write(self.style.WARNING(
                'WARNING: This will delete ALL records from tracer_updates. This cannot be undone.'
            ))
            confirm = input('Type "YES" to confirm: ')
            if confirm != 'YES':
                self.stdout.write(self.style.ERROR('Operation cancelled.'))
                return

        deleted, _ = TracerUpdate.objects.all().delete()
        self.stdout.write(self.style.SUCCESS(f'Deleted {deleted} records from tracer_updates'))

        remaining = TracerUpdate.objects.count()
        if remaining == 0:
            self.stdout.write(self.style.SUCCESS('Verification: table is now empty'))
        else:
            self.stdout.write(self.style.WARNING(f'Warning: {remaining} records still remain'))
