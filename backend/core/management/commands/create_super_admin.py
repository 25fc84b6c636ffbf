"""
Create or update the super admin account
Usage: python manage.py create_super_admin [--email ... --password ... --name ...]
"""
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from backend.core.models import User


class Command(BaseCommand):
    help = 'Create or update the SUPER_ADMIN user from SUPER_ADMIN_* settings or options'

    def add_arguments(self, parser):
        parser.add_argument('--email', help='Defaults to SUPER_ADMIN_EMAIL')
        parser.add_argument('--password', help='Defaults to SUPER_ADMIN_PASSWORD')
        parser.add_argument('--name', help='Defaults to SUPER_ADMIN_NAME')

    def handle(self, *args, **options):
        email = options.get('email') or settings.SUPER_ADMIN_EMAIL
        password = options.get('password') or settings.SUPER_ADMIN_PASSWORD
        name = options.get('name') or settings.SUPER_ADMIN_NAME or 'Super Admin'

        if not email or not password:
            raise CommandError('Missing super admin email or password (set SUPER_ADMIN_EMAIL/SUPER_ADMIN_PASSWORD)')

        user = User.objects.filter(email__iexact=email).first()
        if user is None:
            User.objects.create_superuser(email=email, password=password, name=name)
            self.stdout.write(self.style.SUCCESS(f'✓ Created super admin: {email}'))
            return

        user.name = name
        user.role = User.ROLE_SUPER_ADMIN
        user.is_active = True
        user.is_staff = True
        user.is_superuser = True
        user.set_password(password)
        user.save()
        self.stdout.write(self.style.SUCCESS(f'✓ Updated super admin: {email}'))
