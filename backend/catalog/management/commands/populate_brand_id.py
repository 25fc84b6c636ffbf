"""
Management command to fill in the brand of products created without one
"""
from django.core.management.base import BaseCommand
from django.db import transaction

from backend.catalog.models import Produk
from backend.core.audit_signals import suspend_audit_signals


class Command(BaseCommand):
    help = "Sets each product's missing brand from its subcategory or category"

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Report what would change without saving',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']

        products = Produk.objects.filter(brand__isnull=True).select_related(
            'subkategori_produk__kategori_produk__brand',
            'kategori_produk__brand',
        )
        total = products.count()
        self.stdout.write(f'Found {total} products without a brand')

        updated_count = 0
        missing = []

        # Backfill only, nothing here should show up as a user edit
        with suspend_audit_signals(), transaction.atomic():
            for product in products:
                brand = product.resolve_brand()
                if brand is None:
                    missing.append(product)
                    continue
                if not dry_run:
                    product.brand = brand
                    product.save(update_fields=['brand', 'updated_at'])
                updated_count += 1
                self.stdout.write(f'  Updated {product.name} -> {brand.name}')

        verb = 'Would update' if dry_run else 'Updated'
        self.stdout.write(self.style.SUCCESS(f'\n{verb} {updated_count} of {total} products'))

        if missing:
            self.stdout.write(self.style.WARNING(f'{len(missing)} products still have no brand:'))
            for product in missing:
                self.stdout.write(f'  - {product.name} ({product.pk})')
