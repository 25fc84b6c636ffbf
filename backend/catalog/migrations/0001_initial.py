# Generated manually
import uuid

import django.db.models.deletion
from django.db import migrations, models


def audit_columns():
    return [
        ('created_by', models.CharField(blank=True, max_length=255, null=True)),
        ('updated_by', models.CharField(blank=True, max_length=255, null=True)),
        ('update_notes', models.TextField(blank=True, null=True)),
    ]


def base_columns():
    return [
        ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
        ('created_at', models.DateTimeField(auto_now_add=True)),
        ('updated_at', models.DateTimeField(auto_now=True)),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Brand',
            fields=base_columns() + audit_columns() + [
                ('name', models.CharField(max_length=255, unique=True)),
                ('description', models.TextField(blank=True, null=True)),
                ('images', models.JSONField(blank=True, default=list)),
                ('link_sampul', models.TextField(blank=True, null=True)),
                ('colorbase', models.CharField(default='#03438f', max_length=20)),
            ],
            options={
                'verbose_name': 'Brand',
                'db_table': 'brands',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='KategoriProduk',
            fields=base_columns() + audit_columns() + [
                ('name', models.CharField(db_index=True, max_length=255)),
                ('description', models.TextField(blank=True, null=True)),
                ('images', models.JSONField(blank=True, default=list)),
                ('brand', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='kategori_produks', to='catalog.brand')),
            ],
            options={
                'verbose_name': 'Kategori Produk',
                'verbose_name_plural': 'Kategori Produk',
                'db_table': 'kategori_produks',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='SubkategoriProduk',
            fields=base_columns() + audit_columns() + [
                ('name', models.CharField(db_index=True, max_length=255)),
                ('description', models.TextField(blank=True, null=True)),
                ('images', models.JSONField(blank=True, default=list)),
                ('kategori_produk', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='subkategori_produks', to='catalog.kategoriproduk')),
            ],
            options={
                'verbose_name': 'Subkategori Produk',
                'verbose_name_plural': 'Subkategori Produk',
                'db_table': 'subkategori_produks',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Produk',
            fields=base_columns() + audit_columns() + [
                ('name', models.CharField(db_index=True, max_length=255)),
                ('description', models.TextField(blank=True, null=True)),
                ('kapasitas', models.CharField(blank=True, max_length=255, null=True)),
                ('status', models.CharField(default='ACTIVE', max_length=20)),
                ('harga', models.DecimalField(blank=True, decimal_places=2, max_digits=15, null=True)),
                ('images', models.JSONField(blank=True, default=list)),
                ('subkategori_produk', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='produks', to='catalog.subkategoriproduk')),
                ('kategori_produk', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='produks', to='catalog.kategoriproduk')),
                ('brand', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='produks', to='catalog.brand')),
            ],
            options={
                'verbose_name': 'Produk',
                'verbose_name_plural': 'Produk',
                'db_table': 'produks',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='DetailProduk',
            fields=base_columns() + [
                ('name', models.CharField(max_length=255)),
                ('value', models.TextField(blank=True, null=True)),
                ('images', models.JSONField(blank=True, default=list)),
                ('produk', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='detail_produks', to='catalog.produk')),
            ],
            options={
                'verbose_name': 'Detail Produk',
                'verbose_name_plural': 'Detail Produk',
                'db_table': 'detail_produks',
                'ordering': ['created_at'],
            },
        ),
    ]
