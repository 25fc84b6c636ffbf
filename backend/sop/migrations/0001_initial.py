# Generated manually
import uuid

import django.db.models.deletion
from django.db import migrations, models


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
            name='KategoriSOP',
            fields=base_columns() + [
                ('name', models.CharField(max_length=255, unique=True)),
                ('description', models.TextField(blank=True, null=True)),
            ],
            options={
                'verbose_name': 'Kategori SOP',
                'verbose_name_plural': 'Kategori SOP',
                'db_table': 'kategori_sops',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='SOP',
            fields=base_columns() + [
                ('name', models.CharField(db_index=True, max_length=255)),
                ('description', models.TextField(blank=True, null=True)),
                ('kategori_sop', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='sops', to='sop.kategorisop')),
            ],
            options={
                'verbose_name': 'SOP',
                'verbose_name_plural': 'SOP',
                'db_table': 'sops',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='JenisSOP',
            fields=base_columns() + [
                ('created_by', models.CharField(blank=True, max_length=255, null=True)),
                ('updated_by', models.CharField(blank=True, max_length=255, null=True)),
                ('update_notes', models.TextField(blank=True, null=True)),
                ('name', models.CharField(max_length=255)),
                ('content', models.TextField(blank=True, null=True)),
                ('images', models.JSONField(blank=True, default=list)),
                ('sop', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='jenis_sops', to='sop.sop')),
            ],
            options={
                'verbose_name': 'Jenis SOP',
                'verbose_name_plural': 'Jenis SOP',
                'db_table': 'jenis_sops',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='DetailSOP',
            fields=base_columns() + [
                ('name', models.CharField(max_length=255)),
                ('value', models.TextField(blank=True, null=True)),
                ('jenis_sop', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='detail_sops', to='sop.jenissop')),
            ],
            options={
                'verbose_name': 'Detail SOP',
                'verbose_name_plural': 'Detail SOP',
                'db_table': 'detail_sops',
                'ordering': ['created_at'],
            },
        ),
    ]
