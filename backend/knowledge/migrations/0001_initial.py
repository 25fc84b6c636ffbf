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


def item_columns():
    return [
        ('name', models.CharField(max_length=255)),
        ('description', models.TextField(blank=True, null=True)),
        ('logos', models.JSONField(blank=True, default=list)),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Knowledge',
            fields=base_columns() + [
                ('created_by', models.CharField(blank=True, max_length=255, null=True)),
                ('updated_by', models.CharField(blank=True, max_length=255, null=True)),
                ('update_notes', models.TextField(blank=True, null=True)),
                ('title', models.CharField(db_index=True, max_length=255)),
                ('description', models.TextField(blank=True, null=True)),
                ('logos', models.JSONField(blank=True, default=list)),
            ],
            options={
                'verbose_name': 'Knowledge',
                'verbose_name_plural': 'Knowledge',
                'db_table': 'knowledges',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='DetailKnowledge',
            fields=base_columns() + item_columns() + [
                ('knowledge', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='detail_knowledges', to='knowledge.knowledge')),
            ],
            options={
                'verbose_name': 'Detail Knowledge',
                'db_table': 'detail_knowledges',
                'ordering': ['created_at'],
            },
        ),
        migrations.CreateModel(
            name='JenisDetailKnowledge',
            fields=base_columns() + item_columns() + [
                ('detail_knowledge', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='jenis_detail_knowledges', to='knowledge.detailknowledge')),
            ],
            options={
                'verbose_name': 'Jenis Detail Knowledge',
                'db_table': 'jenis_detail_knowledges',
                'ordering': ['created_at'],
            },
        ),
        migrations.CreateModel(
            name='ProdukJenisDetailKnowledge',
            fields=base_columns() + item_columns() + [
                ('jenis_detail_knowledge', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='produk_jenis_detail_knowledges', to='knowledge.jenisdetailknowledge')),
            ],
            options={
                'verbose_name': 'Produk Jenis Detail Knowledge',
                'db_table': 'produk_jenis_detail_knowledges',
                'ordering': ['created_at'],
            },
        ),
    ]
