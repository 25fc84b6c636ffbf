# Generated manually
import uuid

import django.db.models.deletion
from django.db import migrations, models


def base_columns():
    return [
        ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
        ('created_at', models.DateTimeField(auto_now_add=True)),
        ('updated_at', models.DateTimeField(auto_now=True)),
        ('created_by', models.CharField(blank=True, max_length=255, null=True)),
        ('updated_by', models.CharField(blank=True, max_length=255, null=True)),
        ('update_notes', models.TextField(blank=True, null=True)),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='QualityTraining',
            fields=base_columns() + [
                ('title', models.CharField(db_index=True, max_length=255)),
                ('description', models.TextField(blank=True, null=True)),
                ('logos', models.JSONField(blank=True, default=list)),
            ],
            options={
                'verbose_name': 'Quality Training',
                'db_table': 'quality_trainings',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='JenisQualityTraining',
            fields=base_columns() + [
                ('name', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True, null=True)),
                ('logos', models.JSONField(blank=True, default=list)),
                ('quality_training', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='jenis_quality_trainings', to='quality_training.qualitytraining')),
            ],
            options={
                'verbose_name': 'Jenis Quality Training',
                'db_table': 'jenis_quality_trainings',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='DetailQualityTraining',
            fields=base_columns() + [
                ('name', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True, null=True)),
                ('linkslide', models.TextField(blank=True, null=True)),
                ('logos', models.JSONField(blank=True, default=list)),
                ('jenis_quality_training', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='detail_quality_trainings', to='quality_training.jenisqualitytraining')),
            ],
            options={
                'verbose_name': 'Detail Quality Training',
                'db_table': 'detail_quality_trainings',
                'ordering': ['created_at'],
            },
        ),
        migrations.CreateModel(
            name='SubdetailQualityTraining',
            fields=base_columns() + [
                ('name', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True, null=True)),
                ('logos', models.JSONField(blank=True, default=list)),
                ('detail_quality_training', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='subdetail_quality_trainings', to='quality_training.detailqualitytraining')),
            ],
            options={
                'verbose_name': 'Subdetail Quality Training',
                'db_table': 'subdetail_quality_trainings',
                'ordering': ['created_at'],
            },
        ),
    ]
