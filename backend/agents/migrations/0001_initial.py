# Generated manually
import uuid

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Agent',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('name', models.CharField(db_index=True, max_length=255)),
                ('email', models.EmailField(max_length=254, unique=True)),
                ('password', models.CharField(max_length=255)),
                ('category', models.CharField(choices=[('socialMedia', 'Social Media'), ('eCommerce', 'eCommerce')], default='socialMedia', max_length=20)),
                ('is_active', models.BooleanField(default=True)),
            ],
            options={
                'verbose_name': 'Agent',
                'db_table': 'agents',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Performance',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('timestamp', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('qa_score', models.FloatField(default=0)),
                ('qa_score_remarks', models.TextField(blank=True, null=True)),
                ('quiz_score', models.FloatField(default=0)),
                ('quiz_score_remarks', models.TextField(blank=True, null=True)),
                ('typing_test_score', models.FloatField(default=0)),
                ('typing_test_score_remarks', models.TextField(blank=True, null=True)),
                ('afrt', models.FloatField(default=0)),
                ('afrt_remarks', models.TextField(blank=True, null=True)),
                ('art', models.FloatField(default=0)),
                ('art_remarks', models.TextField(blank=True, null=True)),
                ('rt', models.FloatField(default=0)),
                ('rt_remarks', models.TextField(blank=True, null=True)),
                ('rr', models.FloatField(default=0)),
                ('rr_remarks', models.TextField(blank=True, null=True)),
                ('csat', models.FloatField(default=0)),
                ('csat_remarks', models.TextField(blank=True, null=True)),
                ('agent', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='performances', to='agents.agent')),
            ],
            options={
                'db_table': 'performances',
                'ordering': ['-timestamp'],
                'indexes': [models.Index(fields=['agent', '-timestamp'], name='performance_agent_ts_idx')],
            },
        ),
    ]
