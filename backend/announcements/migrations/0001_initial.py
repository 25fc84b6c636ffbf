# Generated manually
import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Announcement',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('judul', models.CharField(db_index=True, max_length=255)),
                ('deskripsi', models.TextField(blank=True, null=True)),
                ('link', models.TextField(blank=True, null=True)),
                ('image', models.JSONField(blank=True, default=list)),
                ('created_by', models.CharField(blank=True, max_length=255, null=True)),
                ('updated_by', models.CharField(blank=True, max_length=255, null=True)),
            ],
            options={
                'verbose_name': 'Announcement',
                'db_table': 'announcements',
                'ordering': ['-created_at'],
            },
        ),
    ]
