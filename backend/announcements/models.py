from django.db import models

from backend.core.models import DashboardModel


class Announcement(DashboardModel):
    """Notice shown to agents. ``created_by``/``updated_by`` hold user names."""
    judul = models.CharField(max_length=255, db_index=True)
    deskripsi = models.TextField(null=True, blank=True)
    link = models.TextField(null=True, blank=True)
    image = models.JSONField(default=list, blank=True)
    created_by = models.CharField(max_length=255, null=True, blank=True)
    updated_by = models.CharField(max_length=255, null=True, blank=True)

    label_field = 'judul'

    class Meta:
        db_table = 'announcements'
        ordering = ['-created_at']
        verbose_name = 'Announcement'
