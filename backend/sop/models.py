from django.db import models

from backend.core.models import AuthoredModel, DashboardModel


class KategoriSOP(DashboardModel):
    """Top-level grouping of standard operating procedures"""
    name = models.CharField(max_length=255, unique=True)
    description = models.TextField(null=True, blank=True)

    parent_info_key = 'kategoriSOP'

    class Meta:
        db_table = 'kategori_sops'
        ordering = ['-created_at']
        verbose_name = 'Kategori SOP'
        verbose_name_plural = 'Kategori SOP'


class SOP(DashboardModel):
    name = models.CharField(max_length=255, db_index=True)
    description = models.TextField(null=True, blank=True)
    kategori_sop = models.ForeignKey(KategoriSOP, on_delete=models.CASCADE, related_name='sops')

    parent_field = 'kategori_sop'

    class Meta:
        db_table = 'sops'
        ordering = ['-created_at']
        verbose_name = 'SOP'
        verbose_name_plural = 'SOP'


class JenisSOP(AuthoredModel):
    """A variant of an SOP with its own content, images and detail lines"""
    name = models.CharField(max_length=255)
    content = models.TextField(null=True, blank=True)
    images = models.JSONField(default=list, blank=True)
    sop = models.ForeignKey(SOP, on_delete=models.CASCADE, related_name='jenis_sops')

    parent_field = 'sop'

    class Meta:
        db_table = 'jenis_sops'
        ordering = ['-created_at']
        verbose_name = 'Jenis SOP'
        verbose_name_plural = 'Jenis SOP'


class DetailSOP(DashboardModel):
    name = models.CharField(max_length=255)
    value = models.TextField(null=True, blank=True)
    jenis_sop = models.ForeignKey(JenisSOP, on_delete=models.CASCADE, related_name='detail_sops')

    parent_field = 'jenis_sop'

    class Meta:
        db_table = 'detail_sops'
        ordering = ['created_at']
        verbose_name = 'Detail SOP'
        verbose_name_plural = 'Detail SOP'

    def get_notification_record(self):
        return self.jenis_sop
