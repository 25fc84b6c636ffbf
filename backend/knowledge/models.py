from django.db import models

from backend.core.models import AuthoredModel, DashboardModel


class Knowledge(AuthoredModel):
    """Knowledge base article: detail -> jenis -> produk"""
    title = models.CharField(max_length=255, db_index=True)
    description = models.TextField(null=True, blank=True)
    logos = models.JSONField(default=list, blank=True)

    label_field = 'title'

    class Meta:
        db_table = 'knowledges'
        ordering = ['-created_at']
        verbose_name = 'Knowledge'
        verbose_name_plural = 'Knowledge'


class DetailKnowledge(DashboardModel):
    name = models.CharField(max_length=255)
    description = models.TextField(null=True, blank=True)
    logos = models.JSONField(default=list, blank=True)
    knowledge = models.ForeignKey(Knowledge, on_delete=models.CASCADE, related_name='detail_knowledges')

    parent_field = 'knowledge'

    class Meta:
        db_table = 'detail_knowledges'
        ordering = ['created_at']
        verbose_name = 'Detail Knowledge'


class JenisDetailKnowledge(DashboardModel):
    name = models.CharField(max_length=255)
    description = models.TextField(null=True, blank=True)
    logos = models.JSONField(default=list, blank=True)
    detail_knowledge = models.ForeignKey(
        DetailKnowledge, on_delete=models.CASCADE, related_name='jenis_detail_knowledges'
    )

    parent_field = 'detail_knowledge'

    class Meta:
        db_table = 'jenis_detail_knowledges'
        ordering = ['created_at']
        verbose_name = 'Jenis Detail Knowledge'


class ProdukJenisDetailKnowledge(DashboardModel):
    name = models.CharField(max_length=255)
    description = models.TextField(null=True, blank=True)
    logos = models.JSONField(default=list, blank=True)
    jenis_detail_knowledge = models.ForeignKey(
        JenisDetailKnowledge, on_delete=models.CASCADE, related_name='produk_jenis_detail_knowledges'
    )

    parent_field = 'jenis_detail_knowledge'

    class Meta:
        db_table = 'produk_jenis_detail_knowledges'
        ordering = ['created_at']
        verbose_name = 'Produk Jenis Detail Knowledge'
