from django.db import models

from backend.core.models import AuthoredModel


class QualityTraining(AuthoredModel):
    """Quality training programme: jenis -> detail -> subdetail"""
    title = models.CharField(max_length=255, db_index=True)
    description = models.TextField(null=True, blank=True)
    logos = models.JSONField(default=list, blank=True)

    label_field = 'title'

    class Meta:
        db_table = 'quality_trainings'
        ordering = ['-created_at']
        verbose_name = 'Quality Training'


class JenisQualityTraining(AuthoredModel):
    name = models.CharField(max_length=255)
    description = models.TextField(null=True, blank=True)
    logos = models.JSONField(default=list, blank=True)
    quality_training = models.ForeignKey(
        QualityTraining, on_delete=models.CASCADE, related_name='jenis_quality_trainings'
    )

    parent_field = 'quality_training'

    class Meta:
        db_table = 'jenis_quality_trainings'
        ordering = ['-created_at']
        verbose_name = 'Jenis Quality Training'


class DetailQualityTraining(AuthoredModel):
    name = models.CharField(max_length=255)
    description = models.TextField(null=True, blank=True)
    linkslide = models.TextField(null=True, blank=True)
    logos = models.JSONField(default=list, blank=True)
    jenis_quality_training = models.ForeignKey(
        JenisQualityTraining, on_delete=models.CASCADE, related_name='detail_quality_trainings'
    )

    parent_field = 'jenis_quality_training'

    class Meta:
        db_table = 'detail_quality_trainings'
        ordering = ['created_at']
        verbose_name = 'Detail Quality Training'


class SubdetailQualityTraining(AuthoredModel):
    name = models.CharField(max_length=255)
    description = models.TextField(null=True, blank=True)
    logos = models.JSONField(default=list, blank=True)
    detail_quality_training = models.ForeignKey(
        DetailQualityTraining, on_delete=models.CASCADE, related_name='subdetail_quality_trainings'
    )

    parent_field = 'detail_quality_training'

    class Meta:
        db_table = 'subdetail_quality_trainings'
        ordering = ['created_at']
        verbose_name = 'Subdetail Quality Training'
