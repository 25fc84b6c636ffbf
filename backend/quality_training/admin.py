from django.contrib import admin
from .models import (
    QualityTraining, JenisQualityTraining, DetailQualityTraining, SubdetailQualityTraining,
)


@admin.register(QualityTraining)
class QualityTrainingAdmin(admin.ModelAdmin):
    list_display = ['title', 'created_by', 'updated_by', 'created_at']
    search_fields = ['title', 'description']
    ordering = ['-created_at']


@admin.register(JenisQualityTraining)
class JenisQualityTrainingAdmin(admin.ModelAdmin):
    list_display = ['name', 'quality_training', 'updated_by', 'created_at']
    list_filter = ['quality_training']
    search_fields = ['name']


class SubdetailQualityTrainingInline(admin.TabularInline):
    model = SubdetailQualityTraining
    extra = 0
    fields = ['name', 'description']


@admin.register(DetailQualityTraining)
class DetailQualityTrainingAdmin(admin.ModelAdmin):
    list_display = ['name', 'jenis_quality_training', 'linkslide', 'created_at']
    search_fields = ['name', 'description']
    inlines = [SubdetailQualityTrainingInline]
