from django.contrib import admin
from .models import Knowledge, DetailKnowledge


class DetailKnowledgeInline(admin.TabularInline):
    model = DetailKnowledge
    extra = 0
    fields = ['name', 'description']


@admin.register(Knowledge)
class KnowledgeAdmin(admin.ModelAdmin):
    list_display = ['title', 'created_by', 'updated_by', 'created_at']
    search_fields = ['title', 'description']
    ordering = ['-created_at']
    inlines = [DetailKnowledgeInline]
