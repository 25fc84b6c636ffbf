from django.contrib import admin
from .models import Agent, Performance


@admin.register(Agent)
class AgentAdmin(admin.ModelAdmin):
    list_display = ['name', 'email', 'category', 'is_active', 'created_at']
    list_filter = ['category', 'is_active']
    search_fields = ['name', 'email']
    ordering = ['name']
    exclude = ['password']


@admin.register(Performance)
class PerformanceAdmin(admin.ModelAdmin):
    list_display = ['agent', 'timestamp', 'qa_score', 'quiz_score', 'typing_test_score', 'csat']
    list_filter = ['timestamp']
    search_fields = ['agent__name', 'agent__email']
    ordering = ['-timestamp']
