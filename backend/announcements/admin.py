from django.contrib import admin
from .models import Announcement


@admin.register(Announcement)
class AnnouncementAdmin(admin.ModelAdmin):
    list_display = ['judul', 'link', 'created_by', 'updated_by', 'created_at']
    search_fields = ['judul', 'deskripsi']
    ordering = ['-created_at']
