from django.contrib import admin
from .models import KategoriSOP, SOP, JenisSOP, DetailSOP


@admin.register(KategoriSOP)
class KategoriSOPAdmin(admin.ModelAdmin):
    list_display = ['name', 'created_at']
    search_fields = ['name']
    ordering = ['name']


@admin.register(SOP)
class SOPAdmin(admin.ModelAdmin):
    list_display = ['name', 'kategori_sop', 'created_at']
    list_filter = ['kategori_sop']
    search_fields = ['name', 'description']
    ordering = ['name']


class DetailSOPInline(admin.TabularInline):
    model = DetailSOP
    extra = 0


@admin.register(JenisSOP)
class JenisSOPAdmin(admin.ModelAdmin):
    list_display = ['name', 'sop', 'created_by', 'updated_by', 'created_at']
    list_filter = ['sop__kategori_sop']
    search_fields = ['name', 'content']
    ordering = ['-created_at']
    inlines = [DetailSOPInline]
