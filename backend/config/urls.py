"""
URL configuration for the dashboard backend.

Every app mounts its routes under ``api/v1/``.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "Dashboard Admin Panel"
admin.site.site_title = "Dashboard Admin Portal"
admin.site.index_title = "Welcome to the Dashboard Admin Portal"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('backend.core.urls')),
    path('api/v1/', include('backend.catalog.urls')),
    path('api/v1/', include('backend.sop.urls')),
    path('api/v1/', include('backend.quality_training.urls')),
    path('api/v1/', include('backend.knowledge.urls')),
    path('api/v1/', include('backend.agents.urls')),
    path('api/v1/', include('backend.announcements.urls')),
]
