from django.urls import path
from .views import (
    kategori_sop_list_create, kategori_sop_detail,
    sop_list_create, sop_detail,
    jenis_sop_list_create, jenis_sop_detail,
)

urlpatterns = [
    # Kategori SOP endpoints
    path('kategori-sop/', kategori_sop_list_create, name='kategori-sop-list-create'),
    path('kategori-sop/<uuid:pk>/', kategori_sop_detail, name='kategori-sop-detail'),

    # SOP endpoints
    path('sop/', sop_list_create, name='sop-list-create'),
    path('sop/<uuid:pk>/', sop_detail, name='sop-detail'),

    # Jenis SOP endpoints
    path('jenis-sop/', jenis_sop_list_create, name='jenis-sop-list-create'),
    path('jenis-sop/<uuid:pk>/', jenis_sop_detail, name='jenis-sop-detail'),
]
