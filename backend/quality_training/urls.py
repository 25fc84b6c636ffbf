from django.urls import path
from .views import (
    quality_training_list_create, quality_training_detail,
    jenis_quality_training_list_create, jenis_quality_training_detail,
    detail_quality_training_list_create, detail_quality_training_detail,
)

urlpatterns = [
    path('quality-training/', quality_training_list_create, name='quality-training-list-create'),
    path('quality-training/<uuid:pk>/', quality_training_detail, name='quality-training-detail'),
    path('jenis-quality-training/', jenis_quality_training_list_create, name='jenis-quality-training-list-create'),
    path('jenis-quality-training/<uuid:pk>/', jenis_quality_training_detail, name='jenis-quality-training-detail'),
    path('detail-quality-training/', detail_quality_training_list_create, name='detail-quality-training-list-create'),
    path('detail-quality-training/<uuid:pk>/', detail_quality_training_detail, name='detail-quality-training-detail'),
]
