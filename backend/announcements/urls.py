from django.urls import path
from .views import announcement_list, announcement_detail

urlpatterns = [
    path('announcements/', announcement_list, name='announcement-list'),
    path('announcements/<uuid:pk>/', announcement_detail, name='announcement-detail'),
]
