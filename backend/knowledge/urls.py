from django.urls import path
from .views import knowledge_list, knowledge_detail

urlpatterns = [
    path('knowledge/', knowledge_list, name='knowledge-list'),
    path('knowledge/<uuid:pk>/', knowledge_detail, name='knowledge-detail'),
]
