from django.urls import path
from .views import agent_list, agent_stats, agent_upload, agent_upload_scores

urlpatterns = [
    path('agents/', agent_list, name='agent-list'),
    path('agents/stats/', agent_stats, name='agent-stats'),
    path('agents/upload/', agent_upload, name='agent-upload'),
    path('agents/upload-scores/', agent_upload_scores, name='agent-upload-scores'),
]
