from django.urls import path
from .views import (
    CustomTokenObtainPairView, CustomTokenRefreshView, user_me,
    user_list_create, user_detail,
    global_search,
    audit_log_list, audit_record_history, tracer_update_list,
    notification_list,
)

urlpatterns = [
    # Auth endpoints
    path('auth/login/', CustomTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/refresh/', CustomTokenRefreshView.as_view(), name='token_refresh'),
    path('auth/me/', user_me, name='user-me'),

    # User endpoints
    path('users/', user_list_create, name='user-list-create'),
    path('users/<uuid:pk>/', user_detail, name='user-detail'),

    # Global search endpoint
    path('search/', global_search, name='global-search'),

    # Audit endpoints
    path('audit/', audit_log_list, name='audit-log-list'),
    path('audit/history/', audit_record_history, name='audit-record-history'),
    path('tracer-updates/', tracer_update_list, name='tracer-update-list'),
    path('notifications/', notification_list, name='notification-list'),
]
