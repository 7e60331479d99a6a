from django.urls import path
from .views import (
    CustomTokenObtainPairView, CustomTokenRefreshView, user_me, change_password,
    superadmin_user_list_create, superadmin_user_detail,
    superadmin_user_permissions, superadmin_user_branding,
    audit_log_list,
    officer_list_create, officer_delete, officer_reset_password, officer_status,
)

urlpatterns = [
    # Auth endpoints
    path('auth/login/', CustomTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/refresh/', CustomTokenRefreshView.as_view(), name='token_refresh'),
    path('auth/me/', user_me, name='user-me'),
    path('auth/change-password/', change_password, name='change-password'),

    # Superadmin user management
    path('superadmin/users/', superadmin_user_list_create, name='superadmin-user-list-create'),
    path('superadmin/users/<int:pk>/', superadmin_user_detail, name='superadmin-user-detail'),
    path('superadmin/users/<int:pk>/permissions/', superadmin_user_permissions, name='superadmin-user-permissions'),
    path('superadmin/users/<int:pk>/branding/', superadmin_user_branding, name='superadmin-user-branding'),
    path('superadmin/audit-logs/', audit_log_list, name='audit-log-list'),

    # Admin officer management
    path('admin/officers/', officer_list_create, name='officer-list-create'),
    path('admin/officers/<int:pk>/', officer_delete, name='officer-delete'),
    path('admin/officers/<int:pk>/reset-password/', officer_reset_password, name='officer-reset-password'),
    path('admin/officers/<int:pk>/status/', officer_status, name='officer-status'),
]
