from django.urls import path
from .views import (
    public_homestay_list, public_homestay_detail, register, homestay_login, homestay_me,
    admin_homestay_list_create, admin_homestay_detail, admin_homestay_status,
    admin_official_list_create, admin_contact_list_create,
    admin_official_detail, admin_contact_detail,
    officer_homestay_list, officer_homestay_detail,
    superadmin_homestay_list, superadmin_feature_access,
)

urlpatterns = [
    # Public endpoints
    path('homestays/', public_homestay_list, name='homestay-list'),
    path('homestays/register/', register, name='homestay-register'),
    path('homestays/login/', homestay_login, name='homestay-login'),
    path('homestays/me/', homestay_me, name='homestay-me'),
    path('homestays/<str:homestay_id>/', public_homestay_detail, name='homestay-detail'),

    # Admin endpoints
    path('admin/homestays/', admin_homestay_list_create, name='admin-homestay-list-create'),
    path('admin/homestays/<str:homestay_id>/', admin_homestay_detail, name='admin-homestay-detail'),
    path('admin/homestays/<str:homestay_id>/status/', admin_homestay_status, name='admin-homestay-status'),
    path('admin/homestays/<str:homestay_id>/officials/', admin_official_list_create, name='admin-official-list-create'),
    path('admin/homestays/<str:homestay_id>/contacts/', admin_contact_list_create, name='admin-contact-list-create'),
    path('admin/officials/<int:pk>/', admin_official_detail, name='admin-official-detail'),
    path('admin/contacts/<int:pk>/', admin_contact_detail, name='admin-contact-detail'),

    # Officer endpoints
    path('officer/homestays/', officer_homestay_list, name='officer-homestay-list'),
    path('officer/homestays/<str:homestay_id>/', officer_homestay_detail, name='officer-homestay-detail'),

    # Superadmin endpoints
    path('superadmin/homestays/', superadmin_homestay_list, name='superadmin-homestay-list'),
    path('superadmin/homestays/<str:homestay_id>/feature-access/', superadmin_feature_access, name='superadmin-feature-access'),
]
