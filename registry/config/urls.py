"""
URL configuration for the homestay registry project.

Every app mounts its routes under `api/v1/`; the Django admin stays at
`admin/` for superadmin maintenance.
"""
from django.contrib import admin
from django.urls import path, include, re_path
from django.conf import settings
from django.views.static import serve

admin.site.site_header = "Homestay Registry Admin Panel"
admin.site.site_title = "Homestay Registry Admin Portal"
admin.site.index_title = "Welcome to the Homestay Registry Admin Portal"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('registry.core.urls')),
    path('api/v1/', include('registry.locations.urls')),
    path('api/v1/', include('registry.homestays.urls')),
    path('api/v1/', include('registry.customfields.urls')),
    path('api/v1/', include('registry.content.urls')),
    path('api/v1/', include('registry.reports.urls')),
    re_path(r'^media/(?P<path>.*)$', serve, {'document_root': settings.MEDIA_ROOT}),
]
