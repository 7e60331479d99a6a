from django.contrib import admin
from .models import WebContent, Navigation


@admin.register(WebContent)
class WebContentAdmin(admin.ModelAdmin):
    list_display = ['admin_username', 'updated_at']
    search_fields = ['admin_username']


@admin.register(Navigation)
class NavigationAdmin(admin.ModelAdmin):
    list_display = ['admin_username', 'nav_type', 'updated_at']
    list_filter = ['nav_type']
    search_fields = ['admin_username']
