from django.contrib import admin
from .models import Homestay, Official, Contact


class OfficialInline(admin.TabularInline):
    model = Official
    extra = 0


class ContactInline(admin.TabularInline):
    model = Contact
    extra = 0


@admin.register(Homestay)
class HomestayAdmin(admin.ModelAdmin):
    list_display = ['homestay_id', 'name', 'admin_username', 'homestay_type', 'district_en', 'status', 'created_at']
    list_filter = ['status', 'homestay_type', 'province_en', 'created_at']
    search_fields = ['homestay_id', 'name', 'dhsr_no', 'village_name', 'admin_username']
    exclude = ['password']
    inlines = [OfficialInline, ContactInline]


@admin.register(Official)
class OfficialAdmin(admin.ModelAdmin):
    list_display = ['name', 'role', 'contact_no', 'homestay']
    search_fields = ['name', 'contact_no', 'homestay__homestay_id']


@admin.register(Contact)
class ContactAdmin(admin.ModelAdmin):
    list_display = ['name', 'mobile', 'email', 'homestay']
    search_fields = ['name', 'mobile', 'email', 'homestay__homestay_id']
