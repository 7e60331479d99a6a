from django.contrib import admin
from .models import CustomField, CustomFieldAssignment, CustomFieldValue, CustomFieldReview


@admin.register(CustomField)
class CustomFieldAdmin(admin.ModelAdmin):
    list_display = ['field_id', 'label', 'field_type', 'required', 'added_by', 'added_at']
    list_filter = ['field_type', 'required']
    search_fields = ['field_id', 'label']


@admin.register(CustomFieldAssignment)
class CustomFieldAssignmentAdmin(admin.ModelAdmin):
    list_display = ['field', 'homestay', 'created_at']
    search_fields = ['field__label', 'homestay__homestay_id']


@admin.register(CustomFieldValue)
class CustomFieldValueAdmin(admin.ModelAdmin):
    list_display = ['field', 'homestay', 'value', 'updated_by', 'updated_at']
    search_fields = ['field__label', 'homestay__homestay_id']


@admin.register(CustomFieldReview)
class CustomFieldReviewAdmin(admin.ModelAdmin):
    list_display = ['homestay', 'last_updated', 'reviewed', 'reviewed_by', 'reviewed_at']
    list_filter = ['reviewed']
