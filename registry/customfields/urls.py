from django.urls import path
from .views import custom_field_list_apply, custom_field_values, notifications

urlpatterns = [
    path('superadmin/custom-fields/', custom_field_list_apply, name='custom-field-list-apply'),
    path('superadmin/notifications/', notifications, name='custom-field-notifications'),
    path('custom-fields/values/', custom_field_values, name='custom-field-values'),
]
