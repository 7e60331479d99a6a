from django.contrib.auth.models import AbstractUser
from django.db import models


DEFAULT_PERMISSIONS = {
    'admin_dashboard_access': False,
    'homestay_approval': False,
    'homestay_edit': False,
    'homestay_delete': False,
    'document_upload': False,
    'image_upload': False,
}


def default_permissions():
    return dict(DEFAULT_PERMISSIONS)


class User(AbstractUser):
    """Registry account: superadmin, tenant admin or officer"""
    ROLE_SUPERADMIN = 'superadmin'
    ROLE_ADMIN = 'admin'
    ROLE_OFFICER = 'officer'
    ROLE_CHOICES = [
        (ROLE_SUPERADMIN, 'Super Admin'),
        (ROLE_ADMIN, 'Admin'),
        (ROLE_OFFICER, 'Officer'),
    ]

    email = models.EmailField(unique=True)
    contact_number = models.CharField(max_length=20, blank=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_ADMIN)
    permissions = models.JSONField(default=default_permissions, blank=True)
    # Admin-only marketing content: logo, slider images, contact info, about us
    branding = models.JSONField(default=dict, blank=True)
    parent_admin = models.ForeignKey(
        'self', on_delete=models.CASCADE, null=True, blank=True, related_name='officers'
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'
        ordering = ['-created_at']

    def save(self, *args, **kwargs):
        if self.username:
            self.username = self.username.strip().lower()
        if self.email:
            self.email = self.email.strip().lower()
        super().save(*args, **kwargs)

    @property
    def is_superadmin(self):
        return self.role == self.ROLE_SUPERADMIN

    @property
    def is_tenant_admin(self):
        return self.role == self.ROLE_ADMIN

    @property
    def is_officer(self):
        return self.role == self.ROLE_OFFICER

    @property
    def tenant_username(self):
        """Admin username whose homestays this account works on (None for superadmin)"""
        if self.is_tenant_admin:
            return self.username
        if self.is_officer and self.parent_admin_id:
            return self.parent_admin.username
        return None

    def has_flag(self, flag):
        """Check a permissions-map flag; superadmins hold every flag"""
        if self.is_superadmin:
            return True
        return bool((self.permissions or {}).get(flag, False))


class AuditLog(models.Model):
    """Audit log for registry mutations"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('status_change', 'Status Changed'),
        ('register', 'Homestay Registered'),
        ('feature_access', 'Feature Access Changed'),
        ('permissions_change', 'Permissions Changed'),
        ('branding_change', 'Branding Changed'),
        ('password_reset', 'Password Reset'),
        ('custom_field_apply', 'Custom Field Applied'),
        ('custom_field_remove', 'Custom Field Removed'),
        ('custom_field_value', 'Custom Field Value Updated'),
        ('custom_field_review', 'Custom Field Values Reviewed'),
        ('content_update', 'Web Content Updated'),
        ('content_reset', 'Web Content Reset'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_name = models.CharField(max_length=255, blank=True, null=True, help_text="Human-readable name of the object (e.g., homestay name, username)")
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='audit_logs_created_a1b2c3_idx'),
            models.Index(fields=['action'], name='audit_logs_action_d4e5f6_idx'),
            models.Index(fields=['model_name'], name='audit_logs_model_n_0a1b2c_idx'),
        ]
