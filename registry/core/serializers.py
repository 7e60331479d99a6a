import re

from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from .models import User, AuditLog, DEFAULT_PERMISSIONS

CONTACT_NUMBER_RE = re.compile(r'^\d{10}$')


def validate_contact_number(value):
    value = str(value).strip()
    if not CONTACT_NUMBER_RE.match(value):
        raise serializers.ValidationError('Contact number must be exactly 10 digits')
    return value


class UserSerializer(serializers.ModelSerializer):
    parent_admin_username = serializers.CharField(source='parent_admin.username', read_only=True, default=None)

    class Meta:
        model = User
        fields = [
            'id', 'username', 'email', 'contact_number', 'role', 'permissions', 'branding',
            'parent_admin', 'parent_admin_username', 'is_active', 'created_at', 'updated_at'
        ]
        read_only_fields = ['role', 'parent_admin', 'created_at', 'updated_at']


class UserCreateSerializer(serializers.Serializer):
    """Superadmin-side account creation; uniqueness is checked by the view (409)"""
    username = serializers.CharField(max_length=150)
    password = serializers.CharField(write_only=True, validators=[validate_password])
    email = serializers.EmailField()
    contact_number = serializers.CharField(max_length=20)
    role = serializers.ChoiceField(choices=User.ROLE_CHOICES)
    branding = serializers.DictField(required=False)

    def validate_contact_number(self, value):
        return validate_contact_number(value)

    def validate(self, attrs):
        if attrs['role'] == User.ROLE_ADMIN and not attrs.get('branding'):
            raise serializers.ValidationError({'branding': 'Branding data is required for admin users'})
        return attrs

    def create(self, validated_data):
        password = validated_data.pop('password')
        branding = validated_data.pop('branding', None) or {}
        user = User(
            username=validated_data['username'],
            email=validated_data['email'],
            contact_number=validated_data['contact_number'],
            role=validated_data['role'],
            permissions=dict(DEFAULT_PERMISSIONS),
            branding=branding if validated_data['role'] == User.ROLE_ADMIN else {},
            is_active=True,
        )
        user.set_password(password)
        user.save()
        return user


class UserUpdateSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['email', 'contact_number', 'is_active', 'first_name', 'last_name']

    def validate_contact_number(self, value):
        return validate_contact_number(value)


class PermissionsSerializer(serializers.Serializer):
    permissions = serializers.DictField(child=serializers.BooleanField())


class OfficerCreateSerializer(serializers.Serializer):
    username = serializers.CharField(max_length=150)
    password = serializers.CharField(write_only=True, validators=[validate_password])
    email = serializers.EmailField()
    contact_number = serializers.CharField(max_length=20)
    permissions = serializers.DictField(child=serializers.BooleanField(), required=False)
    is_active = serializers.BooleanField(default=True)

    def validate_contact_number(self, value):
        return validate_contact_number(value)

    def create(self, validated_data):
        permissions = dict(DEFAULT_PERMISSIONS)
        permissions.update(validated_data.get('permissions') or {})
        officer = User(
            username=validated_data['username'],
            email=validated_data['email'],
            contact_number=validated_data['contact_number'],
            role=User.ROLE_OFFICER,
            permissions=permissions,
            parent_admin=validated_data['parent_admin'],
            is_active=validated_data.get('is_active', True),
        )
        officer.set_password(validated_data['password'])
        officer.save()
        return officer


class ChangePasswordSerializer(serializers.Serializer):
    old_password = serializers.CharField(write_only=True)
    new_password = serializers.CharField(write_only=True, validators=[validate_password])

    def validate_old_password(self, value):
        user = self.context['request'].user
        if not user.check_password(value):
            raise serializers.ValidationError('Current password is incorrect')
        return value


class ResetPasswordSerializer(serializers.Serializer):
    new_password = serializers.CharField(write_only=True, validators=[validate_password])


class AuditLogSerializer(serializers.ModelSerializer):
    username = serializers.CharField(source='user.username', read_only=True, default=None)

    class Meta:
        model = AuditLog
        fields = ['id', 'username', 'action', 'model_name', 'object_id', 'object_name',
                  'changes', 'ip_address', 'created_at']
