import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError, AuthenticationFailed
from django.contrib.auth import get_user_model
from django.core.exceptions import ObjectDoesNotExist
from django.shortcuts import get_object_or_404
from django.db import transaction
from django.db.models import Q

from registry.content.branding import BrandingError, merge_branding, delete_slider_image, normalize_branding
from .models import AuditLog
from .permissions import IsSuperAdmin, IsTenantAdmin
from .serializers import (
    UserSerializer, UserCreateSerializer, UserUpdateSerializer, PermissionsSerializer,
    OfficerCreateSerializer, ChangePasswordSerializer, ResetPasswordSerializer,
    AuditLogSerializer,
)
from .utils import create_audit_log

logger = logging.getLogger('registry.core')

User = get_user_model()


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    def validate(self, attrs):
        attrs[self.username_field] = (attrs.get(self.username_field) or '').strip().lower()
        data = super().validate(attrs)
        if not self.user.is_active:
            raise AuthenticationFailed('User account is disabled.')
        data['user'] = UserSerializer(self.user).data
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['username'] = user.username
        token['role'] = user.role
        return token


class CustomTokenObtainPairView(TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Token refresh that reports deleted users as an invalid token"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except ObjectDoesNotExist:
            raise InvalidToken('Token is invalid. User no longer exists.')


class CustomTokenRefreshView(TokenRefreshView):
    serializer_class = CustomTokenRefreshSerializer


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Current user with role, permissions and branding"""
    return Response(UserSerializer(request.user).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def change_password(request):
    serializer = ChangePasswordSerializer(data=request.data, context={'request': request})
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    request.user.set_password(serializer.validated_data['new_password'])
    request.user.save(update_fields=['password', 'updated_at'])
    logger.info(f"User {request.user.username} changed their password")
    return Response({'message': 'Password changed successfully'})


def _conflict_error(username, email, exclude_pk=None):
    """Return an error message when username or email is already taken"""
    qs = User.objects.all()
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    if username and qs.filter(username__iexact=username.strip()).exists():
        return 'Username already exists'
    if email and qs.filter(email__iexact=email.strip()).exists():
        return 'Email already exists'
    return None


# Superadmin user management
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsSuperAdmin])
def superadmin_user_list_create(request):
    """List accounts (optionally by role/search) or create an admin/officer/superadmin"""
    if request.method == 'GET':
        users = User.objects.select_related('parent_admin').all()
        role = request.query_params.get('role')
        if role:
            users = users.filter(role=role)
        search = request.query_params.get('search')
        if search:
            users = users.filter(
                Q(username__icontains=search) | Q(email__icontains=search) |
                Q(contact_number__icontains=search)
            )
        serializer = UserSerializer(users, many=True)
        return Response(serializer.data)

    serializer = UserCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    conflict = _conflict_error(serializer.validated_data['username'], serializer.validated_data['email'])
    if conflict:
        logger.warning(f"Superadmin {request.user.username} user creation rejected: {conflict}")
        return Response({'error': conflict}, status=status.HTTP_409_CONFLICT)

    try:
        user = serializer.save()
    except Exception as e:
        logger.error(f"Unexpected error creating user: {str(e)}", exc_info=True)
        return Response({'error': 'An unexpected error occurred'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    create_audit_log(
        request=request, action='create', model_name='User', object_id=user.pk,
        object_name=user.username, changes={'role': user.role},
    )
    logger.info(f"User '{user.username}' ({user.role}) created by {request.user.username}")
    return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsSuperAdmin])
def superadmin_user_detail(request, pk):
    user = get_object_or_404(User, pk=pk)

    if request.method == 'GET':
        return Response(UserSerializer(user).data)

    if request.method == 'PATCH':
        email = request.data.get('email')
        if email:
            conflict = _conflict_error(None, email, exclude_pk=user.pk)
            if conflict:
                return Response({'error': conflict}, status=status.HTTP_409_CONFLICT)
        serializer = UserUpdateSerializer(user, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer.save()
        create_audit_log(
            request=request, action='update', model_name='User', object_id=user.pk,
            object_name=user.username, changes=dict(serializer.validated_data),
        )
        return Response(UserSerializer(user).data)

    if user.pk == request.user.pk:
        return Response({'error': 'You cannot delete your own account'}, status=status.HTTP_400_BAD_REQUEST)
    username = user.username
    user_pk = user.pk
    user.delete()
    create_audit_log(
        request=request, action='delete', model_name='User', object_id=user_pk, object_name=username,
    )
    logger.info(f"User '{username}' deleted by {request.user.username}")
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated, IsSuperAdmin])
def superadmin_user_permissions(request, pk):
    user = get_object_or_404(User, pk=pk)

    if request.method == 'GET':
        return Response({'id': user.pk, 'username': user.username, 'permissions': user.permissions})

    payload = request.data if 'permissions' in request.data else {'permissions': request.data}
    serializer = PermissionsSerializer(data=payload)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    permissions = dict(user.permissions or {})
    permissions.update(serializer.validated_data['permissions'])
    user.permissions = permissions
    user.save(update_fields=['permissions', 'updated_at'])
    create_audit_log(
        request=request, action='permissions_change', model_name='User', object_id=user.pk,
        object_name=user.username, changes=serializer.validated_data['permissions'],
    )
    return Response({'id': user.pk, 'username': user.username, 'permissions': user.permissions})


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated, IsSuperAdmin])
def superadmin_user_branding(request, pk):
    """Read or merge an admin's branding; `delete_slider_index` drops one slider image"""
    user = get_object_or_404(User, pk=pk)
    if not user.is_tenant_admin:
        return Response({'error': 'Branding is only available for admin users'}, status=status.HTTP_400_BAD_REQUEST)

    if request.method == 'GET':
        return Response({'username': user.username, 'branding': normalize_branding(user.branding)})

    data = dict(request.data)
    delete_index = data.pop('delete_slider_index', None)
    updates = data.get('branding', data)
    try:
        branding = merge_branding(user.branding, updates)
        if delete_index is not None:
            branding = delete_slider_image(branding, delete_index)
    except BrandingError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    user.branding = branding
    user.save(update_fields=['branding', 'updated_at'])
    create_audit_log(
        request=request, action='branding_change', model_name='User', object_id=user.pk,
        object_name=user.username, changes={'keys': sorted(updates.keys()) if isinstance(updates, dict) else []},
    )
    return Response({'username': user.username, 'branding': branding})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSuperAdmin])
def audit_log_list(request):
    """Recent audit entries, filterable by action and model_name"""
    logs = AuditLog.objects.select_related('user').all()
    action = request.query_params.get('action')
    if action:
        logs = logs.filter(action=action)
    model_name = request.query_params.get('model_name')
    if model_name:
        logs = logs.filter(model_name=model_name)
    try:
        limit = min(int(request.query_params.get('limit', 100)), 500)
    except ValueError:
        limit = 100
    return Response(AuditLogSerializer(logs[:limit], many=True).data)


# Admin officer management
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsTenantAdmin])
def officer_list_create(request):
    if request.method == 'GET':
        officers = User.objects.filter(role=User.ROLE_OFFICER, parent_admin=request.user)
        return Response(UserSerializer(officers, many=True).data)

    serializer = OfficerCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    conflict = _conflict_error(serializer.validated_data['username'], serializer.validated_data['email'])
    if conflict:
        return Response({'error': conflict}, status=status.HTTP_409_CONFLICT)

    try:
        with transaction.atomic():
            officer = serializer.save(parent_admin=request.user)
    except Exception as e:
        logger.error(f"Unexpected error creating officer: {str(e)}", exc_info=True)
        return Response({'error': 'An unexpected error occurred'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    create_audit_log(
        request=request, action='create', model_name='User', object_id=officer.pk,
        object_name=officer.username, changes={'role': User.ROLE_OFFICER},
    )
    logger.info(f"Officer '{officer.username}' created by admin {request.user.username}")
    return Response(UserSerializer(officer).data, status=status.HTTP_201_CREATED)


def _get_own_officer(request, pk):
    return get_object_or_404(User, pk=pk, role=User.ROLE_OFFICER, parent_admin=request.user)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsTenantAdmin])
def officer_delete(request, pk):
    officer = _get_own_officer(request, pk)
    username = officer.username
    officer.delete()
    create_audit_log(
        request=request, action='delete', model_name='User', object_id=pk, object_name=username,
    )
    logger.info(f"Officer '{username}' deleted by admin {request.user.username}")
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsTenantAdmin])
def officer_reset_password(request, pk):
    officer = _get_own_officer(request, pk)
    serializer = ResetPasswordSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    officer.set_password(serializer.validated_data['new_password'])
    officer.save(update_fields=['password', 'updated_at'])
    create_audit_log(
        request=request, action='password_reset', model_name='User', object_id=officer.pk,
        object_name=officer.username,
    )
    return Response({'message': 'Password reset successfully'})


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsTenantAdmin])
def officer_status(request, pk):
    officer = _get_own_officer(request, pk)
    is_active = request.data.get('is_active')
    if not isinstance(is_active, bool):
        return Response({'error': 'is_active must be a boolean'}, status=status.HTTP_400_BAD_REQUEST)
    officer.is_active = is_active
    officer.save(update_fields=['is_active', 'updated_at'])
    create_audit_log(
        request=request, action='status_change', model_name='User', object_id=officer.pk,
        object_name=officer.username, changes={'is_active': is_active},
    )
    return Response(UserSerializer(officer).data)
