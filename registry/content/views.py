import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import AllowAny, IsAuthenticated
from django.contrib.auth import get_user_model
from django.shortcuts import get_object_or_404

from registry.core.permissions import IsAdminOrSuperAdmin
from registry.core.utils import create_audit_log
from .branding import normalize_branding
from .defaults import DEFAULT_ADMIN_USERNAME
from .services import (
    UnknownSection, tenant_exists, get_web_content, get_section, update_web_content, reset_web_content,
    get_navigation, update_navigation,
)

logger = logging.getLogger('registry.content')

User = get_user_model()


def _tenant_param(request):
    return (request.query_params.get('admin_username') or DEFAULT_ADMIN_USERNAME).strip().lower()


def _tenant_not_found(tenant):
    return Response({'error': f'No content for {tenant}'}, status=status.HTTP_404_NOT_FOUND)


def _can_edit(user, tenant):
    """Superadmins edit any tenant's content, admins only their own"""
    if not user or not user.is_authenticated:
        return False
    if user.is_superadmin:
        return True
    return user.is_tenant_admin and user.username == tenant


@api_view(['GET', 'PATCH'])
@permission_classes([AllowAny])
def web_content(request):
    tenant = _tenant_param(request)
    section = request.query_params.get('section')

    if request.method == 'GET':
        if not tenant_exists(tenant):
            return _tenant_not_found(tenant)
        try:
            if section:
                return Response(get_section(tenant, section))
            return Response(get_web_content(tenant).content)
        except UnknownSection as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    if not request.user or not request.user.is_authenticated:
        return Response({'error': 'Authentication credentials were not provided.'}, status=status.HTTP_401_UNAUTHORIZED)
    if not _can_edit(request.user, tenant):
        logger.warning(f"User {request.user.username} attempted to edit web content of {tenant}")
        return Response({'error': 'You can only edit your own web content'}, status=status.HTTP_403_FORBIDDEN)
    if not tenant_exists(tenant):
        return _tenant_not_found(tenant)

    try:
        obj = update_web_content(tenant, request.data, section=section)
    except UnknownSection as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except Exception as e:
        logger.error(f"Unexpected error updating web content for {tenant}: {str(e)}", exc_info=True)
        return Response({'error': 'An unexpected error occurred'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    create_audit_log(
        request=request, action='content_update', model_name='WebContent',
        object_id=tenant, changes={'section': section or 'all'},
    )
    return Response({'message': 'Content updated successfully', 'content': obj.content})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminOrSuperAdmin])
def web_content_reset(request):
    tenant = _tenant_param(request)
    if not _can_edit(request.user, tenant):
        return Response({'error': 'You can only reset your own web content'}, status=status.HTTP_403_FORBIDDEN)
    if not tenant_exists(tenant):
        return _tenant_not_found(tenant)
    obj = reset_web_content(tenant)
    create_audit_log(request=request, action='content_reset', model_name='WebContent', object_id=tenant)
    return Response({'message': 'Content reset to defaults', 'content': obj.content})


@api_view(['GET', 'PATCH'])
@permission_classes([AllowAny])
def navigation(request, nav_type):
    tenant = _tenant_param(request)

    if request.method == 'GET':
        if not tenant_exists(tenant):
            return _tenant_not_found(tenant)
        try:
            return Response(get_navigation(tenant, nav_type).content)
        except UnknownSection as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

    if not _can_edit(request.user, tenant):
        return Response({'error': 'You can only edit your own navigation'}, status=status.HTTP_403_FORBIDDEN)
    if not tenant_exists(tenant):
        return _tenant_not_found(tenant)
    try:
        obj = update_navigation(tenant, nav_type, request.data)
    except UnknownSection as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    create_audit_log(
        request=request, action='content_update', model_name='Navigation',
        object_id=f'{tenant}:{nav_type}',
    )
    return Response(obj.content)


@api_view(['GET'])
@permission_classes([AllowAny])
def public_branding(request, admin_username):
    """Branding of an active tenant admin"""
    admin = get_object_or_404(
        User, username=admin_username.strip().lower(), role=User.ROLE_ADMIN, is_active=True
    )
    return Response({'admin_username': admin.username, 'branding': normalize_branding(admin.branding)})
