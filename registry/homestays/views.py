import logging
import math

from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from django.contrib.auth import get_user_model
from django.contrib.auth.hashers import make_password
from django.shortcuts import get_object_or_404
from django.db import transaction

from registry.core.permissions import IsSuperAdmin, IsAdminOrSuperAdmin, IsOfficer
from registry.core.utils import create_audit_log
from .authentication import HomestayAccessToken, HomestayJWTAuthentication, IsHomestayOwner
from .cache import get_cached_homestay_detail, cache_homestay_detail
from .filters import HomestayFilter
from .models import Homestay, Official, Contact
from .serializers import (
    HomestaySerializer, HomestayDetailSerializer, HomestayListSerializer,
    HomestayStatusSerializer, FeatureAccessSerializer, RegistrationSerializer,
    OfficialSerializer, ContactSerializer, HomestayOwnerSerializer, HomestayLoginSerializer,
)
from .services import register_homestay
from .utils import (
    generate_homestay_id, generate_secure_password, scope_homestays, can_access_homestay,
    flatten_address, paginate_params,
)

logger = logging.getLogger('registry.homestays')

User = get_user_model()


# Fields that need an upload flag on top of `homestay_edit`
UPLOAD_FLAGS = (
    ('documents', 'document_upload', "You don't have permission to upload documents"),
    ('profile_image', 'image_upload', "You don't have permission to upload images"),
    ('gallery_images', 'image_upload', "You don't have permission to upload images"),
)


def _forbidden(message):
    return Response({'error': message}, status=status.HTTP_403_FORBIDDEN)


def _upload_denied(request):
    """403 response when the edit touches uploads the caller has no flag for"""
    for field, flag, message in UPLOAD_FLAGS:
        if field in request.data and not request.user.has_flag(flag):
            return _forbidden(message)
    return None


def _get_scoped_homestay(request, homestay_id):
    """Homestay the caller may access; 404 for other tenants' homestays"""
    queryset = scope_homestays(request.user, Homestay.objects.all())
    return get_object_or_404(queryset, homestay_id=homestay_id)


# Public views
@api_view(['GET'])
@permission_classes([AllowAny])
def public_homestay_list(request):
    """
    Public listing with pagination.

    `lang` (en|ne, default ne) flattens the address to one language and keeps
    both sides under `address.translations`. Every status is listed.
    """
    params = request.query_params.copy()
    lang = params.get('lang') or 'ne'
    params['lang'] = lang
    page, limit = paginate_params(params)

    queryset = HomestayFilter(params, queryset=Homestay.objects.all()).qs
    total_count = queryset.count()
    offset = (page - 1) * limit
    homestays = queryset[offset:offset + limit]

    data = []
    for item in HomestayListSerializer(homestays, many=True).data:
        item['address'] = flatten_address(item['address'], lang)
        data.append(item)

    return Response({
        'data': data,
        'pagination': {
            'page': page,
            'limit': limit,
            'total_count': total_count,
            'total_pages': math.ceil(total_count / limit) if total_count else 0,
        }
    })


@api_view(['GET'])
@permission_classes([AllowAny])
def public_homestay_detail(request, homestay_id):
    cached_data = get_cached_homestay_detail(homestay_id)
    if cached_data is not None:
        return Response(cached_data)

    homestay = get_object_or_404(
        Homestay.objects.prefetch_related('officials', 'contacts'), homestay_id=homestay_id
    )
    data = HomestayDetailSerializer(homestay).data
    cache_homestay_detail(homestay_id, data)
    return Response(data)


@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """Register a homestay under an admin tenant; returns the one-time password"""
    serializer = RegistrationSerializer(data=request.data)
    if not serializer.is_valid():
        logger.warning(f"Homestay registration rejected: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    admin_username = serializer.validated_data['admin_username']
    if not User.objects.filter(username=admin_username, role=User.ROLE_ADMIN, is_active=True).exists():
        return Response({'error': f'Admin "{admin_username}" not found'}, status=status.HTTP_404_NOT_FOUND)

    try:
        homestay, password = register_homestay(serializer.validated_data)
    except Exception as e:
        logger.error(f"Unexpected error registering homestay: {str(e)}", exc_info=True)
        return Response({'error': 'An unexpected error occurred'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    create_audit_log(
        request=request, action='register', model_name='Homestay',
        object_id=homestay.homestay_id, object_name=homestay.name,
    )
    return Response({
        'message': 'Homestay registered successfully',
        'homestay_id': homestay.homestay_id,
        'password': password,
        'homestay': HomestayDetailSerializer(homestay).data,
    }, status=status.HTTP_201_CREATED)


# Homestay owner views
@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def homestay_login(request):
    """Exchange a homestay ID and password for an owner access token"""
    serializer = HomestayLoginSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    homestay_id = serializer.validated_data['homestay_id'].strip()
    try:
        homestay = Homestay.objects.get(homestay_id=homestay_id)
    except Homestay.DoesNotExist:
        return Response({'error': 'Homestay not found'}, status=status.HTTP_404_NOT_FOUND)
    if not homestay.check_password(serializer.validated_data['password']):
        logger.warning(f"Failed owner login for homestay {homestay_id}")
        return Response({'error': 'Invalid credentials'}, status=status.HTTP_401_UNAUTHORIZED)

    token = HomestayAccessToken.for_homestay(homestay)
    logger.info(f"Owner of homestay {homestay_id} signed in")
    return Response({'access': str(token), 'homestay_id': homestay.homestay_id, 'name': homestay.name})


@api_view(['GET', 'PATCH'])
@authentication_classes([HomestayJWTAuthentication])
@permission_classes([IsHomestayOwner])
def homestay_me(request):
    homestay = request.user.homestay

    if request.method == 'GET':
        return Response(HomestayDetailSerializer(homestay).data)

    if 'status' in request.data:
        return _forbidden('Homestay owners cannot change their status')
    serializer = HomestayOwnerSerializer(homestay, data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    serializer.save()
    create_audit_log(
        request=request, action='update', model_name='Homestay',
        object_id=homestay.homestay_id, object_name=homestay.name,
        changes={'fields': sorted(request.data.keys()), 'owner': homestay.homestay_id,
                 'tenant': homestay.admin_username},
    )
    return Response(HomestayDetailSerializer(homestay).data)


# Admin views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminOrSuperAdmin])
def admin_homestay_list_create(request):
    if request.method == 'GET':
        queryset = scope_homestays(request.user, Homestay.objects.all())
        queryset = HomestayFilter(request.query_params, queryset=queryset).qs
        page, limit = paginate_params(request.query_params, default_limit=20)
        total_count = queryset.count()
        offset = (page - 1) * limit
        serializer = HomestaySerializer(queryset[offset:offset + limit], many=True)
        return Response({
            'data': serializer.data,
            'pagination': {
                'page': page,
                'limit': limit,
                'total_count': total_count,
                'total_pages': math.ceil(total_count / limit) if total_count else 0,
            }
        })

    denied = _upload_denied(request)
    if denied:
        return denied
    serializer = HomestaySerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    if request.user.is_superadmin:
        admin_username = (request.data.get('admin_username') or '').strip().lower()
        if not User.objects.filter(username=admin_username, role=User.ROLE_ADMIN).exists():
            return Response({'error': 'A valid admin_username is required'}, status=status.HTTP_400_BAD_REQUEST)
    else:
        admin_username = request.user.username

    password = generate_secure_password()
    try:
        homestay = serializer.save(
            homestay_id=generate_homestay_id(serializer.validated_data['name']),
            admin_username=admin_username,
            password=make_password(password),
        )
    except Exception as e:
        logger.error(f"Unexpected error creating homestay: {str(e)}", exc_info=True)
        return Response({'error': 'An unexpected error occurred'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    create_audit_log(
        request=request, action='create', model_name='Homestay',
        object_id=homestay.homestay_id, object_name=homestay.name,
    )
    logger.info(f"Homestay {homestay.homestay_id} created by {request.user.username}")
    data = HomestayDetailSerializer(homestay).data
    data['password'] = password
    return Response(data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminOrSuperAdmin])
def admin_homestay_detail(request, homestay_id):
    homestay = _get_scoped_homestay(request, homestay_id)

    if request.method == 'GET':
        return Response(HomestayDetailSerializer(homestay).data)

    if request.method == 'PATCH':
        if not request.user.has_flag('homestay_edit'):
            return _forbidden("You don't have permission to edit homestay details")
        denied = _upload_denied(request)
        if denied:
            return denied
        serializer = HomestaySerializer(homestay, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer.save()
        create_audit_log(
            request=request, action='update', model_name='Homestay',
            object_id=homestay.homestay_id, object_name=homestay.name,
            changes={'fields': sorted(request.data.keys())},
        )
        return Response(HomestayDetailSerializer(homestay).data)

    if not request.user.has_flag('homestay_delete'):
        return _forbidden("You don't have permission to delete homestays")
    homestay_name = homestay.name
    homestay.delete()
    create_audit_log(
        request=request, action='delete', model_name='Homestay',
        object_id=homestay_id, object_name=homestay_name,
    )
    logger.info(f"Homestay {homestay_id} deleted by {request.user.username}")
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsAdminOrSuperAdmin])
def admin_homestay_status(request, homestay_id):
    """Set status; any state may move to any other state"""
    homestay = _get_scoped_homestay(request, homestay_id)
    if not request.user.has_flag('homestay_approval'):
        return _forbidden("You don't have permission to change homestay status")

    serializer = HomestayStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    old_status = homestay.status
    homestay.status = serializer.validated_data['status']
    homestay.save(update_fields=['status', 'updated_at'])
    create_audit_log(
        request=request, action='status_change', model_name='Homestay',
        object_id=homestay.homestay_id, object_name=homestay.name,
        changes={'old_status': old_status, 'new_status': homestay.status},
    )
    logger.info(f"Homestay {homestay.homestay_id} status {old_status} -> {homestay.status} by {request.user.username}")
    return Response({'homestay_id': homestay.homestay_id, 'status': homestay.status})


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminOrSuperAdmin])
def admin_official_list_create(request, homestay_id):
    homestay = _get_scoped_homestay(request, homestay_id)
    if request.method == 'GET':
        return Response(OfficialSerializer(homestay.officials.all(), many=True).data)
    serializer = OfficialSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    serializer.save(homestay=homestay)
    return Response(serializer.data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminOrSuperAdmin])
def admin_contact_list_create(request, homestay_id):
    homestay = _get_scoped_homestay(request, homestay_id)
    if request.method == 'GET':
        return Response(ContactSerializer(homestay.contacts.all(), many=True).data)
    serializer = ContactSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    serializer.save(homestay=homestay)
    return Response(serializer.data, status=status.HTTP_201_CREATED)


def _related_detail(request, model, serializer_class, pk):
    obj = get_object_or_404(model.objects.select_related('homestay'), pk=pk)
    if not can_access_homestay(request.user, obj.homestay):
        return Response({'error': 'Not found.'}, status=status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return Response(serializer_class(obj).data)
    if request.method == 'PATCH':
        serializer = serializer_class(obj, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer.save()
        return Response(serializer.data)
    obj.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminOrSuperAdmin])
def admin_official_detail(request, pk):
    return _related_detail(request, Official, OfficialSerializer, pk)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminOrSuperAdmin])
def admin_contact_detail(request, pk):
    return _related_detail(request, Contact, ContactSerializer, pk)


# Officer views
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsOfficer])
def officer_homestay_list(request):
    queryset = scope_homestays(request.user, Homestay.objects.all())
    queryset = HomestayFilter(request.query_params, queryset=queryset).qs
    return Response(HomestaySerializer(queryset, many=True).data)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated, IsOfficer])
def officer_homestay_detail(request, homestay_id):
    homestay = _get_scoped_homestay(request, homestay_id)

    if request.method == 'GET':
        return Response(HomestayDetailSerializer(homestay).data)

    if 'status' in request.data:
        logger.warning(f"Officer {request.user.username} attempted to change status of {homestay_id}")
        return _forbidden('Officers cannot change homestay status')
    if not request.user.has_flag('homestay_edit'):
        return _forbidden("You don't have permission to edit homestay details")
    denied = _upload_denied(request)
    if denied:
        return denied

    serializer = HomestaySerializer(homestay, data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    serializer.save()
    create_audit_log(
        request=request, action='update', model_name='Homestay',
        object_id=homestay.homestay_id, object_name=homestay.name,
        changes={'fields': sorted(request.data.keys())},
    )
    return Response(HomestayDetailSerializer(homestay).data)


# Superadmin views
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSuperAdmin])
def superadmin_homestay_list(request):
    """All homestays with `limit`/`skip` pagination"""
    queryset = HomestayFilter(request.query_params, queryset=Homestay.objects.all()).qs
    try:
        limit = min(max(int(request.query_params.get('limit', 50)), 1), 500)
    except ValueError:
        limit = 50
    try:
        skip = max(int(request.query_params.get('skip', 0)), 0)
    except ValueError:
        skip = 0

    total = queryset.count()
    serializer = HomestaySerializer(queryset[skip:skip + limit], many=True)
    return Response({
        'homestays': serializer.data,
        'pagination': {
            'total': total,
            'limit': limit,
            'skip': skip,
            'has_more': skip + limit < total,
        }
    })


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsSuperAdmin])
def superadmin_feature_access(request, homestay_id):
    homestay = get_object_or_404(Homestay, homestay_id=homestay_id)
    serializer = FeatureAccessSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        feature_access = dict(homestay.feature_access or {})
        feature_access.update(serializer.validated_data['feature_access'])
        homestay.feature_access = feature_access
        homestay.save(update_fields=['feature_access', 'updated_at'])

    create_audit_log(
        request=request, action='feature_access', model_name='Homestay',
        object_id=homestay.homestay_id, object_name=homestay.name,
        changes=serializer.validated_data['feature_access'],
    )
    return Response({'homestay_id': homestay.homestay_id, 'feature_access': homestay.feature_access})
