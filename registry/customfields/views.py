import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404

from registry.core.permissions import IsSuperAdmin, IsRegistryStaff
from registry.core.utils import create_audit_log
from registry.homestays.models import Homestay
from registry.homestays.utils import scope_homestays
from .models import CustomFieldReview
from .serializers import (
    ApplyCustomFieldSerializer, FieldValueSerializer, MarkReviewedSerializer,
    NotificationReviewSerializer,
)
from .services import (
    CustomFieldError, NoSelectionCriteria, NoMatchingHomestays,
    apply_custom_field, list_field_definitions, remove_custom_field, set_field_value,
    homestay_field_values, mark_reviewed, pending_notifications, serialize_definition,
)

logger = logging.getLogger('registry.customfields')


@api_view(['GET', 'POST', 'DELETE'])
@permission_classes([IsAuthenticated, IsSuperAdmin])
def custom_field_list_apply(request):
    """
    GET: definitions carried by the filtered homestays.
    POST: upsert a definition and attach it by filter or explicit selection.
    DELETE: detach a field (`field_id`, optional `admin_username`).
    """
    if request.method == 'GET':
        definitions = list_field_definitions(request.query_params, request.query_params.get('homestay_id'))
        return Response({'field_definitions': definitions, 'count': len(definitions)})

    if request.method == 'DELETE':
        field_id = request.query_params.get('field_id')
        if not field_id:
            return Response({'error': 'Field ID is required'}, status=status.HTTP_400_BAD_REQUEST)
        try:
            removed = remove_custom_field(field_id, request.query_params.get('admin_username'))
        except Exception as e:
            logger.error(f"Unexpected error removing custom field {field_id}: {str(e)}", exc_info=True)
            return Response({'error': 'An unexpected error occurred'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        create_audit_log(
            request=request, action='custom_field_remove', model_name='CustomField',
            object_id=field_id, changes={'removed_from': removed},
        )
        return Response({
            'message': f'Custom field removed from {removed} homestays',
            'field_id': field_id,
            'removed_from': removed,
        })

    serializer = ApplyCustomFieldSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data

    try:
        field, affected, matched = apply_custom_field(
            data['field_definition'],
            filters=data['filter'],
            apply_to_all=data['apply_to_all'],
            selected_ids=data['selected_homestay_ids'],
            added_by=request.user.username,
        )
    except NoSelectionCriteria as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except NoMatchingHomestays as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except Exception as e:
        logger.error(f"Unexpected error applying custom field: {str(e)}", exc_info=True)
        return Response({'error': 'An unexpected error occurred'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    create_audit_log(
        request=request, action='custom_field_apply', model_name='CustomField',
        object_id=field.field_id, object_name=field.label,
        changes={'affected_homestays': affected, 'matched_homestays': matched},
    )
    return Response({
        'message': f'Custom field "{field.label}" created and applied to {affected} homestays',
        'field_id': field.field_id,
        'field_definition': serialize_definition(field),
        'affected_homestays': affected,
        'matched_homestays': matched,
    })


def _get_staff_homestay(request, homestay_id):
    return get_object_or_404(scope_homestays(request.user, Homestay.objects.all()), homestay_id=homestay_id)


@api_view(['GET', 'PATCH', 'POST'])
@permission_classes([IsAuthenticated, IsRegistryStaff])
def custom_field_values(request):
    """
    GET ?homestay_id=: definitions, values and review state.
    PATCH {homestay_id, field_id, value}: store one validated value.
    POST {homestay_id, reviewed_by}: mark the homestay's values reviewed.
    """
    if request.method == 'GET':
        homestay_id = request.query_params.get('homestay_id')
        if not homestay_id:
            return Response({'error': 'Homestay ID is required'}, status=status.HTTP_400_BAD_REQUEST)
        homestay = _get_staff_homestay(request, homestay_id)
        return Response(homestay_field_values(homestay))

    if request.method == 'PATCH':
        serializer = FieldValueSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        data = serializer.validated_data
        homestay = _get_staff_homestay(request, data['homestay_id'])
        try:
            stored = set_field_value(homestay, data['field_id'], data['value'], updated_by=request.user.username)
        except CustomFieldError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        create_audit_log(
            request=request, action='custom_field_value', model_name='Homestay',
            object_id=homestay.homestay_id, object_name=homestay.name,
            changes={'field_id': data['field_id'], 'value': stored.value},
        )
        return Response({'homestay_id': homestay.homestay_id, 'field_id': data['field_id'], 'value': stored.value})

    serializer = MarkReviewedSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    homestay = _get_staff_homestay(request, serializer.validated_data['homestay_id'])
    reviewer = serializer.validated_data['reviewed_by'] or request.user.username
    CustomFieldReview.objects.get_or_create(homestay=homestay)
    matched, modified = mark_reviewed([homestay.homestay_id], reviewer)
    create_audit_log(
        request=request, action='custom_field_review', model_name='Homestay',
        object_id=homestay.homestay_id, object_name=homestay.name,
    )
    return Response({'matched_count': matched, 'modified_count': modified})


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsSuperAdmin])
def notifications(request):
    """Unreviewed custom field updates; POST marks a batch reviewed"""
    if request.method == 'GET':
        items = pending_notifications()
        return Response({'notifications': items, 'count': len(items)})

    serializer = NotificationReviewSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    reviewer = serializer.validated_data['reviewer_username'] or request.user.username
    matched, modified = mark_reviewed(serializer.validated_data['homestay_ids'], reviewer)
    logger.info(f"{reviewer} reviewed custom field updates: {modified} of {matched}")
    return Response({
        'message': f'Marked {modified} notifications as reviewed',
        'reviewed_by': reviewer,
        'matched_count': matched,
        'modified_count': modified,
    })
