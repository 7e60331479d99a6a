import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import AllowAny

from . import lookup
from .cascade import LocationSelection, InvalidLocation

logger = logging.getLogger('registry.locations')


@api_view(['GET'])
@permission_classes([AllowAny])
def province_list(request):
    return Response(lookup.provinces())


@api_view(['GET'])
@permission_classes([AllowAny])
def district_list(request):
    province = request.query_params.get('province', '')
    return Response(lookup.districts_for(province))


@api_view(['GET'])
@permission_classes([AllowAny])
def municipality_list(request):
    district = request.query_params.get('district', '')
    return Response(lookup.municipalities_for(district))


@api_view(['POST'])
@permission_classes([AllowAny])
def cascade_change(request):
    """
    Apply one level change to a selection.

    Body: {province, district, municipality, level, value}. Returns the new
    selection and the option lists for it.
    """
    level = request.data.get('level')
    if not level:
        return Response({'error': 'level is required'}, status=status.HTTP_400_BAD_REQUEST)

    try:
        selection = LocationSelection.from_params(request.data, validate=True)
        selection = selection.change(level, request.data.get('value'))
    except InvalidLocation as e:
        logger.warning(f"Rejected location change {level}={request.data.get('value')!r}: {e}")
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response({'selection': selection.as_dict(), 'options': selection.options()})
