import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.contrib.auth import get_user_model
from django.http import HttpResponse

from registry.core.permissions import IsRegistryStaff
from registry.homestays.filters import HomestayFilter
from registry.homestays.utils import scope_homestays
from registry.locations import lookup
from registry.locations.cascade import LocationSelection
from .exporters import UnsupportedExportFormat, export_filename, render_report, report_info_from_branding
from .projection import (
    FEATURE_FILTER_PARAMS, UnknownReportType, get_report_type, homestay_record,
    filter_by_features, filter_options, feature_items, sort_records, project,
)

logger = logging.getLogger('registry.reports')

User = get_user_model()


def _list_param(params, name):
    """Checkbox values sent as repeated params or one comma separated value"""
    values = []
    for raw in params.getlist(name):
        values.extend(item.strip() for item in raw.split(',') if item.strip())
    return values


def _tenant_branding(request):
    user = request.user
    if user.is_tenant_admin:
        return user.branding
    if user.is_officer and user.parent_admin_id:
        return user.parent_admin.branding
    admin_username = (request.query_params.get('admin_username') or '').strip().lower()
    if admin_username:
        admin = User.objects.filter(username=admin_username, role=User.ROLE_ADMIN).first()
        if admin:
            return admin.branding
    return {}


def _build_report(request, report_type):
    """Scoped, filtered and sorted projection plus the filter options of the caller's records"""
    get_report_type(report_type)
    params = request.query_params.copy()
    params['lang'] = 'ne' if params.get('lang') == 'ne' else 'en'

    scoped = scope_homestays(request.user)

    # Option lists come from every record the caller can see, ignoring the location selection
    option_params = params.copy()
    for level in lookup.LEVELS:
        option_params.pop(level, None)
    all_records = [homestay_record(h) for h in HomestayFilter(option_params, queryset=scoped).qs]

    records = [homestay_record(h) for h in HomestayFilter(params, queryset=scoped).qs]
    records = filter_by_features(records, {name: _list_param(params, name) for name in FEATURE_FILTER_PARAMS})
    records = sort_records(records, params.get('sort'), params.get('direction', 'asc'))

    selection = LocationSelection.from_params(params)
    province = lookup.bilingual(selection.province, lookup.PROVINCE)['en'] if selection.province else ''
    district = lookup.bilingual(selection.district, lookup.DISTRICT)['en'] if selection.district else ''
    options = filter_options(all_records, province, district)
    options.update(feature_items(all_records))

    headers, rows = project(records, report_type)
    return headers, rows, options


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsRegistryStaff])
def report_detail(request, report_type):
    """
    Report table as JSON.

    Filters: province/district/municipality (either language), homestay_type,
    status, admin_username (superadmin), selected_attractions,
    selected_infrastructure, selected_services; sorting via `sort` and
    `direction`.
    """
    try:
        headers, rows, options = _build_report(request, report_type)
    except UnknownReportType as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

    return Response({
        'report_type': report_type,
        'title': get_report_type(report_type)['title'],
        'headers': headers,
        'rows': rows,
        'count': len(rows),
        'filters': options,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsRegistryStaff])
def report_export(request, report_type):
    """Download the report as pdf, excel or csv (`export_format`, default pdf)"""
    export_format = request.query_params.get('export_format', 'pdf')
    try:
        config = get_report_type(report_type)
        filename = export_filename(report_type, export_format)
    except UnknownReportType as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except UnsupportedExportFormat as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    try:
        headers, rows, _ = _build_report(request, report_type)
        info = report_info_from_branding(_tenant_branding(request), config['title'], config['description'])
        content, content_type = render_report(headers, rows, export_format, info)
    except Exception as e:
        logger.error(f"Error exporting {report_type} report as {export_format}: {str(e)}", exc_info=True)
        return Response({'error': 'An unexpected error occurred'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    logger.info(f"User {request.user.username} exported {report_type} report ({export_format}, {len(rows)} rows)")
    response = HttpResponse(content, content_type=content_type)
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response
