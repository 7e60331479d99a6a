"""
Custom field application, values and review state.

A definition is upserted by `field_id` and attached to homestays through
`CustomFieldAssignment`; attaching twice is a no-op, so the affected count of
an application is the number of homestays that did not carry the field yet.
"""
import datetime
import logging

from django.db import transaction
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from registry.homestays.filters import HomestayFilter
from registry.homestays.models import Homestay
from .models import CustomField, CustomFieldAssignment, CustomFieldValue, CustomFieldReview

logger = logging.getLogger(__name__)

FILTER_KEYS = ('admin_username', 'province', 'district', 'municipality', 'homestay_type')
DEFINITION_KEYS = ('label', 'field_type', 'options', 'required')


class CustomFieldError(Exception):
    pass


class NoSelectionCriteria(CustomFieldError):
    pass


class NoMatchingHomestays(CustomFieldError):
    pass


class InvalidFieldValue(CustomFieldError):
    pass


def clean_filter(filters):
    """Keep only the supported filter keys, dropping 'all' and empty values"""
    filters = filters or {}
    return {key: filters[key] for key in FILTER_KEYS if filters.get(key) not in (None, '', 'all')}


def build_application_payload(definition, filters=None, selected_ids=None, apply_to_all=True):
    """
    Request body for applying a field.

    An explicit selection always wins over the filter; without a selection
    the filter is used only when `apply_to_all` is set.
    """
    selected_ids = [i for i in (selected_ids or []) if i]
    if not apply_to_all and not selected_ids:
        raise NoSelectionCriteria('Select specific homestays or apply filters')
    return {
        'field_definition': dict(definition),
        'filter': clean_filter(filters),
        'apply_to_all': apply_to_all if not selected_ids else False,
        'selected_homestay_ids': selected_ids,
    }


def target_homestays(filters=None, apply_to_all=False, selected_ids=None):
    if apply_to_all:
        return HomestayFilter(clean_filter(filters), queryset=Homestay.objects.all()).qs
    if selected_ids:
        return Homestay.objects.filter(homestay_id__in=list(selected_ids))
    raise NoSelectionCriteria(
        'No selection criteria provided. Please select specific homestays or apply filters.'
    )


def apply_custom_field(definition, filters=None, apply_to_all=False, selected_ids=None, added_by='system'):
    """
    Upsert the definition and attach it to the target homestays.

    Returns (field, affected_count, matched_count).
    """
    homestays = list(target_homestays(filters, apply_to_all, selected_ids))
    if not homestays:
        raise NoMatchingHomestays('No matching homestays found with the provided criteria')

    defaults = {key: definition[key] for key in DEFINITION_KEYS if key in definition}
    defaults['added_by'] = added_by
    field_id = definition.get('field_id')

    with transaction.atomic():
        if field_id:
            field, _ = CustomField.objects.update_or_create(field_id=field_id, defaults=defaults)
        else:
            field = CustomField.objects.create(**defaults)

        already = set(
            CustomFieldAssignment.objects.filter(field=field, homestay__in=homestays)
            .values_list('homestay_id', flat=True)
        )
        new_assignments = [
            CustomFieldAssignment(field=field, homestay=h) for h in homestays if h.pk not in already
        ]
        CustomFieldAssignment.objects.bulk_create(new_assignments)

    logger.info(
        f"Custom field {field.field_id} ({field.label}) applied: "
        f"{len(new_assignments)} new of {len(homestays)} matched"
    )
    return field, len(new_assignments), len(homestays)


def list_field_definitions(filters=None, homestay_id=None):
    """Unique definitions carried by the matching homestays, each with `applied_to`"""
    homestays = HomestayFilter(clean_filter(filters), queryset=Homestay.objects.all()).qs
    if homestay_id:
        homestays = homestays.filter(homestay_id=homestay_id)

    assignments = (
        CustomFieldAssignment.objects
        .filter(homestay__in=homestays)
        .select_related('field', 'homestay')
        .order_by('field__added_at', 'field_id', 'homestay__homestay_id')
    )
    definitions = {}
    for assignment in assignments:
        field = assignment.field
        if field.field_id not in definitions:
            definitions[field.field_id] = {**serialize_definition(field), 'applied_to': []}
        definitions[field.field_id]['applied_to'].append({
            'homestay_id': assignment.homestay.homestay_id,
            'name': assignment.homestay.name,
        })
    return list(definitions.values())


def serialize_definition(field):
    return {
        'field_id': field.field_id,
        'label': field.label,
        'field_type': field.field_type,
        'options': field.options,
        'required': field.required,
        'added_by': field.added_by,
        'added_at': field.added_at.isoformat() if field.added_at else None,
    }


def remove_custom_field(field_id, admin_username=None):
    """
    Detach a field from homestays (optionally only one tenant's).

    The definition and its values are deleted once no homestay carries it.
    Returns the number of homestays it was removed from.
    """
    field = CustomField.objects.filter(field_id=field_id).first()
    if field is None:
        return 0

    with transaction.atomic():
        assignments = CustomFieldAssignment.objects.filter(field=field)
        values = CustomFieldValue.objects.filter(field=field)
        if admin_username and admin_username != 'all':
            assignments = assignments.filter(homestay__admin_username=admin_username.strip().lower())
            values = values.filter(homestay__admin_username=admin_username.strip().lower())
        removed, _ = assignments.delete()
        values.delete()
        if not CustomFieldAssignment.objects.filter(field=field).exists():
            field.delete()

    logger.info(f"Custom field {field_id} removed from {removed} homestays")
    return removed


def _is_empty(value):
    return value is None or (isinstance(value, str) and not value.strip())


def validate_value(field, value):
    """Coerce a submitted value to the field's type or raise InvalidFieldValue"""
    if _is_empty(value):
        if field.required:
            raise InvalidFieldValue(f'{field.label} is required')
        return None

    if field.field_type == CustomField.TYPE_NUMBER:
        if isinstance(value, bool):
            raise InvalidFieldValue(f'{field.label} must be a number')
        if isinstance(value, (int, float)):
            return value
        try:
            return int(value)
        except (TypeError, ValueError):
            pass
        try:
            return float(value)
        except (TypeError, ValueError):
            raise InvalidFieldValue(f'{field.label} must be a number')

    if field.field_type == CustomField.TYPE_DATE:
        text = str(value).strip()
        try:
            parsed = parse_date(text) or parse_datetime(text)
        except ValueError:
            parsed = None
        if parsed is None:
            raise InvalidFieldValue(f'{field.label} must be a date (YYYY-MM-DD)')
        if isinstance(parsed, datetime.datetime):
            parsed = parsed.date()
        return parsed.isoformat()

    if field.field_type == CustomField.TYPE_BOOLEAN:
        if isinstance(value, bool):
            return value
        if str(value).strip().lower() in ('true', '1', 'yes'):
            return True
        if str(value).strip().lower() in ('false', '0', 'no'):
            return False
        raise InvalidFieldValue(f'{field.label} must be true or false')

    if field.field_type == CustomField.TYPE_SELECT:
        if value not in (field.options or []):
            raise InvalidFieldValue(f'{field.label} must be one of: {", ".join(map(str, field.options or []))}')
        return value

    if not isinstance(value, str):
        raise InvalidFieldValue(f'{field.label} must be text')
    return value


def set_field_value(homestay, field_id, value, updated_by=''):
    """Validate and store one value; the homestay's values become unreviewed"""
    field = CustomField.objects.filter(field_id=field_id, assignments__homestay=homestay).first()
    if field is None:
        raise CustomFieldError('Field is not applied to this homestay')

    cleaned = validate_value(field, value)
    now = timezone.now()
    with transaction.atomic():
        stored, _ = CustomFieldValue.objects.update_or_create(
            field=field, homestay=homestay,
            defaults={'value': cleaned, 'updated_by': updated_by},
        )
        CustomFieldReview.objects.update_or_create(
            homestay=homestay,
            defaults={'last_updated': now, 'reviewed': False, 'reviewed_by': '', 'reviewed_at': None},
        )
    return stored


def homestay_field_values(homestay):
    definitions = [serialize_definition(f) for f in CustomField.objects.filter(assignments__homestay=homestay)]
    values = {
        v.field.field_id: v.value
        for v in CustomFieldValue.objects.filter(homestay=homestay).select_related('field')
    }
    review = CustomFieldReview.objects.filter(homestay=homestay).first()
    return {
        'homestay_id': homestay.homestay_id,
        'definitions': definitions,
        'values': values,
        'review': serialize_review(review),
    }


def serialize_review(review):
    if review is None:
        return {'last_updated': None, 'reviewed': False, 'reviewed_by': '', 'reviewed_at': None}
    return {
        'last_updated': review.last_updated.isoformat() if review.last_updated else None,
        'reviewed': review.reviewed,
        'reviewed_by': review.reviewed_by,
        'reviewed_at': review.reviewed_at.isoformat() if review.reviewed_at else None,
    }


def mark_reviewed(homestay_ids, reviewer):
    """
    Mark the values of the given homestays as reviewed.

    Returns (matched, modified): homestays with review state and those that
    were still unreviewed.
    """
    now = timezone.now()
    reviews = CustomFieldReview.objects.filter(homestay__homestay_id__in=list(homestay_ids))
    matched = reviews.count()
    modified = reviews.filter(reviewed=False).update(reviewed=True, reviewed_by=reviewer, reviewed_at=now)
    return matched, modified


def pending_notifications():
    reviews = (
        CustomFieldReview.objects
        .filter(last_updated__isnull=False, reviewed=False)
        .select_related('homestay')
        .order_by('-last_updated')
    )
    return [{
        'homestay_id': r.homestay.homestay_id,
        'name': r.homestay.name,
        'admin_username': r.homestay.admin_username or 'Unknown',
        'last_updated': r.last_updated.isoformat(),
        'message': 'Custom field information has been updated',
    } for r in reviews]
