"""
Report projection.

Homestays are turned into plain record dicts first, then projected into
`(headers, rows)` for one report type. The JSON view and every export format
share the same projection so the on-screen table and the downloaded file
always agree.
"""
from registry.homestays.models import FEATURE_KEYS


GEOGRAPHICAL = 'geographical-classification'
SERVICE_RATINGS = 'service-ratings'
TOURISM_ATTRACTIONS = 'tourism-attractions'
INFRASTRUCTURE = 'infrastructure'
HOMESTAY_SERVICES = 'homestay-services'

REPORT_TYPES = {
    GEOGRAPHICAL: {
        'title': 'Geographical Classification',
        'description': 'Homestays classified by province, district, municipality and ward.',
    },
    SERVICE_RATINGS: {
        'title': 'Service Ratings',
        'description': 'Average guest rating and review count of each homestay.',
    },
    TOURISM_ATTRACTIONS: {
        'title': 'Tourism Attractions',
        'description': 'Local attractions listed by each homestay.',
        'feature': 'local_attractions',
        'item_label': 'Local Attraction',
    },
    INFRASTRUCTURE: {
        'title': 'Infrastructure',
        'description': 'Infrastructure available at each homestay.',
        'feature': 'infrastructure',
        'item_label': 'Infrastructure Item',
    },
    HOMESTAY_SERVICES: {
        'title': 'Homestay Services',
        'description': 'Tourism services offered by each homestay.',
        'feature': 'tourism_services',
        'item_label': 'Tourism Service',
    },
}

# Checkbox filter param -> feature list it checks
FEATURE_FILTER_PARAMS = {
    'selected_attractions': 'local_attractions',
    'selected_infrastructure': 'infrastructure',
    'selected_services': 'tourism_services',
}

ATTRACTION_CATEGORIES = ('natural', 'cultural', 'products', 'forest', 'wildlife', 'adventure')
ATTRACTION_KEYWORDS = (
    ('natural', ('Park', 'National', 'River')),
    ('cultural', ('Museum', 'Heritage', 'Traditional')),
)
CATEGORY_LABELS = {'products': 'product'}


class UnknownReportType(ValueError):
    pass


def get_report_type(report_type):
    try:
        return REPORT_TYPES[report_type]
    except KeyError:
        raise UnknownReportType(f'Unknown report type: {report_type}')


def homestay_record(homestay):
    """Plain dict of the fields reports read"""
    return {
        'homestay_id': homestay.homestay_id,
        'name': homestay.name,
        'dhsr_no': homestay.dhsr_no or '',
        'homestay_type': homestay.homestay_type,
        'status': homestay.status,
        'village_name': homestay.village_name,
        'home_count': homestay.home_count,
        'room_count': homestay.room_count,
        'bed_count': homestay.bed_count,
        'average_rating': homestay.average_rating,
        'review_count': homestay.review_count,
        'admin_username': homestay.admin_username,
        'address': homestay.address,
        'features': homestay.features,
    }


def get_value(record, path):
    """
    Nested lookup by dotted path.

    Missing values come back as `''`; bilingual `{en, ne}` objects resolve to
    their English side.
    """
    if not record:
        return ''
    result = record
    for key in path.split('.'):
        if result is None:
            return ''
        if isinstance(result, dict):
            result = result.get(key)
        else:
            result = getattr(result, key, None)
    if isinstance(result, dict) and 'en' in result:
        return result.get('en') or ''
    return '' if result is None else result


def extract_bilingual_parts(item):
    """Split a `category:English/Nepali` feature item into its two sides"""
    parts = item.split(':')
    value = parts[1] if len(parts) > 1 else item
    sides = value.split('/')
    if len(sides) > 1:
        return {'en': sides[0].strip(), 'ne': sides[1].strip()}
    return {'en': value.strip(), 'ne': value.strip()}


def _attraction_category(item):
    for category in ATTRACTION_CATEGORIES:
        if item.startswith(f'{category}:'):
            return category
    for category, keywords in ATTRACTION_KEYWORDS:
        if any(word in item for word in keywords):
            return category
    return 'other'


def format_attractions(attractions):
    """Summary such as `3 attractions (2 natural, 1 cultural)`"""
    if not attractions:
        return 'None'
    counts = {category: 0 for category in ATTRACTION_CATEGORIES + ('other',)}
    for item in attractions:
        counts[_attraction_category(item)] += 1
    parts = [
        f'{count} {CATEGORY_LABELS.get(category, category)}'
        for category, count in counts.items() if count
    ]
    return f"{len(attractions)} attractions ({', '.join(parts)})"


def _sort_key(value):
    if isinstance(value, bool):
        return (0, int(value))
    if isinstance(value, (int, float)):
        return (0, value)
    return (1, str(value).lower())


def sort_records(records, key=None, direction='asc'):
    """
    Stable sort of records by a dotted path.

    Strings compare case-insensitively, missing values sort as `''` and
    `features.local_attractions` sorts by the number of attractions.
    """
    if not key:
        return list(records)
    reverse = direction == 'desc'
    if key == 'features.local_attractions':
        return sorted(records, key=lambda r: len((r.get('features') or {}).get('local_attractions') or []),
                      reverse=reverse)
    return sorted(records, key=lambda r: _sort_key(get_value(r, key)), reverse=reverse)


def _feature_matches(items, selected):
    available = set()
    for item in items or []:
        available.add(item)
        available.add(extract_bilingual_parts(item)['en'])
    return all(choice in available for choice in selected)


def filter_by_features(records, selections):
    """
    Keep records carrying every selected item.

    `selections` maps a checkbox param (`selected_attractions`, ...) to the
    chosen items; an item matches either the stored string or its English side.
    """
    for param, feature in FEATURE_FILTER_PARAMS.items():
        selected = [item for item in selections.get(param) or [] if item]
        if not selected:
            continue
        records = [
            r for r in records
            if _feature_matches((r.get('features') or {}).get(feature), selected)
        ]
    return records


def filter_options(records, province='', district=''):
    """Location option lists present in `records`, narrowed by the selected parent"""
    def unique(values):
        seen = []
        for value in values:
            if value and value not in seen:
                seen.append(value)
        return sorted(seen)

    options = {
        'provinces': unique(get_value(r, 'address.province') for r in records),
        'districts': [],
        'municipalities': [],
    }
    if province:
        options['districts'] = unique(
            get_value(r, 'address.district') for r in records
            if get_value(r, 'address.province') == province
        )
    if district:
        options['municipalities'] = unique(
            get_value(r, 'address.municipality') for r in records
            if get_value(r, 'address.district') == district
        )
    return options


def feature_items(records):
    """Distinct English feature items per feature list, for the checkbox filters"""
    items = {}
    for feature in FEATURE_KEYS:
        values = set()
        for record in records:
            for item in (record.get('features') or {}).get(feature) or []:
                values.add(extract_bilingual_parts(item)['en'])
        items[feature] = sorted(v for v in values if v)
    return items


def _display_type(record):
    return 'Community' if get_value(record, 'homestay_type') == 'community' else 'Private'


def _count(record, key):
    try:
        return int(get_value(record, key) or 0)
    except (TypeError, ValueError):
        return 0


def _geographical(records):
    headers = [
        'S.N.', 'Homestay Name', 'DHSR No', 'Type', 'Status', 'Province', 'District',
        'Municipality', 'Ward', 'City', 'Tole', 'Village', 'Homes', 'Rooms', 'Beds', 'Remarks',
    ]
    rows = []
    for index, record in enumerate(records, start=1):
        rows.append([
            index,
            get_value(record, 'name') or 'N/A',
            get_value(record, 'dhsr_no') or 'N/A',
            _display_type(record),
            str(get_value(record, 'status')).capitalize(),
            get_value(record, 'address.province') or 'N/A',
            get_value(record, 'address.district') or 'N/A',
            get_value(record, 'address.municipality') or 'N/A',
            get_value(record, 'address.ward') or 'N/A',
            get_value(record, 'address.city') or 'N/A',
            get_value(record, 'address.tole') or 'N/A',
            get_value(record, 'village_name') or 'N/A',
            _count(record, 'home_count'),
            _count(record, 'room_count'),
            _count(record, 'bed_count'),
            '',
        ])
    return headers, rows


def _service_ratings(records):
    headers = [
        'S.N.', 'Homestay Name', 'DHSR No', 'Type', 'District', 'Attractions',
        'Average Rating', 'Reviews', 'Status', 'Remarks',
    ]
    rows = []
    for index, record in enumerate(records, start=1):
        rating = get_value(record, 'average_rating') or 0
        rows.append([
            index,
            get_value(record, 'name') or 'N/A',
            get_value(record, 'dhsr_no') or 'N/A',
            _display_type(record),
            get_value(record, 'address.district') or 'N/A',
            format_attractions((record.get('features') or {}).get('local_attractions')),
            round(float(rating), 1),
            _count(record, 'review_count'),
            str(get_value(record, 'status')).capitalize(),
            '',
        ])
    return headers, rows


def _feature_report(records, feature, item_label):
    """One row per feature item; homestays without items get a single `None` row"""
    headers = [
        'S.N.', 'Homestay Name', 'DHSR No', 'Type', 'Formatted Address', item_label,
        'Homes', 'Rooms', 'Beds', 'Remarks',
    ]
    rows = []
    records = [
        r for r in records
        if get_value(r, 'name') and get_value(r, 'address.formatted_address')
    ]
    for index, record in enumerate(records, start=1):
        base = [
            index,
            get_value(record, 'name'),
            get_value(record, 'dhsr_no') or 'N/A',
            _display_type(record),
            get_value(record, 'address.formatted_address'),
        ]
        tail = [
            _count(record, 'home_count'),
            _count(record, 'room_count'),
            _count(record, 'bed_count'),
            '',
        ]
        items = (record.get('features') or {}).get(feature) or []
        if not items:
            rows.append(base + ['None'] + tail)
            continue
        for item in items:
            rows.append(base + [extract_bilingual_parts(item)['en']] + tail)
    return headers, rows


def project(records, report_type):
    """(headers, rows) of `report_type` for already filtered and sorted records"""
    config = get_report_type(report_type)
    if report_type == GEOGRAPHICAL:
        return _geographical(records)
    if report_type == SERVICE_RATINGS:
        return _service_ratings(records)
    return _feature_report(records, config['feature'], config['item_label'])
