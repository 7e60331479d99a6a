"""
Static address lookup tables.

Three JSON files under ``settings.ADDRESS_DATA_DIR`` describe the address
hierarchy: ``provinces.json`` is a list of ``{en, ne}`` names,
``districts.json`` maps a province's English name to its districts and
``municipalities.json`` maps a district's English name to its municipalities.
Files are read once per process.
"""
import json
import logging
import re
from functools import lru_cache
from pathlib import Path

from django.conf import settings

logger = logging.getLogger(__name__)

PROVINCE = 'province'
DISTRICT = 'district'
MUNICIPALITY = 'municipality'
LEVELS = (PROVINCE, DISTRICT, MUNICIPALITY)

DEVANAGARI_DIGITS = str.maketrans('०१२३४५६७८९', '0123456789')

_WHITESPACE_RE = re.compile(r'\s+')


@lru_cache(maxsize=None)
def _load(filename):
    path = Path(settings.ADDRESS_DATA_DIR) / filename
    try:
        with open(path, encoding='utf-8') as fh:
            return json.load(fh)
    except FileNotFoundError:
        logger.warning(f"Address data file not found: {path}")
        return [] if filename == 'provinces.json' else {}


def clear_cache():
    """Forget loaded tables (tests point ADDRESS_DATA_DIR elsewhere)"""
    _load.cache_clear()
    _entries.cache_clear()


def _clean(value):
    return _WHITESPACE_RE.sub(' ', str(value or '')).strip()


@lru_cache(maxsize=None)
def _entries(level):
    """Every known {en, ne} pair for a level"""
    if level == PROVINCE:
        return tuple((p['en'], p['ne']) for p in _load('provinces.json'))
    filename = 'districts.json' if level == DISTRICT else 'municipalities.json'
    pairs = []
    for children in _load(filename).values():
        pairs.extend((c['en'], c['ne']) for c in children)
    return tuple(pairs)


def find(value, level):
    """Return the (en, ne) pair whose either side matches value exactly, or None"""
    cleaned = _clean(value)
    if not cleaned:
        return None
    for en, ne in _entries(level):
        if cleaned in (en, _clean(ne)) or cleaned.lower() == en.lower():
            return en, ne
    return None


def provinces():
    return [dict(p) for p in _load('provinces.json')]


def districts_for(province):
    match = find(province, PROVINCE)
    if not match:
        return []
    return [dict(d) for d in _load('districts.json').get(match[0], [])]


def municipalities_for(district):
    match = find(district, DISTRICT)
    if not match:
        return []
    return [dict(m) for m in _load('municipalities.json').get(match[0], [])]


def translate(value, level):
    """
    English name for a (usually Nepali) address value.

    Tries an exact match, then the whitespace-normalized value, then a
    substring match in either direction. Unknown values come back unchanged.
    """
    if not value:
        return ''
    match = find(value, level)
    if match:
        return match[0]
    cleaned = _clean(value)
    for en, ne in _entries(level):
        ne_clean = _clean(ne)
        if ne_clean and (ne_clean in cleaned or cleaned in ne_clean):
            return en
    return value


def bilingual(value, level):
    """{en, ne} pair for a value given in either language"""
    if not value:
        return {'en': '', 'ne': ''}
    match = find(value, level)
    if match:
        return {'en': match[0], 'ne': match[1]}
    english = translate(value, level)
    return {'en': english, 'ne': value}


def translate_ward(ward):
    """Convert Devanagari digits in a ward number to ASCII digits"""
    if ward is None:
        return ''
    return str(ward).translate(DEVANAGARI_DIGITS)
