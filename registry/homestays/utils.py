"""Homestay id/password generation and tenant scoping helpers"""
import random
import re
import secrets
import string
import time

from .models import Homestay, BILINGUAL_ADDRESS_PARTS

PASSWORD_CHARSET = string.ascii_letters + string.digits
PASSWORD_LENGTH = 10


def generate_homestay_id(name):
    """
    Build a homestay id from its name: the first 8 lowercase alphanumeric
    characters, a dash and a 6 digit timestamp suffix.
    """
    prefix = re.sub(r'[^a-z0-9]', '', (name or '').strip().lower())[:8] or 'homestay'
    homestay_id = f"{prefix}-{str(int(time.time() * 1000))[-6:]}"
    while Homestay.objects.filter(homestay_id=homestay_id).exists():
        homestay_id = f"{prefix}-{random.randint(0, 999999):06d}"
    return homestay_id


def generate_secure_password(length=PASSWORD_LENGTH):
    return ''.join(secrets.choice(PASSWORD_CHARSET) for _ in range(length))


def scope_homestays(user, queryset=None):
    """
    Restrict a homestay queryset to what `user` may see.

    Superadmins see everything, admins their own tenant, officers their
    parent admin's tenant. Anyone else sees nothing.
    """
    if queryset is None:
        queryset = Homestay.objects.all()
    if not user or not user.is_authenticated:
        return queryset.none()
    if user.is_superadmin:
        return queryset
    tenant = user.tenant_username
    if not tenant:
        return queryset.none()
    return queryset.filter(admin_username=tenant)


def can_access_homestay(user, homestay):
    if user.is_superadmin:
        return True
    tenant = user.tenant_username
    return bool(tenant) and homestay.admin_username == tenant


def flatten_address(address, lang):
    """Pick one language side of each bilingual address part, keeping the pairs under `translations`"""
    lang = 'en' if lang == 'en' else 'ne'
    flat = {part: (address.get(part) or {}).get(lang, '') for part in BILINGUAL_ADDRESS_PARTS}
    flat['city'] = address.get('city', '')
    flat['tole'] = address.get('tole', '')
    flat['translations'] = {part: address.get(part) for part in BILINGUAL_ADDRESS_PARTS}
    return flat


def paginate_params(params, default_limit=10, max_limit=100):
    """(page, limit) from query params; bad values fall back to defaults"""
    try:
        page = max(int(params.get('page', 1)), 1)
    except (TypeError, ValueError):
        page = 1
    try:
        limit = min(max(int(params.get('limit', default_limit)), 1), max_limit)
    except (TypeError, ValueError):
        limit = default_limit
    return page, limit
