"""
Web content and navigation documents.

Documents are created from the defaults on first read. Whole-document
updates are deep-merged into the stored document; section updates replace
one section.
"""
import copy
import logging

from django.contrib.auth import get_user_model
from django.db import transaction

from .defaults import DEFAULT_ADMIN_USERNAME, DEFAULT_WEB_CONTENT, DEFAULT_NAVIGATION, SECTIONS
from .models import WebContent, Navigation

logger = logging.getLogger(__name__)


class UnknownSection(ValueError):
    pass


def deep_merge(base, updates):
    """Merge `updates` into a copy of `base`; nested dicts merge, everything else replaces"""
    result = copy.deepcopy(base)
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def _tenant(admin_username):
    return (admin_username or DEFAULT_ADMIN_USERNAME).strip().lower()


def tenant_exists(admin_username):
    """Whether content may be kept for this tenant: the shared default or an active admin"""
    tenant = _tenant(admin_username)
    if tenant == DEFAULT_ADMIN_USERNAME:
        return True
    User = get_user_model()
    return User.objects.filter(username=tenant, role=User.ROLE_ADMIN, is_active=True).exists()


def get_web_content(admin_username=None):
    obj, created = WebContent.objects.get_or_create(
        admin_username=_tenant(admin_username),
        defaults={'content': copy.deepcopy(DEFAULT_WEB_CONTENT)},
    )
    if created:
        logger.info(f"Created default web content for {obj.admin_username}")
    return obj


def get_section(admin_username, section):
    if section not in SECTIONS:
        raise UnknownSection(f'Unknown section: {section}')
    return get_web_content(admin_username).content.get(section, copy.deepcopy(DEFAULT_WEB_CONTENT[section]))


def update_web_content(admin_username, data, section=None):
    if not isinstance(data, (dict, list)):
        raise ValueError('Content must be an object')
    with transaction.atomic():
        obj = get_web_content(admin_username)
        if section:
            if section not in SECTIONS:
                raise UnknownSection(f'Unknown section: {section}')
            content = copy.deepcopy(obj.content)
            content[section] = data
        else:
            if not isinstance(data, dict):
                raise ValueError('Content must be an object')
            unknown = [key for key in data if key not in SECTIONS]
            if unknown:
                raise UnknownSection(f'Unknown section: {", ".join(unknown)}')
            content = deep_merge(obj.content, data)
        obj.content = content
        obj.save(update_fields=['content', 'updated_at'])
    return obj


def reset_web_content(admin_username=None):
    obj = get_web_content(admin_username)
    obj.content = copy.deepcopy(DEFAULT_WEB_CONTENT)
    obj.save(update_fields=['content', 'updated_at'])
    logger.info(f"Reset web content for {obj.admin_username}")
    return obj


def get_navigation(admin_username, nav_type):
    if nav_type not in DEFAULT_NAVIGATION:
        raise UnknownSection(f'Unknown navigation type: {nav_type}')
    obj, _ = Navigation.objects.get_or_create(
        admin_username=_tenant(admin_username), nav_type=nav_type,
        defaults={'content': copy.deepcopy(DEFAULT_NAVIGATION[nav_type])},
    )
    return obj


def update_navigation(admin_username, nav_type, data):
    if not isinstance(data, dict):
        raise ValueError('Navigation must be an object')
    obj = get_navigation(admin_username, nav_type)
    obj.content = deep_merge(obj.content, data)
    obj.save(update_fields=['content', 'updated_at'])
    return obj
