"""
Cache for the public homestay detail payload.

Detail pages are read far more often than homestays change, so the serialized
public detail (homestay + officials + contacts) is cached per homestay_id and
dropped whenever the homestay or one of its officials/contacts changes.
"""
from django.core.cache import cache
import logging

logger = logging.getLogger(__name__)

HOMESTAY_DETAIL_KEY_PREFIX = 'homestay_detail:'

# Public detail: 10 minutes
HOMESTAY_DETAIL_CACHE_TTL = 600


def get_homestay_detail_cache_key(homestay_id: str) -> str:
    return f"{HOMESTAY_DETAIL_KEY_PREFIX}{homestay_id}"


def get_cached_homestay_detail(homestay_id: str):
    cached_data = cache.get(get_homestay_detail_cache_key(homestay_id))
    if cached_data is not None:
        logger.debug(f"Cache hit for homestay detail: {homestay_id}")
    return cached_data


def cache_homestay_detail(homestay_id: str, data, ttl: int = None):
    cache.set(get_homestay_detail_cache_key(homestay_id), data, ttl or HOMESTAY_DETAIL_CACHE_TTL)
    logger.debug(f"Cached homestay detail: {homestay_id}")


def invalidate_homestay_detail(homestay_id: str):
    if not homestay_id:
        return
    cache.delete(get_homestay_detail_cache_key(homestay_id))
    logger.debug(f"Invalidated homestay detail cache: {homestay_id}")
