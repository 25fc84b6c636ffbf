"""
Caching utilities for expensive aggregate queries
Uses Redis (django-redis) in production, local memory otherwise
"""
from django.core.cache import cache
from functools import wraps
import hashlib
import logging

logger = logging.getLogger(__name__)

# Cache TTLs (in seconds)
AGENT_STATS_CACHE_TTL = 300  # 5 minutes

AGENT_STATS_CACHE_KEY = "agent_stats"


def make_cache_key(prefix, *args, **kwargs):
    """Generate a unique cache key from arguments"""
    if not args and not kwargs:
        return prefix
    key_data = f"{prefix}:{args}:{sorted(kwargs.items())}"
    # Hash it to keep key length reasonable
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"{prefix}:{key_hash}"


def cached_query(cache_ttl=60, key_prefix="query"):
    """
    Decorator to cache expensive queries

    Usage:
        @cached_query(cache_ttl=300, key_prefix="agent_stats")
        def compute_agent_stats():
            return data
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            cache_key = make_cache_key(key_prefix, *args, **kwargs)

            cached_data = cache.get(cache_key)
            if cached_data is not None:
                logger.debug(f"Cache HIT for {key_prefix}: {cache_key}")
                return cached_data

            logger.debug(f"Cache MISS for {key_prefix}: {cache_key}")
            result = func(*args, **kwargs)
            cache.set(cache_key, result, cache_ttl)
            return result
        wrapper.cache_key_prefix = key_prefix
        return wrapper
    return decorator


def invalidate_cache_pattern(pattern):
    """
    Invalidate all cache keys matching a pattern
    Note: This requires Redis with SCAN command support; other backends
    only drop the exact key.
    """
    cache.delete(pattern)
    try:
        from django_redis import get_redis_connection
        redis_conn = get_redis_connection("default")
    except Exception as e:
        logger.debug(f"Pattern invalidation unavailable for {pattern}: {str(e)}")
        return

    try:
        keys = []
        cursor = 0
        while True:
            cursor, partial_keys = redis_conn.scan(cursor, match=f"*{pattern}*", count=100)
            keys.extend(partial_keys)
            if cursor == 0:
                break

        if keys:
            redis_conn.delete(*keys)
            logger.info(f"Invalidated {len(keys)} cache keys matching pattern: {pattern}")
    except Exception as e:
        logger.warning(f"Could not invalidate cache pattern {pattern}: {str(e)}")


def invalidate_agent_stats_cache():
    """Invalidate cached agent statistics"""
    invalidate_cache_pattern(AGENT_STATS_CACHE_KEY)
    logger.info("Invalidated agent stats cache")
