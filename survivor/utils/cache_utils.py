"""
Reference-data caching

Only the team list is cached. Standings, picks and availability are always
read from the database. Cached keys are tracked per prefix so a team change
drops exactly the entries it affects, on SimpleCache and Redis alike.
"""

import functools
import logging

from flask import request

from survivor import cache

logger = logging.getLogger(__name__)

TEAMS_PREFIX = "teams"


def _registry_key(prefix):
    return f"keys:{prefix}"


def make_cache_key(prefix):
    """Key for the current request: prefix, path and sorted query string"""
    query = "&".join(f"{k}={v}" for k, v in sorted(request.args.items(multi=True)))
    return f"{prefix}:{request.path}?{query}"


def _remember(prefix, key):
    keys = cache.get(_registry_key(prefix)) or []
    if key not in keys:
        cache.set(_registry_key(prefix), keys + [key], timeout=0)


def cached_route(timeout=300, key_prefix="view"):
    """
    Cache the JSON-serializable payload a view returns

    Args:
        timeout: Seconds before the entry expires
        key_prefix: Group name used for invalidation
    """

    def decorator(f):
        @functools.wraps(f)
        def wrapped(*args, **kwargs):
            key = make_cache_key(key_prefix)

            payload = cache.get(key)
            if payload is not None:
                logger.debug(f"Cache hit for {key}")
                return payload

            payload = f(*args, **kwargs)
            cache.set(key, payload, timeout=timeout)
            _remember(key_prefix, key)
            logger.debug(f"Cached {key} for {timeout}s")
            return payload

        return wrapped

    return decorator


def invalidate_prefix(prefix):
    """Drop every cached entry recorded under a prefix"""
    keys = cache.get(_registry_key(prefix)) or []
    if keys:
        cache.delete_many(*keys)
    cache.delete(_registry_key(prefix))
    logger.info(f"Invalidated {len(keys)} cached entries for {prefix}")
    return len(keys)


def invalidate_teams_cache():
    return invalidate_prefix(TEAMS_PREFIX)
