"""TTL caches for hot read paths.

Caches are grouped by invalidation tag. Any project mutation clears the
three project groups so feeds never outlive a write by more than a request.
Configuration via CacheConfig (CACHE_ env prefix).
"""

import logging

from cachetools import TTLCache

from ctrlaltvibe.app.config import get_settings
from ctrlaltvibe.core.logging_schema import LogEvent

logger = logging.getLogger(__name__)

_cache_config = get_settings().cache

# Cookie -> user id. Short TTL absorbs bursts of requests from one page load.
session_cache: TTLCache[str, str] = TTLCache(
    maxsize=_cache_config.maxsize, ttl=_cache_config.session_ttl
)
project_list_cache: TTLCache = TTLCache(
    maxsize=_cache_config.maxsize, ttl=_cache_config.list_ttl
)
featured_cache: TTLCache = TTLCache(
    maxsize=_cache_config.maxsize, ttl=_cache_config.featured_ttl
)
trending_cache: TTLCache = TTLCache(
    maxsize=_cache_config.maxsize, ttl=_cache_config.trending_ttl
)
tags_cache: TTLCache = TTLCache(maxsize=_cache_config.maxsize, ttl=_cache_config.tags_ttl)

PROJECTS_LIST = "projects:list"
PROJECTS_FEATURED = "projects:featured"
PROJECTS_TRENDING = "projects:trending"
TAGS = "tags"

_CACHE_GROUPS: dict[str, TTLCache] = {
    PROJECTS_LIST: project_list_cache,
    PROJECTS_FEATURED: featured_cache,
    PROJECTS_TRENDING: trending_cache,
    TAGS: tags_cache,
}

PROJECT_CACHE_TAGS = (PROJECTS_LIST, PROJECTS_FEATURED, PROJECTS_TRENDING)


def invalidate(*tags: str) -> None:
    """Clear every cache group named in `tags`. Unknown tags are ignored."""
    for tag in tags:
        cache = _CACHE_GROUPS.get(tag)
        if cache is None:
            continue
        cache.clear()
        logger.debug(
            "Cache group cleared",
            extra={"event": LogEvent.CACHE_INVALIDATED, "tag": tag},
        )


def invalidate_projects() -> None:
    """Invalidate all project feeds (list, featured, trending)."""
    invalidate(*PROJECT_CACHE_TAGS)


def clear_session_cache(session_id: str | None = None) -> None:
    if session_id is None:
        session_cache.clear()
    else:
        session_cache.pop(session_id, None)


def clear_all_caches() -> None:
    session_cache.clear()
    for cache in _CACHE_GROUPS.values():
        cache.clear()
