"""Infrastructure connections (DB, Redis, cache, external APIs)."""

from ctrlaltvibe.infra.cache import (
    clear_all_caches,
    clear_session_cache,
    invalidate,
    invalidate_projects,
    session_cache,
)
from ctrlaltvibe.infra.postgresql import (
    close_db,
    get_engine,
    get_session,
    get_session_factory,
    init_db,
)
from ctrlaltvibe.infra.redis import close_redis, get_redis, init_redis, is_redis_available
from ctrlaltvibe.infra.redis_pubsub import (
    ChannelPublisher,
    ChannelSubscriber,
    notification_channel,
)

__all__ = [
    # Cache
    "session_cache",
    "clear_session_cache",
    "clear_all_caches",
    "invalidate",
    "invalidate_projects",
    # DB
    "init_db",
    "close_db",
    "get_engine",
    "get_session",
    "get_session_factory",
    # Redis
    "init_redis",
    "close_redis",
    "get_redis",
    "is_redis_available",
    "ChannelPublisher",
    "ChannelSubscriber",
    "notification_channel",
]
