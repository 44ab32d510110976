"""Redis PUB/SUB channels for realtime notification delivery.

Channel pattern: {notify_prefix}:{user_id} (e.g. cav:notify:01J...)
Messages are JSON-encoded notifications. PUB/SUB has no durability:
clients that are not connected simply miss the push and read the
notification list on their next request.
"""

import logging

import redis.asyncio as redis

from ctrlaltvibe.app.config import get_settings

logger = logging.getLogger(__name__)

_channel_config = get_settings().redis_channel


def notification_channel(user_id: str) -> str:
    """Get PUB/SUB channel name for a user's notifications."""
    return f"{_channel_config.notify_prefix}:{user_id}"


class ChannelPublisher:
    """Publishes payloads to PUB/SUB channels."""

    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    async def publish(self, channel: str, payload: str) -> int:
        """Publish payload to a channel.

        Returns the number of subscribers that received the message.
        """
        count = await self._client.publish(channel, payload)
        logger.debug("Published to %s (subscribers=%d)", channel, count)
        return count


class ChannelSubscriber:
    """Subscribes to a single PUB/SUB channel."""

    def __init__(self, client: redis.Redis) -> None:
        self._client = client
        self._pubsub: redis.client.PubSub | None = None
        self._channel: str | None = None

    async def subscribe(self, channel: str) -> None:
        self._channel = channel
        self._pubsub = self._client.pubsub()
        await self._pubsub.subscribe(channel)
        logger.info("Subscribed to %s", channel)

    async def unsubscribe(self) -> None:
        """Unsubscribe and close PubSub connection."""
        if self._pubsub:
            try:
                await self._pubsub.unsubscribe()
                await self._pubsub.aclose()
            except Exception as e:
                logger.warning("Error closing pubsub: %s", e)
            self._pubsub = None
        self._channel = None

    async def get_message(self, timeout: float = 0.0) -> str | None:
        """Read one payload from the channel, or None if nothing arrived."""
        if not self._pubsub or not self._channel:
            return None

        msg = await self._pubsub.get_message(
            ignore_subscribe_messages=True,
            timeout=timeout,
        )
        if msg and msg["type"] == "message":
            return msg["data"]
        return None
