"""
Order event channel.

Services publish to a closed set of topics; the real-time feeds subscribe to
them. Delivery is best-effort and at-most-once: nothing is persisted and a
subscriber that is not connected when an event is published never sees it.
"""
import asyncio
import enum
import json
from collections import defaultdict
from functools import lru_cache
from typing import Any, Dict, Set

import redis.asyncio as aioredis

from food_delivery.config import settings
from food_delivery.utils.logging import get_logger

logger = get_logger(__name__)


class Topic(str, enum.Enum):
    NEW_PENDING_ORDER = "NEW_PENDING_ORDER"
    NEW_COOKED_ORDER = "NEW_COOKED_ORDER"
    NEW_ORDER_UPDATES = "NEW_ORDER_UPDATES"


class Subscription:
    """Async iterator over the payloads of one topic. Call close() when done."""

    def __aiter__(self):
        return self

    async def __anext__(self) -> Dict[str, Any]:
        raise NotImplementedError

    async def close(self) -> None:
        raise NotImplementedError


class PubSub:
    """Outbound port of the order service."""

    async def publish(self, topic: Topic, payload: Dict[str, Any]) -> None:
        raise NotImplementedError

    async def subscribe(self, topic: Topic) -> Subscription:
        raise NotImplementedError

    async def close(self) -> None:
        pass


# --- in-process backend ---

class _QueueSubscription(Subscription):
    def __init__(self, owner: "InMemoryPubSub", topic: Topic):
        self._owner = owner
        self._topic = topic
        self._queue: asyncio.Queue = asyncio.Queue()

    async def __anext__(self) -> Dict[str, Any]:
        return await self._queue.get()

    async def close(self) -> None:
        self._owner._subscribers[self._topic].discard(self)


class InMemoryPubSub(PubSub):
    """
    Single-process backend. Every subscriber has its own queue, so publish
    never waits for a consumer.
    """

    def __init__(self):
        self._subscribers: Dict[Topic, Set[_QueueSubscription]] = defaultdict(set)

    async def publish(self, topic: Topic, payload: Dict[str, Any]) -> None:
        for subscription in list(self._subscribers[topic]):
            subscription._queue.put_nowait(payload)

    async def subscribe(self, topic: Topic) -> Subscription:
        subscription = _QueueSubscription(self, topic)
        self._subscribers[topic].add(subscription)
        return subscription

    def subscriber_count(self, topic: Topic) -> int:
        return len(self._subscribers[topic])


# --- redis backend ---

class _RedisSubscription(Subscription):
    def __init__(self, pubsub):
        self._pubsub = pubsub
        self._messages = pubsub.listen()

    async def __anext__(self) -> Dict[str, Any]:
        while True:
            message = await self._messages.__anext__()
            if message.get("type") == "message":
                return json.loads(message["data"])

    async def close(self) -> None:
        await self._pubsub.unsubscribe()
        await self._pubsub.aclose()


class RedisPubSub(PubSub):
    """Redis pub/sub backend, shared by every worker. Payloads travel as JSON."""

    def __init__(self, url: str | None = None, prefix: str | None = None):
        self.redis = aioredis.from_url(url or settings.REDIS_URL, decode_responses=True)
        self.prefix = settings.PUBSUB_PREFIX if prefix is None else prefix

    def channel(self, topic: Topic) -> str:
        return f"{self.prefix}{topic.value}"

    async def publish(self, topic: Topic, payload: Dict[str, Any]) -> None:
        await self.redis.publish(self.channel(topic), json.dumps(payload))

    async def subscribe(self, topic: Topic) -> Subscription:
        pubsub = self.redis.pubsub(ignore_subscribe_messages=True)
        await pubsub.subscribe(self.channel(topic))
        logger.info(f"Subscribed to redis channel {self.channel(topic)}")
        return _RedisSubscription(pubsub)

    async def close(self) -> None:
        await self.redis.aclose()


@lru_cache
def get_pubsub() -> PubSub:
    """Process-wide event channel chosen by PUBSUB_BACKEND."""
    backend = settings.PUBSUB_BACKEND.lower()
    if backend == "redis":
        return RedisPubSub()
    if backend == "memory":
        return InMemoryPubSub()
    raise ValueError(f"Unknown PUBSUB_BACKEND: {settings.PUBSUB_BACKEND}")
