"""
Fire-and-forget event notifications over Redis Pub/Sub.

Delivery is best effort (at-most-once): a failed publish is logged and counted, never
raised, because the triggering transaction has already committed.
"""
import json

import redis.asyncio as aioredis
import structlog

from shared.observability import ecomm_event_publish_failures_total

from .redis_client import get_redis

logger = structlog.get_logger(__name__)

ORDER_CREATED = "order.created"
ORDER_STATUS_UPDATED = "order.status.updated"
ORDER_CANCELLED = "order.cancelled"
PRODUCT_CREATED = "product.created"
PRODUCT_UPDATED = "product.updated"
PRODUCT_DELETED = "product.deleted"


class EventPublisher:
    def __init__(self, redis: aioredis.Redis):
        self.redis = redis

    async def publish(self, topic: str, payload: dict) -> None:
        try:
            message = json.dumps(payload, default=str)
            receivers = await self.redis.publish(topic, message)
        except Exception:
            # The caller has already committed; nothing raised here may reach it.
            ecomm_event_publish_failures_total.labels(topic=topic).inc()
            logger.exception("event_publish_failed", topic=topic)
            return
        logger.debug("event_published", topic=topic, receivers=receivers)


def get_event_publisher() -> EventPublisher:
    return EventPublisher(get_redis())
