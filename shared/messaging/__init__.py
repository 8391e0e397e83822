from .cache import CacheService, get_cache
from .publisher import (
    ORDER_CANCELLED,
    ORDER_CREATED,
    ORDER_STATUS_UPDATED,
    PRODUCT_CREATED,
    PRODUCT_DELETED,
    PRODUCT_UPDATED,
    EventPublisher,
    get_event_publisher,
)
from .redis_client import close_redis, get_redis
