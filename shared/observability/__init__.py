from .setup import configure_logging, setup_observability
from .metrics import (
    ecomm_orders_created_total,
    ecomm_order_failures_total,
    ecomm_order_create_duration_seconds,
    ecomm_stock_conflict_retries_total,
    ecomm_order_cancellations_total,
    ecomm_event_publish_failures_total
)
