from prometheus_client import Counter, Histogram

# Business Metrics
ecomm_orders_created_total = Counter(
    "ecomm_orders_created_total",
    "Total orders successfully placed"
)

ecomm_order_failures_total = Counter(
    "ecomm_order_failures_total",
    "Order workflow operations that ended in a failure",
    ["operation", "reason"] # operation: 'create', 'cancel', 'update_status'
)

ecomm_order_create_duration_seconds = Histogram(
    "ecomm_order_create_duration_seconds",
    "Time spent placing an order, including stock reservation retries"
)

ecomm_stock_conflict_retries_total = Counter(
    "ecomm_stock_conflict_retries_total",
    "Order units of work re-run after a concurrent update was detected"
)

ecomm_order_cancellations_total = Counter(
    "ecomm_order_cancellations_total",
    "Total orders cancelled with stock restored"
)

ecomm_event_publish_failures_total = Counter(
    "ecomm_event_publish_failures_total",
    "Events that could not be handed to the broker",
    ["topic"]
)
