from prometheus_client import Counter, Histogram

# Business Metrics
ecomm_orders_created_total = Counter(
    "ecomm_orders_created_total",
    "Total orders created",
    ["payment_method"]  # Labels: 'cod', 'zalopay'
)

ecomm_checkout_duration_seconds = Histogram(
    "ecomm_checkout_duration_seconds",
    "Order creation duration in seconds"
)

ecomm_order_status_transitions_total = Counter(
    "ecomm_order_status_transitions_total",
    "Order status transitions applied",
    ["from_status", "to_status"]
)

ecomm_payment_gateway_requests_total = Counter(
    "ecomm_payment_gateway_requests_total",
    "Payment orders requested from the gateway",
    ["status"]  # Labels: 'success', 'failed'
)

ecomm_payment_callbacks_total = Counter(
    "ecomm_payment_callbacks_total",
    "Payment gateway callbacks received",
    ["result"]  # Labels: 'paid', 'invalid_mac'
)
