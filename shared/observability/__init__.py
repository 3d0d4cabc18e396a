from .setup import setup_observability
from .metrics import (
    ecomm_orders_created_total,
    ecomm_checkout_duration_seconds,
    ecomm_order_status_transitions_total,
    ecomm_payment_gateway_requests_total,
    ecomm_payment_callbacks_total
)
