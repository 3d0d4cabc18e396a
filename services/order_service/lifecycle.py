"""
Order lifecycle rules: status transitions, totals and stock reconciliation.

Everything here is pure. The order service loads the order, asks this module
what is allowed and what has to change, then applies the result inside a
single database transaction.
"""
import enum
from collections import Counter
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Tuple

from shared.errors import BadRequestException, ErrorCode

TAX_RATE = Decimal("0.10")
FREE_SHIPPING_THRESHOLD = 5_000_000  # VND
SHIPPING_FEE = 30_000  # VND


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"
    PENDING_REFUND = "pending_refund"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


# Staff/admin status updates. Refund requests enter PENDING_REFUND through
# their own customer endpoint (see REFUND_REQUEST_STATUSES).
STATUS_TRANSITIONS: Dict[OrderStatus, Tuple[OrderStatus, ...]] = {
    OrderStatus.PENDING: (OrderStatus.PROCESSING, OrderStatus.CANCELLED),
    OrderStatus.PROCESSING: (OrderStatus.DELIVERED,),
    OrderStatus.DELIVERED: (),
    OrderStatus.PENDING_REFUND: (OrderStatus.REFUNDED,),
    OrderStatus.CANCELLED: (),
    OrderStatus.REFUNDED: (),
}

CANCELLABLE_STATUSES = (OrderStatus.PENDING,)
REFUND_REQUEST_STATUSES = (OrderStatus.DELIVERED, OrderStatus.PENDING_REFUND)
REVIEWABLE_STATUSES = (OrderStatus.DELIVERED,)
# Paid orders in these states count towards revenue reports
REVENUE_STATUSES = (OrderStatus.PROCESSING, OrderStatus.DELIVERED, OrderStatus.REFUNDED)


@dataclass(frozen=True)
class OrderTotals:
    total_items: int
    subtotal: int
    tax: int
    shipping: int
    total: int


def compute_tax(subtotal: int) -> int:
    """10% tax, rounded half up to the nearest dong."""
    return int((Decimal(subtotal) * TAX_RATE).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def compute_shipping(subtotal: int) -> int:
    return 0 if subtotal > FREE_SHIPPING_THRESHOLD else SHIPPING_FEE


def compute_totals(lines: Iterable[Tuple[int, int]]) -> OrderTotals:
    """Aggregates (quantity, line subtotal) pairs into the order totals."""
    total_items = 0
    subtotal = 0
    for quantity, line_subtotal in lines:
        total_items += quantity
        subtotal += line_subtotal

    tax = compute_tax(subtotal)
    shipping = compute_shipping(subtotal)
    return OrderTotals(
        total_items=total_items,
        subtotal=subtotal,
        tax=tax,
        shipping=shipping,
        total=subtotal + tax + shipping,
    )


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in STATUS_TRANSITIONS.get(OrderStatus(current), ())


def ensure_transition(current: OrderStatus, target: OrderStatus):
    current, target = OrderStatus(current), OrderStatus(target)
    if not can_transition(current, target):
        raise BadRequestException(
            f"Cannot change status from {current.value} to {target.value}",
            ErrorCode.INVALID_STATUS_TRANSITION,
        )


@dataclass
class StockReconciliation:
    """Catalog changes implied by a status change."""

    restock: Dict[int, int] = field(default_factory=dict)  # product id -> quantity
    reserve_pets: List[int] = field(default_factory=list)
    release_pets: List[int] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.restock or self.reserve_pets or self.release_pets)


def plan_reconciliation(
    current: OrderStatus,
    target: OrderStatus,
    items: Iterable[Tuple[str, int, int]],
) -> StockReconciliation:
    """
    Works out stock and pet availability changes for moving an order from
    `current` to `target`. `items` yields (item type, item id, quantity).

    Product stock is taken when the order is created and pets are only
    reserved once processing starts, so a pending cancellation returns
    product stock and leaves pets alone.
    """
    current, target = OrderStatus(current), OrderStatus(target)
    items = list(items)
    plan = StockReconciliation()

    def product_quantities() -> Dict[int, int]:
        restock = Counter()
        for item_type, item_id, quantity in items:
            if item_type == "product":
                restock[item_id] += quantity
        return dict(restock)

    def pet_ids() -> List[int]:
        return [item_id for item_type, item_id, _ in items if item_type == "pet"]

    if current == OrderStatus.PENDING and target == OrderStatus.PROCESSING:
        plan.reserve_pets = pet_ids()
    elif current == OrderStatus.PENDING and target == OrderStatus.CANCELLED:
        plan.restock = product_quantities()
    elif target == OrderStatus.REFUNDED:
        plan.restock = product_quantities()
        plan.release_pets = pet_ids()

    return plan
