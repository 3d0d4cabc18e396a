"""Tests for order totals, status transitions and stock reconciliation rules."""

import pytest

from services.order_service.lifecycle import (
    STATUS_TRANSITIONS,
    OrderStatus,
    can_transition,
    compute_shipping,
    compute_tax,
    compute_totals,
    ensure_transition,
    plan_reconciliation,
)
from shared.errors import BadRequestException, ErrorCode


class TestTotals:
    def test_subtotal_below_free_shipping(self):
        totals = compute_totals([(1, 4_000_000)])
        assert totals.subtotal == 4_000_000
        assert totals.tax == 400_000
        assert totals.shipping == 30_000
        assert totals.total == 4_430_000

    def test_subtotal_above_free_shipping(self):
        # (quantity, line subtotal) pairs
        totals = compute_totals([(2, 4_000_000), (1, 2_000_000)])
        assert totals.total_items == 3
        assert totals.subtotal == 6_000_000
        assert totals.tax == 600_000
        assert totals.shipping == 0
        assert totals.total == 6_600_000

    def test_shipping_threshold_is_exclusive(self):
        assert compute_shipping(5_000_000) == 30_000
        assert compute_shipping(5_000_001) == 0

    def test_tax_rounds_half_up(self):
        assert compute_tax(5) == 1
        assert compute_tax(15) == 2
        assert compute_tax(14) == 1
        assert compute_tax(0) == 0

    @pytest.mark.parametrize("subtotal", [0, 1, 99_999, 5_000_000, 5_000_001, 12_345_678])
    def test_total_is_sum_of_parts(self, subtotal):
        totals = compute_totals([(1, subtotal)])
        assert totals.total == totals.subtotal + totals.tax + totals.shipping


class TestTransitions:
    @pytest.mark.parametrize(
        "current,target",
        [
            ("pending", "processing"),
            ("pending", "cancelled"),
            ("processing", "delivered"),
            ("pending_refund", "refunded"),
        ],
    )
    def test_allowed(self, current, target):
        assert can_transition(current, target)
        ensure_transition(current, target)

    @pytest.mark.parametrize(
        "current,target",
        [
            ("pending", "delivered"),
            ("processing", "cancelled"),
            ("delivered", "pending_refund"),
            ("delivered", "refunded"),
            ("cancelled", "pending"),
            ("refunded", "pending"),
            ("pending", "pending"),
        ],
    )
    def test_rejected(self, current, target):
        assert not can_transition(current, target)
        with pytest.raises(BadRequestException) as exc_info:
            ensure_transition(current, target)
        assert exc_info.value.message == f"Cannot change status from {current} to {target}"
        assert exc_info.value.error_code == ErrorCode.INVALID_STATUS_TRANSITION

    def test_terminal_states_have_no_exits(self):
        assert STATUS_TRANSITIONS[OrderStatus.CANCELLED] == ()
        assert STATUS_TRANSITIONS[OrderStatus.REFUNDED] == ()


class TestReconciliation:
    items = [("product", 1, 2), ("product", 1, 3), ("product", 2, 1), ("pet", 7, 1)]

    def test_processing_reserves_pets_only(self):
        plan = plan_reconciliation("pending", "processing", self.items)
        assert plan.reserve_pets == [7]
        assert plan.restock == {}
        assert plan.release_pets == []

    def test_cancel_restocks_products_and_leaves_pets(self):
        plan = plan_reconciliation("pending", "cancelled", self.items)
        assert plan.restock == {1: 5, 2: 1}
        assert plan.reserve_pets == []
        assert plan.release_pets == []

    def test_refund_restocks_and_releases_pets(self):
        plan = plan_reconciliation("pending_refund", "refunded", self.items)
        assert plan.restock == {1: 5, 2: 1}
        assert plan.release_pets == [7]

    def test_delivery_changes_nothing(self):
        assert plan_reconciliation("processing", "delivered", self.items).is_empty
