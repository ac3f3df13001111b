"""Tests for the order status state machine (food_express.ordering.lifecycle)."""
from __future__ import annotations

import unittest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4

from food_express.core.exceptions import (
    AlreadyRatedError,
    AlreadyRefundedError,
    InvalidRatingError,
    InvalidTransitionError,
    NotCancellableError,
    NotDeliverableError,
    OrderStateError,
    ValidationError,
)
from food_express.ordering import lifecycle
from food_express.ordering.types import STATUS_SEQUENCE, OrderStatus, Scores

NOW = datetime(2026, 10, 18, 12, 30, tzinfo=timezone.utc)


def _fake_order(**kwargs):
    defaults = {
        "id": uuid4(),
        "customer_id": uuid4(),
        "status": "pending",
        "tracking_history": [],
        "actual_delivery_time": None,
        "cancellation": None,
        "rating": None,
        "refund": None,
        "payment_status": "pending",
        "total": Decimal("27.73"),
    }
    defaults.update(kwargs)
    return SimpleNamespace(**defaults)


class TestCanTransition(unittest.TestCase):
    def test_forward_steps(self):
        for cur, nxt in zip(STATUS_SEQUENCE, STATUS_SEQUENCE[1:]):
            with self.subTest(cur=cur):
                self.assertTrue(lifecycle.can_transition(cur, nxt))

    def test_forward_skip_allowed(self):
        self.assertTrue(lifecycle.can_transition("pending", "ready"))

    def test_backward_and_same_rejected(self):
        self.assertFalse(lifecycle.can_transition("ready", "confirmed"))
        self.assertFalse(lifecycle.can_transition("ready", "ready"))

    def test_cancel_from_any_non_terminal(self):
        for status in STATUS_SEQUENCE[:-1]:
            with self.subTest(status=status):
                self.assertTrue(lifecycle.can_transition(status, "cancelled"))

    def test_nothing_leaves_terminal(self):
        for terminal in ("delivered", "cancelled"):
            for target in OrderStatus:
                self.assertFalse(lifecycle.can_transition(terminal, target))

    def test_unknown_status(self):
        with self.assertRaises(ValidationError):
            lifecycle.can_transition("pending", "teleported")


class TestEnsureTransition(unittest.TestCase):
    def test_allowed_moves_pass(self):
        lifecycle.ensure_transition("pending", "ready")
        lifecycle.ensure_transition("onTheWay", "cancelled")

    def test_back_to_pending(self):
        with self.assertRaises(InvalidTransitionError) as ctx:
            lifecycle.ensure_transition("confirmed", "pending")
        self.assertEqual(ctx.exception.details, {"from": "confirmed", "to": "pending"})

    def test_terminal_reported_first(self):
        with self.assertRaises(InvalidTransitionError) as ctx:
            lifecycle.ensure_transition("delivered", "cancelled")
        self.assertIn("already delivered", ctx.exception.message)


class TestAdvanceStatus(unittest.TestCase):
    def test_appends_tracking_entry(self):
        order = _fake_order()
        lifecycle.advance_status(order, "confirmed", NOW, note="accepted")
        self.assertEqual(order.status, "confirmed")
        self.assertEqual(
            order.tracking_history,
            [{"status": "confirmed", "timestamp": NOW.isoformat(), "note": "accepted"}],
        )

    def test_tracking_list_is_replaced_not_mutated(self):
        history = [{"status": "confirmed", "timestamp": NOW.isoformat()}]
        order = _fake_order(status="confirmed", tracking_history=history)
        lifecycle.advance_status(order, "preparing", NOW)
        self.assertIsNot(order.tracking_history, history)
        self.assertEqual(len(history), 1)
        self.assertEqual(len(order.tracking_history), 2)

    def test_delivered_stamps_delivery_time(self):
        order = _fake_order(status="onTheWay")
        lifecycle.advance_status(order, OrderStatus.DELIVERED, NOW)
        self.assertEqual(order.actual_delivery_time, NOW)

    def test_backward_raises(self):
        order = _fake_order(status="ready")
        with self.assertRaises(InvalidTransitionError):
            lifecycle.advance_status(order, "preparing", NOW)
        self.assertEqual(order.status, "ready")
        self.assertEqual(order.tracking_history, [])

    def test_terminal_raises(self):
        order = _fake_order(status="delivered")
        with self.assertRaises(InvalidTransitionError) as ctx:
            lifecycle.advance_status(order, "cancelled", NOW)
        self.assertIsInstance(ctx.exception, OrderStateError)

    def test_cancelled_target_records_cancellation(self):
        order = _fake_order(status="preparing")
        lifecycle.advance_status(order, "cancelled", NOW, note="out of stock", actor_role="restaurant")
        self.assertEqual(order.status, "cancelled")
        self.assertEqual(order.cancellation["cancelledBy"], "restaurant")
        self.assertEqual(order.cancellation["reason"], "out of stock")


class TestCancel(unittest.TestCase):
    def test_cancel_pending(self):
        order = _fake_order()
        lifecycle.cancel(order, "  changed my mind ", "customer", NOW)
        self.assertEqual(order.status, "cancelled")
        self.assertEqual(
            order.cancellation,
            {"reason": "changed my mind", "cancelledBy": "customer", "cancelledAt": NOW.isoformat()},
        )
        self.assertEqual(order.tracking_history[-1]["status"], "cancelled")
        self.assertEqual(order.payment_status, "pending")

    def test_cannot_cancel_delivered(self):
        with self.assertRaises(NotCancellableError):
            lifecycle.cancel(_fake_order(status="delivered"), "late", "customer", NOW)

    def test_cannot_cancel_twice(self):
        order = _fake_order()
        lifecycle.cancel(order, "", "customer", NOW)
        with self.assertRaises(NotCancellableError):
            lifecycle.cancel(order, "", "customer", NOW)


class TestRate(unittest.TestCase):
    def test_rate_delivered(self):
        order = _fake_order(status="delivered")
        lifecycle.rate(order, Scores(5, 4, 5), " great ", NOW)
        self.assertEqual(
            order.rating,
            {"food": 5, "delivery": 4, "overall": 5, "comment": "great", "ratedAt": NOW.isoformat()},
        )

    def test_rate_undelivered(self):
        with self.assertRaises(NotDeliverableError):
            lifecycle.rate(_fake_order(status="onTheWay"), Scores(5, 5, 5), None, NOW)

    def test_rate_twice(self):
        order = _fake_order(status="delivered")
        lifecycle.rate(order, Scores(3, 3, 3), None, NOW)
        with self.assertRaises(AlreadyRatedError):
            lifecycle.rate(order, Scores(5, 5, 5), None, NOW)

    def test_scores_out_of_range(self):
        for scores in (Scores(0, 3, 3), Scores(3, 6, 3), Scores(3, 3, 4.5), Scores(True, 3, 3), Scores("5", 3, 3)):
            with self.subTest(scores=scores):
                order = _fake_order(status="delivered")
                with self.assertRaises(InvalidRatingError):
                    lifecycle.rate(order, scores, None, NOW)
                self.assertIsNone(order.rating)

    def test_not_delivered_checked_before_scores(self):
        with self.assertRaises(NotDeliverableError):
            lifecycle.rate(_fake_order(status="pending"), Scores(9, 9, 9), None, NOW)


class TestRecordRefund(unittest.TestCase):
    def test_refund_cancelled_order(self):
        order = _fake_order(status="cancelled")
        lifecycle.record_refund(order, "27.73", "cancelled by restaurant", "admin", NOW)
        self.assertEqual(order.refund["amount"], "27.73")
        self.assertEqual(order.payment_status, "refunded")
        self.assertEqual(order.status, "cancelled")

    def test_refund_only_once(self):
        order = _fake_order(status="delivered")
        lifecycle.record_refund(order, 5, None, "admin", NOW)
        with self.assertRaises(AlreadyRefundedError):
            lifecycle.record_refund(order, 5, None, "admin", NOW)

    def test_refund_requires_terminal_order(self):
        with self.assertRaises(InvalidTransitionError):
            lifecycle.record_refund(_fake_order(status="preparing"), 5, None, "admin", NOW)

    def test_refund_amount_bounds(self):
        for amount in (0, "-1", "27.74"):
            with self.subTest(amount=amount):
                with self.assertRaises(ValidationError):
                    lifecycle.record_refund(_fake_order(status="cancelled"), amount, None, "admin", NOW)


class TestEstimateDeliveryTime(unittest.TestCase):
    def test_slowest_item_plus_delivery(self):
        eta = lifecycle.estimate_delivery_time(NOW, [10, 25, 15], 30)
        self.assertEqual(eta, NOW + timedelta(minutes=55))

    def test_no_prep_times(self):
        self.assertEqual(lifecycle.estimate_delivery_time(NOW, [], 20), NOW + timedelta(minutes=20))


if __name__ == "__main__":
    unittest.main()
