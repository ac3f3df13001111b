"""Order status state machine.

Pure functions over an order-like object. They mutate the object in place
and never touch persistence; the service flushes the result under the
order's optimistic version check.

Expected attributes: ``status``, ``tracking_history``, ``actual_delivery_time``,
``cancellation``, ``rating``, ``refund``, ``payment_status``, ``total``.
"""
from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional, Union

from food_express.core.exceptions import (
    AlreadyRatedError,
    AlreadyRefundedError,
    InvalidRatingError,
    InvalidTransitionError,
    NotCancellableError,
    NotDeliverableError,
    ValidationError,
)
from food_express.ordering.pricing import round_money, to_decimal
from food_express.ordering.types import (
    STATUS_SEQUENCE,
    TERMINAL_STATUSES,
    OrderStatus,
    PaymentStatus,
    Scores,
)

RATING_MIN = 1
RATING_MAX = 5

StatusLike = Union[OrderStatus, str]


def parse_status(value: StatusLike) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        raise ValidationError(
            f"Unknown order status {value!r}",
            details={"allowed": [s.value for s in OrderStatus]},
        ) from None


def is_terminal(status: StatusLike) -> bool:
    return parse_status(status) in TERMINAL_STATUSES


def can_transition(current: StatusLike, target: StatusLike) -> bool:
    """Forward along STATUS_SEQUENCE (skipping allowed) or to cancelled; never out of a terminal state."""
    cur = parse_status(current)
    tgt = parse_status(target)
    if cur in TERMINAL_STATUSES:
        return False
    if tgt is OrderStatus.CANCELLED:
        return True
    return STATUS_SEQUENCE.index(tgt) > STATUS_SEQUENCE.index(cur)


def ensure_transition(current: StatusLike, target: StatusLike) -> None:
    """Raise InvalidTransitionError unless *current* may move to *target*."""
    cur = parse_status(current)
    tgt = parse_status(target)
    if cur in TERMINAL_STATUSES:
        raise InvalidTransitionError(
            f"Order is already {cur.value}",
            details={"from": cur.value, "to": tgt.value},
        )
    if not can_transition(cur, tgt):
        raise InvalidTransitionError(
            f"Cannot move order from {cur.value} to {tgt.value}",
            details={"from": cur.value, "to": tgt.value},
        )


def _append_tracking(order: Any, status: OrderStatus, now: datetime, note: Optional[str]) -> None:
    entry: Dict[str, Any] = {"status": status.value, "timestamp": now.isoformat()}
    if note:
        entry["note"] = note
    # reassign so the ORM sees the JSONB column as changed
    order.tracking_history = [*(order.tracking_history or []), entry]


def advance_status(
    order: Any,
    new_status: StatusLike,
    now: datetime,
    *,
    note: Optional[str] = None,
    actor_role: Optional[str] = None,
) -> Any:
    """Move *order* to *new_status*.

    Raises InvalidTransitionError when the order is terminal or the target is
    not ahead of the current status. ``cancelled`` is routed through cancel()
    so the cancellation record is always written.
    """
    target = parse_status(new_status)
    ensure_transition(order.status, target)
    if target is OrderStatus.CANCELLED:
        return cancel(order, note or "", actor_role or "unknown", now)

    order.status = target.value
    _append_tracking(order, target, now, note)
    if target is OrderStatus.DELIVERED:
        order.actual_delivery_time = now
    return order


def cancel(order: Any, reason: str, cancelled_by: str, now: datetime) -> Any:
    current = parse_status(order.status)
    if current in (OrderStatus.DELIVERED, OrderStatus.CANCELLED):
        raise NotCancellableError(
            f"Cannot cancel an order that is {current.value}",
            details={"status": current.value},
        )
    order.status = OrderStatus.CANCELLED.value
    order.cancellation = {
        "reason": (reason or "").strip(),
        "cancelledBy": cancelled_by,
        "cancelledAt": now.isoformat(),
    }
    _append_tracking(order, OrderStatus.CANCELLED, now, reason or None)
    return order


def _check_score(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not RATING_MIN <= value <= RATING_MAX:
        raise InvalidRatingError(
            f"{name} rating must be an integer between {RATING_MIN} and {RATING_MAX}",
            details={"field": name, "value": value},
        )
    return value


def rate(order: Any, scores: Scores, comment: Optional[str], now: datetime) -> Any:
    if parse_status(order.status) is not OrderStatus.DELIVERED:
        raise NotDeliverableError(
            "Only delivered orders can be rated",
            details={"status": order.status},
        )
    if order.rating:
        raise AlreadyRatedError("Order has already been rated")

    checked = {name: _check_score(name, value) for name, value in scores.as_dict().items()}
    order.rating = {
        **checked,
        "comment": (comment or "").strip() or None,
        "ratedAt": now.isoformat(),
    }
    return order


def record_refund(
    order: Any,
    amount: Any,
    reason: Optional[str],
    refunded_by: str,
    now: datetime,
) -> Any:
    """Record a refund on a terminal order. Settable once; does not change status."""
    current = parse_status(order.status)
    if current not in TERMINAL_STATUSES:
        raise InvalidTransitionError(
            "Refunds can only be recorded on delivered or cancelled orders",
            details={"status": current.value},
        )
    if order.refund:
        raise AlreadyRefundedError("Order has already been refunded")

    value = round_money(to_decimal(amount, "amount"))
    total = Decimal(str(order.total))
    if value <= 0 or value > total:
        raise ValidationError(
            "Refund amount must be positive and not exceed the order total",
            details={"amount": str(value), "total": str(total)},
        )
    order.refund = {
        "amount": str(value),
        "reason": (reason or "").strip() or None,
        "refundedBy": refunded_by,
        "refundedAt": now.isoformat(),
    }
    order.payment_status = PaymentStatus.REFUNDED.value
    return order


def estimate_delivery_time(
    now: datetime,
    preparation_minutes: Iterable[int],
    delivery_minutes: int,
) -> datetime:
    """now + slowest line preparation time + delivery estimate."""
    prep = max((m for m in preparation_minutes if m), default=0)
    return now + timedelta(minutes=prep + max(delivery_minutes, 0))
