"""Core data structures for the ordering layer."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple
from uuid import UUID

from food_express.core.exceptions import ValidationError

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OrderStatus(str, Enum):
    """Order lifecycle states. Declaration order is the forward sequence."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    PICKED_UP = "pickedUp"
    ON_THE_WAY = "onTheWay"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


STATUS_SEQUENCE: Tuple[OrderStatus, ...] = (
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
    OrderStatus.READY,
    OrderStatus.PICKED_UP,
    OrderStatus.ON_THE_WAY,
    OrderStatus.DELIVERED,
)
"""Forward path; ``cancelled`` sits outside it and is reachable from any non-terminal state."""

TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})


class PaymentMethod(str, Enum):
    CARD = "card"
    CASH = "cash"
    DIGITAL_WALLET = "digital-wallet"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class Role(str, Enum):
    """Closed set of actor roles."""
    CUSTOMER = "customer"
    RESTAURANT = "restaurant"
    DELIVERY = "delivery"
    ADMIN = "admin"


@dataclass(frozen=True)
class Actor:
    """Whoever is calling the engine: an authenticated user id plus one role."""
    id: UUID
    role: Role


@dataclass
class LineRequest:
    """One requested cart line, before the catalog is consulted."""
    menu_item_id: UUID
    quantity: int
    customizations: List[str] = field(default_factory=list)
    """Names of selected customization options."""
    special_instructions: str = ""

    def validate(self, index: int) -> None:
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int) or self.quantity < 1:
            raise ValidationError(
                "Quantity must be an integer of at least 1",
                details={"line": index, "quantity": self.quantity},
            )
        if len(set(self.customizations)) != len(self.customizations):
            raise ValidationError(
                "Customization selected more than once",
                details={"line": index, "customizations": list(self.customizations)},
            )


@dataclass
class DeliveryAddress:
    street: str
    city: str
    state: str
    zip_code: str
    instructions: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None

    def validate(self) -> None:
        missing = [
            name for name in ("street", "city", "state", "zip_code")
            if not (getattr(self, name) or "").strip()
        ]
        if missing:
            raise ValidationError(
                "Delivery address is incomplete",
                details={"missing": missing},
            )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "street": self.street.strip(),
            "city": self.city.strip(),
            "state": self.state.strip(),
            "zipCode": self.zip_code.strip(),
        }
        if self.instructions:
            out["instructions"] = self.instructions
        if self.lat is not None and self.lng is not None:
            out["coordinates"] = {"lat": self.lat, "lng": self.lng}
        return out


@dataclass(frozen=True)
class Scores:
    food: Any
    delivery: Any
    overall: Any

    def as_dict(self) -> Dict[str, Any]:
        return {"food": self.food, "delivery": self.delivery, "overall": self.overall}


@dataclass(frozen=True)
class PricedLine:
    """A cart line after catalog lookup: authoritative prices, ready for the calculator."""
    unit_price: Decimal
    quantity: int
    customization_prices: Tuple[Decimal, ...] = ()
