"""Order ORM model."""
from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    Sequence,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from food_express.infra.database.models.base import Base, TimestampMixin, _uuid_pk

ORDER_NUMBER_SEQ = Sequence("order_number_seq", start=1, metadata=Base.metadata)


class Order(Base, TimestampMixin):
    """A placed order. Never physically deleted by the normal lifecycle."""

    __tablename__ = "orders"
    __table_args__ = (
        Index("ix_orders_order_number", "order_number", unique=True),
        Index("ix_orders_customer_created", "customer_id", "created_at"),
        Index("ix_orders_restaurant_created", "restaurant_id", "created_at"),
        Index("ix_orders_status", "status"),
    )

    id: Mapped[uuid.UUID] = _uuid_pk()

    order_number: Mapped[str] = mapped_column(String(32), nullable=False)

    customer_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    restaurant_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("restaurants.id", ondelete="RESTRICT"),
        nullable=False,
    )
    driver_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), nullable=True)

    line_items: Mapped[List[dict[str, Any]]] = mapped_column(JSONB, nullable=False, default=list)
    """Snapshots taken at creation:
    ``{menuItemId, name, price, quantity, customizations: [{name, price}], specialInstructions, subtotal}``."""

    # Pricing (invariant: total = subtotal + tax + delivery_fee + service_fee + tip - discount)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    tax: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    delivery_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    service_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    discount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    tip: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    total: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    delivery_address: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False)

    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")
    # pending | confirmed | preparing | ready | pickedUp | onTheWay | delivered | cancelled

    payment_method: Mapped[str] = mapped_column(String(16), nullable=False)
    payment_status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")

    special_instructions: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    estimated_delivery_time: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    actual_delivery_time: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    tracking_history: Mapped[List[dict[str, Any]]] = mapped_column(
        JSONB, nullable=False, default=list,
    )
    """Append-only ``[{status, timestamp, note?}]``; one entry per status change after creation."""

    rating: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONB, nullable=True)
    cancellation: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONB, nullable=True)
    refund: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONB, nullable=True)

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}
