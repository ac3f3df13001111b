"""Restaurant ORM model."""
from __future__ import annotations

import uuid
from decimal import Decimal
from typing import Any, List, Optional

from sqlalchemy import Boolean, Index, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import ARRAY, JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from food_express.infra.database.models.base import Base, TimestampMixin, _uuid_pk


class Restaurant(Base, TimestampMixin):
    """A restaurant listed in the catalog, owned by one restaurant-role user."""

    __tablename__ = "restaurants"
    __table_args__ = (
        Index("ix_restaurants_owner_id", "owner_id"),
        Index("ix_restaurants_is_active", "is_active"),
    )

    id: Mapped[uuid.UUID] = _uuid_pk()

    owner_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, server_default="")
    cuisine: Mapped[List[str]] = mapped_column(
        ARRAY(String), nullable=False, server_default="{}",
    )

    address: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False, default=dict)
    """{street, city, state, zipCode, coordinates?: {lat, lng}}"""

    contact: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False, default=dict)
    """{phone, email?, website?}"""

    delivery_minutes: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    """Typical courier time; falls back to the pricing policy default when NULL."""

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Counters maintained with atomic increments by the order engine
    total_orders: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_revenue: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0"),
    )
    rating_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rating_total: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    """Sum of ``overall`` scores; average = rating_total / rating_count."""

    @property
    def rating_average(self) -> float:
        if not self.rating_count:
            return 0.0
        return round(self.rating_total / self.rating_count, 2)
