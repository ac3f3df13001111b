"""MenuItem ORM model."""
from __future__ import annotations

import uuid
from decimal import Decimal
from typing import Any, List

from sqlalchemy import Boolean, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import ARRAY, JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from food_express.infra.database.models.base import Base, TimestampMixin, _uuid_pk


class MenuItem(Base, TimestampMixin):
    """A dish on a restaurant's menu. The authoritative source of price and availability."""

    __tablename__ = "menu_items"
    __table_args__ = (
        Index("ix_menu_items_restaurant_id", "restaurant_id"),
        Index("ix_menu_items_category", "category"),
    )

    id: Mapped[uuid.UUID] = _uuid_pk()

    restaurant_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("restaurants.id", ondelete="CASCADE"),
        nullable=False,
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, server_default="")
    category: Mapped[str] = mapped_column(String(32), nullable=False)

    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_popular: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    preparation_time: Mapped[int] = mapped_column(Integer, nullable=False, default=15)
    """Minutes."""

    customization_options: Mapped[List[dict[str, Any]]] = mapped_column(
        JSONB, nullable=False, default=list,
    )
    """Priced add-ons: ``[{"name": "Extra cheese", "price": "1.50"}, ...]``."""

    allergens: Mapped[List[str]] = mapped_column(
        ARRAY(String), nullable=False, server_default="{}",
    )
