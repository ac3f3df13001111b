"""
food_express.infra.database.models – SQLAlchemy 2.0 ORM models.

Exports Base, mixins, and all model classes.
"""
from food_express.infra.database.models.base import Base, TimestampMixin, _uuid_pk
from food_express.infra.database.models.menu_item import MenuItem
from food_express.infra.database.models.order import ORDER_NUMBER_SEQ, Order
from food_express.infra.database.models.restaurant import Restaurant

__all__ = [
    "Base",
    "TimestampMixin",
    "_uuid_pk",
    "Restaurant",
    "MenuItem",
    "Order",
    "ORDER_NUMBER_SEQ",
]
