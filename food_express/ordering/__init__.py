"""
food_express.ordering – order lifecycle engine: pricing, status machine,
order numbers and access control. Pure domain code; persistence lives in
food_express.infra.database and orchestration in food_express.services.
"""
from food_express.ordering.access import AccessPolicy, Capability
from food_express.ordering.numbering import OrderNumberGenerator, format_order_number
from food_express.ordering.pricing import Pricing, calculate_pricing, price_line, round_money
from food_express.ordering.types import (
    STATUS_SEQUENCE,
    TERMINAL_STATUSES,
    Actor,
    DeliveryAddress,
    LineRequest,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    PricedLine,
    Role,
    Scores,
)

__all__ = [
    "AccessPolicy",
    "Capability",
    "OrderNumberGenerator",
    "format_order_number",
    "Pricing",
    "calculate_pricing",
    "price_line",
    "round_money",
    "STATUS_SEQUENCE",
    "TERMINAL_STATUSES",
    "Actor",
    "DeliveryAddress",
    "LineRequest",
    "OrderStatus",
    "PaymentMethod",
    "PaymentStatus",
    "PricedLine",
    "Role",
    "Scores",
]
