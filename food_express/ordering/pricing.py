"""Pricing calculator: line subtotals, tax, fees, tip and discount.

All arithmetic uses ``Decimal``. Line subtotals are exact; each pricing
component is rounded half-up to cents exactly once, after aggregation, and
the total is derived from the rounded components so that

    total == subtotal + tax + delivery_fee + service_fee + tip - discount

holds on the stored values.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, Union

from food_express.config.pricing import PricingConfig
from food_express.core.exceptions import ValidationError
from food_express.ordering.types import PricedLine

CENT = Decimal("0.01")
ZERO = Decimal("0")

Money = Union[Decimal, int, float, str]


def to_decimal(value: Money, name: str = "amount") -> Decimal:
    if isinstance(value, float):
        # floats carry binary drift; go through repr so 12.99 stays 12.99
        value = repr(value)
    try:
        result = Decimal(value)
    except (ArithmeticError, ValueError, TypeError):
        raise ValidationError(f"{name} is not a valid amount", details={name: str(value)}) from None
    if not result.is_finite():
        raise ValidationError(f"{name} is not a valid amount", details={name: str(value)})
    return result


def round_money(value: Decimal) -> Decimal:
    """Round half-up to two decimal places."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def price_line(line: PricedLine) -> Decimal:
    """unit_price * quantity + sum(customization prices) * quantity, unrounded."""
    extras = sum(line.customization_prices, ZERO)
    return line.unit_price * line.quantity + extras * line.quantity


@dataclass(frozen=True)
class Pricing:
    subtotal: Decimal
    tax: Decimal
    delivery_fee: Decimal
    service_fee: Decimal
    discount: Decimal
    tip: Decimal
    total: Decimal

    def check_invariant(self) -> bool:
        expected = (
            self.subtotal + self.tax + self.delivery_fee + self.service_fee + self.tip - self.discount
        )
        return self.total == expected and self.total >= 0

    def to_dict(self) -> Dict[str, Decimal]:
        return asdict(self)


def calculate_pricing(
    line_subtotals: Iterable[Decimal],
    policy: PricingConfig,
    *,
    tip: Money = ZERO,
    discount: Money = ZERO,
) -> Pricing:
    """Aggregate exact line subtotals into a rounded ``Pricing`` record.

    Delivery is free only when the subtotal strictly exceeds the policy
    threshold. The discount is clamped so the total never goes negative.
    """
    tip_d = to_decimal(tip, "tip")
    discount_d = to_decimal(discount, "discount")
    if tip_d < 0:
        raise ValidationError("Tip cannot be negative", details={"tip": str(tip_d)})
    if discount_d < 0:
        raise ValidationError("Discount cannot be negative", details={"discount": str(discount_d)})

    raw_subtotal = sum(line_subtotals, ZERO)
    raw_tax = raw_subtotal * policy.tax_rate
    raw_delivery = ZERO if raw_subtotal > policy.free_delivery_threshold else policy.delivery_fee

    subtotal = round_money(raw_subtotal)
    tax = round_money(raw_tax)
    delivery_fee = round_money(raw_delivery)
    service_fee = round_money(policy.service_fee)
    tip_r = round_money(tip_d)

    ceiling = subtotal + tax + delivery_fee + service_fee + tip_r
    discount_r = min(round_money(discount_d), ceiling)

    return Pricing(
        subtotal=subtotal,
        tax=tax,
        delivery_fee=delivery_fee,
        service_fee=service_fee,
        discount=discount_r,
        tip=tip_r,
        total=ceiling - discount_r,
    )
