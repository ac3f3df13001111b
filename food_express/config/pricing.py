"""
food_express.config.pricing – pricing policy constants.

Env vars: TAX_RATE, FREE_DELIVERY_THRESHOLD, DELIVERY_FEE, SERVICE_FEE,
DEFAULT_DELIVERY_MINUTES, ORDER_NUMBER_PREFIX.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from food_express.config.env import env_int, env_setting

_PREFIX_PATTERN = re.compile(r"^[A-Z]{1,4}$")


def _decimal(value: object, name: str) -> Decimal:
    try:
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValueError(f"{name} must be a decimal number, got {value!r}") from None


@dataclass(frozen=True)
class PricingConfig:
    tax_rate: Decimal = Decimal("0.08")
    free_delivery_threshold: Decimal = Decimal("25.00")
    """Orders whose subtotal is strictly greater than this ship free."""

    delivery_fee: Decimal = Decimal("3.99")
    service_fee: Decimal = Decimal("0.00")

    default_delivery_minutes: int = 30
    """Used when the restaurant has no delivery estimate of its own."""

    order_number_prefix: str = "FE"

    def __post_init__(self) -> None:
        for name in ("tax_rate", "free_delivery_threshold", "delivery_fee", "service_fee"):
            value = getattr(self, name)
            if not isinstance(value, Decimal):
                raise ValueError(f"{name} must be a Decimal, got {type(value).__name__}")
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")
        if self.tax_rate >= 1:
            raise ValueError(f"tax_rate must be a fraction below 1, got {self.tax_rate}")
        if not isinstance(self.default_delivery_minutes, int) or self.default_delivery_minutes < 0:
            raise ValueError(
                f"default_delivery_minutes must be a non-negative integer, got {self.default_delivery_minutes!r}"
            )
        if not _PREFIX_PATTERN.match(self.order_number_prefix or ""):
            raise ValueError(
                f"order_number_prefix must be 1-4 uppercase letters, got {self.order_number_prefix!r}"
            )

    @classmethod
    def from_env(cls, **overrides: object) -> PricingConfig:
        money = {
            "tax_rate": ("TAX_RATE", "0.08"),
            "free_delivery_threshold": ("FREE_DELIVERY_THRESHOLD", "25.00"),
            "delivery_fee": ("DELIVERY_FEE", "3.99"),
            "service_fee": ("SERVICE_FEE", "0.00"),
        }
        prefix = env_setting(overrides, "order_number_prefix", "ORDER_NUMBER_PREFIX", "FE")
        return cls(
            default_delivery_minutes=env_int(
                overrides, "default_delivery_minutes", "DEFAULT_DELIVERY_MINUTES", 30,
            ),
            order_number_prefix=str(prefix).strip().upper(),
            **{
                attr: _decimal(env_setting(overrides, attr, env, default), env)
                for attr, (env, default) in money.items()
            },
        )


def load_pricing_config(**overrides: object) -> PricingConfig:
    return PricingConfig.from_env(**overrides)
