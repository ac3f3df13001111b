"""
food_express.config.app – application-scoped configuration.

Built once at startup, stored on ``app.state.config`` and passed by reference
to services. Env vars: CORS_ORIGINS, ORDER_RATE_LIMIT plus those of the nested configs.
"""
from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from typing import Tuple

from food_express.config.env import env_setting
from food_express.config.postgres import PostgresConfig, load_postgres_config
from food_express.config.pricing import PricingConfig, load_pricing_config

_DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000"
DEFAULT_ORDER_RATE_LIMIT = "20/minute"

# "20/minute", "100 per hour", "5/10 seconds"
_RATE_LIMIT_PATTERN = re.compile(
    r"^\d+\s*(/|\s+per\s+)\s*(\d+\s+)?(second|minute|hour|day|month|year)s?$",
    re.IGNORECASE,
)


def cors_origins_from_env() -> Tuple[str, ...]:
    raw = os.environ.get("CORS_ORIGINS", _DEFAULT_CORS_ORIGINS)
    return tuple(o.strip() for o in raw.split(",") if o.strip())


@dataclass(frozen=True)
class AppConfig:
    postgres: PostgresConfig = field(default_factory=PostgresConfig)
    pricing: PricingConfig = field(default_factory=PricingConfig)
    cors_origins: Tuple[str, ...] = ("http://localhost:3000", "http://127.0.0.1:3000")

    order_rate_limit: str = DEFAULT_ORDER_RATE_LIMIT
    """Per-client limit on order placement, in slowapi notation."""

    def __post_init__(self) -> None:
        if not _RATE_LIMIT_PATTERN.match(self.order_rate_limit.strip()):
            raise ValueError(
                f"ORDER_RATE_LIMIT must look like '20/minute', got {self.order_rate_limit!r}"
            )

    @classmethod
    def from_env(cls, **overrides: object) -> AppConfig:
        return cls(
            postgres=load_postgres_config(),
            pricing=load_pricing_config(),
            cors_origins=cors_origins_from_env(),
            order_rate_limit=str(env_setting(
                overrides, "order_rate_limit", "ORDER_RATE_LIMIT", DEFAULT_ORDER_RATE_LIMIT,
            )).strip(),
        )


def load_app_config(**overrides: object) -> AppConfig:
    return AppConfig.from_env(**overrides)
