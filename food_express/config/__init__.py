"""
Service config: load from env.

Load from env: load_app_config(), load_postgres_config(), load_pricing_config().
"""
from food_express.config.app import AppConfig, cors_origins_from_env, load_app_config
from food_express.config.postgres import PostgresConfig, load_postgres_config
from food_express.config.pricing import PricingConfig, load_pricing_config

__all__ = [
    "AppConfig",
    "load_app_config",
    "cors_origins_from_env",
    "PostgresConfig",
    "load_postgres_config",
    "PricingConfig",
    "load_pricing_config",
]
