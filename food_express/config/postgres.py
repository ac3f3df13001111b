"""
food_express.config.postgres – the order store's PostgreSQL settings.

Env vars: DATABASE_URL, DB_POOL_SIZE, DB_MAX_OVERFLOW, DB_POOL_TIMEOUT,
DB_POOL_RECYCLE, DB_STATEMENT_TIMEOUT_MS, DB_ECHO, DB_APPLICATION_NAME.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from food_express.config.env import env_bool, env_int, env_setting

_SCHEMES = ("postgresql://", "postgres://", "postgresql+asyncpg://")
_DEFAULT_URL = "postgresql://localhost/food_express"

# attr -> minimum accepted value
_INT_LIMITS = {
    "pool_size": 1,
    "max_overflow": 0,
    "pool_timeout": 1,
    "pool_recycle": 1,
    "statement_timeout_ms": 0,
}


@dataclass(frozen=True)
class PostgresConfig:
    url: str = _DEFAULT_URL

    pool_size: int = 10
    max_overflow: int = 20
    pool_timeout: int = 30
    """Seconds to wait for a pooled connection; running out surfaces as TransientError."""
    pool_recycle: int = 1800

    statement_timeout_ms: int = 5000
    """Server-side cap on every statement; 0 disables. A timed-out read or write is a TransientError."""

    echo: bool = False
    application_name: str = "food-express-orders"

    def __post_init__(self) -> None:
        if not isinstance(self.url, str) or not self.url.strip().startswith(_SCHEMES):
            raise ValueError(f"DATABASE_URL must be a postgresql:// DSN, got {self.url!r}")
        for name, minimum in _INT_LIMITS.items():
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
                raise ValueError(f"{name} must be an integer >= {minimum}, got {value!r}")
        if not isinstance(self.echo, bool):
            raise ValueError("echo must be a boolean")
        if not self.application_name.strip():
            raise ValueError("application_name must be a non-empty string")

    @property
    def async_url(self) -> str:
        """The DSN with the asyncpg driver selected."""
        _, _, rest = self.url.strip().partition("://")
        return f"postgresql+asyncpg://{rest}"

    def server_settings(self) -> Dict[str, str]:
        """Session parameters sent on every new asyncpg connection."""
        settings = {"application_name": self.application_name, "jit": "off"}
        if self.statement_timeout_ms:
            settings["statement_timeout"] = str(self.statement_timeout_ms)
        return settings

    @classmethod
    def from_env(cls, **overrides: object) -> PostgresConfig:
        """Overrides (keyword args) take precedence over env."""
        ints = {
            "pool_size": ("DB_POOL_SIZE", 10),
            "max_overflow": ("DB_MAX_OVERFLOW", 20),
            "pool_timeout": ("DB_POOL_TIMEOUT", 30),
            "pool_recycle": ("DB_POOL_RECYCLE", 1800),
            "statement_timeout_ms": ("DB_STATEMENT_TIMEOUT_MS", 5000),
        }
        return cls(
            url=str(env_setting(overrides, "url", "DATABASE_URL", _DEFAULT_URL)).strip(),
            echo=env_bool(overrides, "echo", "DB_ECHO", False),
            application_name=str(env_setting(
                overrides, "application_name", "DB_APPLICATION_NAME", "food-express-orders",
            )),
            **{attr: env_int(overrides, attr, env, default) for attr, (env, default) in ints.items()},
        )


def load_postgres_config(**overrides: object) -> PostgresConfig:
    return PostgresConfig.from_env(**overrides)
