"""
Service logger: rotating file (JSON) + console.

Usage:
    from food_express.core.logger import configure, get_logger, LoggerConfig

    # Configure once at startup (LoggerConfig.from_env() if omitted)
    configure(LoggerConfig(level="DEBUG", log_dir="/var/log/food_express"))

    logger = get_logger(__name__)
    logger.info("Order placed", extra={"order_number": "FE20261018000042"})
"""
from food_express.core.logger.config import LoggerConfig
from food_express.core.logger.formatters import JsonFormatter, PlainConsoleFormatter
from food_express.core.logger.setup import configure, get_logger

__all__ = [
    "LoggerConfig",
    "JsonFormatter",
    "PlainConsoleFormatter",
    "configure",
    "get_logger",
]
