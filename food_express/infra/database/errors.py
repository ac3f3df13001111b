"""Translate SQLAlchemy/driver failures into service error kinds.

StaleDataError (optimistic version mismatch) and unique violations become
ConflictError; timeouts and dropped connections become TransientError.
Everything else propagates untouched.
"""
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm.exc import StaleDataError

from food_express.core.exceptions import ConflictError, TransientError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def translate_db_errors(operation: str) -> AsyncIterator[None]:
    try:
        yield
    except StaleDataError as exc:
        logger.warning("%s: concurrent update lost (%s)", operation, exc)
        raise ConflictError(
            "The order was modified concurrently; reload and try again",
            details={"operation": operation},
            cause=exc,
        ) from exc
    except IntegrityError as exc:
        logger.warning("%s: integrity violation (%s)", operation, exc.orig)
        raise ConflictError(
            "Conflicting write rejected by the database",
            details={"operation": operation},
            cause=exc,
        ) from exc
    except (OperationalError, PoolTimeoutError, asyncio.TimeoutError) as exc:
        logger.error("%s: database unavailable (%s)", operation, exc.__class__.__name__)
        raise TransientError(
            "Database temporarily unavailable",
            details={"operation": operation},
            cause=exc,
        ) from exc
    except DBAPIError as exc:
        if exc.connection_invalidated:
            logger.error("%s: database connection dropped", operation)
            raise TransientError(
                "Database connection lost",
                details={"operation": operation},
                cause=exc,
            ) from exc
        raise
