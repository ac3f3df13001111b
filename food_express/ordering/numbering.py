"""Human-facing order numbers like FE20261018000042."""
from __future__ import annotations

from datetime import datetime
from typing import Awaitable, Callable, Optional

from food_express.ordering.types import Clock, utcnow

SequenceSource = Callable[[], Awaitable[int]]


def format_order_number(prefix: str, when: datetime, seq: int) -> str:
    """``{prefix}{YYYYMMDD}{seq:06d}``; the date is cosmetic, uniqueness comes from *seq*."""
    return f"{prefix}{when:%Y%m%d}{seq:06d}"


class OrderNumberGenerator:
    """Allocate order numbers from a database sequence.

    ``nextval`` is atomic and never hands the same value to two callers, even
    across processes or when two orders are created in the same instant, and a
    value is never reused after a rollback. Numbers are unique but not gap-free.
    """

    def __init__(
        self,
        next_sequence_value: SequenceSource,
        *,
        prefix: str = "FE",
        clock: Optional[Clock] = None,
    ) -> None:
        self._next = next_sequence_value
        self._prefix = prefix
        self._clock = clock or utcnow

    async def next_order_number(self) -> str:
        seq = await self._next()
        return format_order_number(self._prefix, self._clock(), seq)
