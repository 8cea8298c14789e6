"""Wall-clock source shared by request signing and the exchange info cache."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from binancekit.errors import ClockError

# Returns the current instant; must be timezone-aware.
Clock = Callable[[], datetime]

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def utc_now() -> datetime:
    """Default clock."""
    return datetime.now(UTC)


def since_epoch(instant: datetime) -> timedelta:
    """Duration between the epoch and ``instant``.

    Raises:
        ClockError: If ``instant`` is naive or before the epoch.
    """
    if instant.tzinfo is None or instant.utcoffset() is None:
        raise ClockError("Clock returned a naive datetime")
    elapsed = instant - EPOCH
    if elapsed < timedelta(0):
        raise ClockError(f"Clock is before the epoch: {instant.isoformat()}")
    return elapsed


def timestamp_ms(clock: Clock | None = None) -> int:
    """Milliseconds since the epoch, truncated."""
    instant = (clock or utc_now)()
    return since_epoch(instant) // timedelta(milliseconds=1)
