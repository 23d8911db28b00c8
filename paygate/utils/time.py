"""Time utilities."""
from datetime import UTC, datetime


def utcnow() -> datetime:
    """Return current UTC time with timezone awareness."""

    return datetime.now(tz=UTC)


def epoch_millis() -> int:
    """Return the current Unix time in milliseconds."""

    return int(utcnow().timestamp() * 1000)


__all__ = ["utcnow", "epoch_millis"]
