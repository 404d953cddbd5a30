"""Time helpers shared by the engine."""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, matching what the store persists."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
