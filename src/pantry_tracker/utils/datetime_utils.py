"""Datetime utilities for timezone-aware UTC timestamps.

Usage:
    from pantry_tracker.utils.datetime_utils import utc_now

    # For SQLAlchemy Column defaults
    recorded_at = Column(DateTime, default=utc_now)
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime.

    This is the replacement for the deprecated datetime.utcnow().

    Returns:
        Current UTC datetime with timezone info
    """
    return datetime.now(timezone.utc)
