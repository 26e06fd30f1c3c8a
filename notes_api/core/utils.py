"""
Core Utilities.

Shared utility functions used across the application.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-naive datetime.

    All datetime values in the application are timezone-naive and assumed
    to be UTC. Note timestamps and cursors rely on this so that values
    round-trip through the database and JSON unchanged.

    Returns:
        Current UTC time with tzinfo stripped
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)
