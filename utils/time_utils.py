"""
Naive UTC timestamps, matching the DateTime columns in models/.
"""
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current UTC time without tzinfo (columns are stored naive)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
