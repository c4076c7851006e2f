"""
General helper functions.
"""

import secrets
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Naive UTC now, matching how timestamps are written to the database."""
    return datetime.utcnow()


def as_naive_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a datetime read back from the database to naive UTC.

    PostgreSQL returns aware values for ``timestamptz`` columns while SQLite
    returns naive ones; comparisons need one form.
    """
    if dt is None:
        return None
    if dt.tzinfo is not None:
        return dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def generate_numeric_code(digits: int) -> str:
    """
    Generate a cryptographically random numeric code without a leading zero.

    Args:
        digits: Number of digits

    Returns:
        Code as a string of exactly ``digits`` characters
    """
    low = 10 ** (digits - 1)
    return str(low + secrets.randbelow(9 * low))
