"""
Client-facing timestamp layout: "YYYY-MM-DD HH:MM:SS" in APP_TIMEZONE.

Storage is timezone-aware UTC; conversion happens only at the API edge.
"""

from datetime import datetime, timezone
from typing import Optional

from app.config import settings

TIMESTAMP_LAYOUT = "%Y-%m-%d %H:%M:%S"


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parses a client timestamp into an aware UTC datetime.

    Empty or missing values mean "no timestamp" and return None.
    Raises ValueError when the layout does not match.
    """
    if value is None or not value.strip():
        return None
    local = datetime.strptime(value.strip(), TIMESTAMP_LAYOUT)
    return local.replace(tzinfo=settings.tzinfo).astimezone(timezone.utc)


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(settings.tzinfo).strftime(TIMESTAMP_LAYOUT)
