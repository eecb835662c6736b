"""
IANA timezone lookups for profile timezones.

A bad stored value degrades to UTC with a warning rather than failing the
request that needed the conversion.
"""

import logging
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)


def validate_timezone(tz: str) -> bool:
    if not tz or not isinstance(tz, str):
        return False
    try:
        ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


def get_safe_timezone(tz: str) -> ZoneInfo:
    """ZoneInfo for tz, or UTC when tz is not a known zone."""
    if validate_timezone(tz):
        return ZoneInfo(tz)
    logger.warning(f"Invalid timezone '{tz}', falling back to UTC")
    return ZoneInfo('UTC')
