"""
iCal feed parsing.

Extracts timed VEVENTs from an .ics document as busy periods. All-day
events carry no time of day and are skipped. Floating times (no TZID, no
UTC marker) are read in the fallback timezone.
"""

import logging
from datetime import date, datetime
from typing import List

from icalendar import Calendar

from .calendar import BusyPeriod
from .timezones import get_safe_timezone

logger = logging.getLogger(__name__)


class ICalParseError(ValueError):
    pass


def _as_aware(value, tz):
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=tz)
    return None


def parse_ical_busy(content, fallback_tz: str = 'UTC') -> List[BusyPeriod]:
    """Busy periods of every timed event in the feed, sorted by start."""
    try:
        calendar = Calendar.from_ical(content)
    except ValueError as e:
        raise ICalParseError(f"Invalid iCal document: {e}") from e

    tz = get_safe_timezone(fallback_tz)
    periods = []
    for event in calendar.walk('VEVENT'):
        dtstart = event.get('dtstart')
        dtend = event.get('dtend')
        if dtstart is None or dtend is None:
            continue
        if isinstance(dtstart.dt, date) and not isinstance(dtstart.dt, datetime):
            continue
        start, end = _as_aware(dtstart.dt, tz), _as_aware(dtend.dt, tz)
        if start is None or end is None or end <= start:
            continue
        periods.append(BusyPeriod(start, end))

    logger.debug(f"Parsed {len(periods)} busy periods from iCal feed")
    return sorted(periods, key=lambda p: p.start)
