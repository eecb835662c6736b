"""
Calendar busy-time projection and storage.

External calendars deliver concrete busy periods (absolute instants over
the next few weeks). They are folded onto the weekly clock:

1. each period is converted into the profile's timezone and walked in
   15-minute slots (96 per day, 672 per week)
2. a slot counts as busy when it is busy in at least CANONICAL_MIN_WEEKS_BUSY
   distinct ISO weeks, so one-off events do not block a recurring slot
3. adjacent busy slots on the same day are merged into "[start,end)" ranges

Stored busy blocks are replaced wholesale on every sync.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Set, Tuple

from django.conf import settings
from django.db import transaction

from .models import CalendarBusyBlock, CalendarConnection
from .normalizer import (
    MINUTES_PER_DAY,
    CanonicalInterval,
    format_canonical_range,
    parse_canonical_range,
    parse_canonical_ranges,
)
from .timezones import get_safe_timezone

logger = logging.getLogger(__name__)

SLOT_MINUTES = 15
SLOTS_PER_DAY = MINUTES_PER_DAY // SLOT_MINUTES
TOTAL_SLOTS = 7 * SLOTS_PER_DAY


@dataclass(frozen=True)
class BusyPeriod:
    start: datetime
    end: datetime


def _min_weeks_busy() -> int:
    return settings.MESHIT.get('CANONICAL_MIN_WEEKS_BUSY', 2)


def project_to_canonical_week(periods: Iterable[BusyPeriod], tz_name: str,
                              min_weeks: int = None) -> List[str]:
    """Fold concrete busy periods into recurring weekly busy ranges."""
    if min_weeks is None:
        min_weeks = _min_weeks_busy()
    tz = get_safe_timezone(tz_name)
    step = timedelta(minutes=SLOT_MINUTES)

    slot_weeks: Dict[int, Set[Tuple[int, int]]] = {}
    for period in periods:
        cursor = period.start.astimezone(tz)
        end = period.end.astimezone(tz)
        while cursor < end:
            minute_of_day = cursor.hour * 60 + cursor.minute
            slot = cursor.weekday() * SLOTS_PER_DAY + minute_of_day // SLOT_MINUTES
            iso = cursor.isocalendar()
            slot_weeks.setdefault(slot, set()).add((iso[0], iso[1]))
            cursor += step

    busy_slots = sorted(slot for slot, weeks in slot_weeks.items() if len(weeks) >= min_weeks)
    return [format_canonical_range(interval) for interval in _merge_slots(busy_slots)]


def _merge_slots(slots: List[int]) -> List[CanonicalInterval]:
    """Merge sorted slot indices into intervals without crossing day boundaries."""
    intervals = []
    range_start = range_end = None
    for slot in slots:
        start = slot * SLOT_MINUTES
        end = start + SLOT_MINUTES
        same_day = range_start is not None and range_start // MINUTES_PER_DAY == start // MINUTES_PER_DAY
        if range_start is not None and start == range_end and same_day:
            range_end = end
            continue
        if range_start is not None:
            intervals.append(CanonicalInterval(range_start, range_end))
        range_start, range_end = start, end
    if range_start is not None:
        intervals.append(CanonicalInterval(range_start, range_end))
    return intervals


def store_busy_blocks(connection: CalendarConnection, ranges: Iterable[str]) -> int:
    """Replace every stored busy block of the connection; returns the new count."""
    valid = [text for text in ranges if parse_canonical_range(text) is not None]
    with transaction.atomic():
        CalendarBusyBlock.objects.filter(connection=connection).delete()
        CalendarBusyBlock.objects.bulk_create([
            CalendarBusyBlock(
                connection=connection,
                profile_id=connection.profile_id,
                canonical_range=text,
            )
            for text in valid
        ])
    return len(valid)


def sync_connection(connection: CalendarConnection, periods: Iterable[BusyPeriod]) -> List[str]:
    """
    Project and store busy time for one connection, tracking sync status.

    Any failure marks the connection as errored and is re-raised.
    """
    connection.mark_status(CalendarConnection.SyncStatus.SYNCING)
    try:
        ranges = project_to_canonical_week(list(periods), connection.profile.timezone)
        count = store_busy_blocks(connection, ranges)
    except Exception as e:
        logger.error(f"Calendar sync failed for connection {connection.pk}: {e}")
        connection.mark_status(CalendarConnection.SyncStatus.ERROR, str(e))
        raise
    connection.mark_status(CalendarConnection.SyncStatus.SYNCED)
    logger.info(f"Synced {count} busy ranges for connection {connection.pk}")
    return ranges


def busy_intervals_for_profiles(profile_ids: Iterable) -> List[CanonicalInterval]:
    """All stored busy intervals of the given profiles; malformed rows are skipped."""
    ranges = CalendarBusyBlock.objects.filter(
        profile_id__in=list(profile_ids)
    ).values_list('canonical_range', flat=True)
    return parse_canonical_ranges(ranges)
