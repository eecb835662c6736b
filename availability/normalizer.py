"""
Availability Window Normalizer

Every availability representation is reduced to canonical intervals: half-open
integer ranges [start, end) on a weekly minute clock where

    value = day_of_week * 1440 + minute_of_day     (Monday = 0)

so the whole week spans [0, 10080).

Supported inputs:
- Quick-mode selections (day keys x night/morning/afternoon/evening buckets)
- Recurring windows (day_of_week, start_minutes, end_minutes)
- Specific-date windows (absolute UTC instants, converted in the owner's timezone)
- Calendar busy-block range strings such as "[2040,2100)"

Recurring windows that cross midnight (end <= start) are split into two
intervals only when SPLIT_MIDNIGHT_WINDOWS is enabled; otherwise they are
rejected as invalid.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Union

from django.conf import settings

from .timezones import get_safe_timezone

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 1440
DAYS_PER_WEEK = 7
MINUTES_PER_WEEK = MINUTES_PER_DAY * DAYS_PER_WEEK

QUICK_MODE_BUCKETS = {
    'night': (0, 360),
    'morning': (360, 720),
    'afternoon': (720, 1080),
    'evening': (1080, 1440),
}

DAY_KEYS = ('mon', 'tue', 'wed', 'thu', 'fri', 'sat', 'sun')
DAY_MAP = {key: index for index, key in enumerate(DAY_KEYS)}

RANGE_PATTERN = re.compile(r'^\s*[\[(]\s*(-?\d+)\s*,\s*(-?\d+)\s*[)\]]\s*$')


class InvalidWindowError(ValueError):
    """A window cannot be represented on the weekly clock."""


# =============================================================================
# DATA TYPES
# =============================================================================

@dataclass(frozen=True)
class DayWindow:
    """A window expressed as day of week plus minute bounds within that day."""

    day_of_week: int
    start_minutes: int
    end_minutes: int

    def to_dict(self) -> Dict[str, int]:
        return {
            'day_of_week': self.day_of_week,
            'start_minutes': self.start_minutes,
            'end_minutes': self.end_minutes,
        }


@dataclass(frozen=True, order=True)
class CanonicalInterval:
    """
    Half-open interval [start, end) on the weekly minute clock.

    Intervals sort by start, then end. The recurring flag is carried along
    but does not take part in equality or ordering.
    """

    start: int
    end: int
    recurring: bool = field(default=True, compare=False)

    def __post_init__(self):
        if not (0 <= self.start < self.end <= MINUTES_PER_WEEK):
            raise InvalidWindowError(
                f"Interval [{self.start},{self.end}) is outside [0,{MINUTES_PER_WEEK})"
            )

    @property
    def day_of_week(self) -> int:
        return self.start // MINUTES_PER_DAY

    @property
    def duration(self) -> int:
        return self.end - self.start

    def to_day_window(self) -> DayWindow:
        """Express as day-relative minutes; the interval must not span days."""
        day = self.day_of_week
        return DayWindow(
            day_of_week=day,
            start_minutes=self.start - day * MINUTES_PER_DAY,
            end_minutes=self.end - day * MINUTES_PER_DAY,
        )

    def __str__(self):
        return format_canonical_range(self)


# =============================================================================
# QUICK MODE
# =============================================================================

def _day_index(day: Union[int, str]) -> int:
    if isinstance(day, str):
        key = day.strip().lower()[:3]
        if key not in DAY_MAP:
            raise InvalidWindowError(f"Unknown day '{day}'")
        return DAY_MAP[key]
    if not 0 <= int(day) < DAYS_PER_WEEK:
        raise InvalidWindowError(f"day_of_week {day} is outside 0-6")
    return int(day)


def from_quick_mode(days: Iterable[Union[int, str]], buckets: Iterable[str]) -> List[CanonicalInterval]:
    """One interval per (day, bucket) pair."""
    bucket_ranges = []
    for bucket in buckets:
        if bucket not in QUICK_MODE_BUCKETS:
            raise InvalidWindowError(f"Unknown quick-mode bucket '{bucket}'")
        bucket_ranges.append(QUICK_MODE_BUCKETS[bucket])

    intervals = {
        CanonicalInterval(day * MINUTES_PER_DAY + start, day * MINUTES_PER_DAY + end)
        for day in {_day_index(d) for d in days}
        for start, end in bucket_ranges
    }
    return sorted(intervals)


def grid_to_windows(grid: Dict[str, Sequence[str]]) -> List[DayWindow]:
    """
    Convert a quick-mode grid ({'mon': ['morning', 'evening'], ...}) into
    recurring windows, one per selected bucket. Unknown days or buckets are
    skipped.
    """
    windows = []
    for day_key, bucket_names in grid.items():
        day = DAY_MAP.get(str(day_key).lower())
        if day is None:
            continue
        for bucket in bucket_names:
            bounds = QUICK_MODE_BUCKETS.get(bucket)
            if bounds is None:
                continue
            windows.append(DayWindow(day, bounds[0], bounds[1]))
    return windows


def windows_to_grid(windows: Iterable[DayWindow]) -> Dict[str, List[str]]:
    """A bucket is selected when a single window covers it completely."""
    grid: Dict[str, List[str]] = {}
    for window in windows:
        if not 0 <= window.day_of_week < DAYS_PER_WEEK:
            continue
        day_key = DAY_KEYS[window.day_of_week]
        for bucket, (start, end) in QUICK_MODE_BUCKETS.items():
            if window.start_minutes <= start and window.end_minutes >= end:
                selected = grid.setdefault(day_key, [])
                if bucket not in selected:
                    selected.append(bucket)
    return grid


def windows_to_grid_with_partial(windows: Iterable[DayWindow]) -> Dict[str, Dict[str, str]]:
    """Three-state grid: 'full' or 'partial' per touched bucket."""
    result: Dict[str, Dict[str, str]] = {}
    for window in windows:
        if not 0 <= window.day_of_week < DAYS_PER_WEEK:
            continue
        day_key = DAY_KEYS[window.day_of_week]
        for bucket, (start, end) in QUICK_MODE_BUCKETS.items():
            if not (window.start_minutes < end and window.end_minutes > start):
                continue
            cells = result.setdefault(day_key, {})
            if window.start_minutes <= start and window.end_minutes >= end:
                cells[bucket] = 'full'
            elif cells.get(bucket) != 'full':
                cells[bucket] = 'partial'
    return result


# =============================================================================
# RECURRING & SPECIFIC WINDOWS
# =============================================================================

def split_midnight_enabled() -> bool:
    return bool(getattr(settings, 'MESHIT_AVAILABILITY', {}).get('SPLIT_MIDNIGHT_WINDOWS', False))


def from_recurring(
    day_of_week: int,
    start_minutes: int,
    end_minutes: int,
    split_midnight: Optional[bool] = None,
) -> List[CanonicalInterval]:
    """
    Map a recurring window onto the weekly clock.

    A window with end_minutes <= start_minutes crosses midnight (22:00-02:00).
    With splitting enabled it becomes [day 22:00, day 24:00) plus
    [next day 00:00, next day 02:00), Sunday wrapping to Monday.
    """
    day = _day_index(day_of_week)
    if not (0 <= start_minutes < MINUTES_PER_DAY and 0 <= end_minutes <= MINUTES_PER_DAY):
        raise InvalidWindowError(
            f"Minute bounds {start_minutes}-{end_minutes} are outside 0-{MINUTES_PER_DAY}"
        )

    base = day * MINUTES_PER_DAY
    if end_minutes > start_minutes:
        return [CanonicalInterval(base + start_minutes, base + end_minutes)]

    if split_midnight is None:
        split_midnight = split_midnight_enabled()
    if not split_midnight:
        raise InvalidWindowError(
            f"Window {start_minutes}-{end_minutes} on day {day} crosses midnight"
        )

    intervals = [CanonicalInterval(base + start_minutes, base + MINUTES_PER_DAY)]
    if end_minutes > 0:
        next_base = ((day + 1) % DAYS_PER_WEEK) * MINUTES_PER_DAY
        intervals.append(CanonicalInterval(next_base, next_base + end_minutes))
    return sorted(intervals)


def from_specific(start_at: datetime, end_at: datetime, tz_name: str) -> List[CanonicalInterval]:
    """
    Convert an absolute [start_at, end_at) span into the owner's local week.

    The result is cut at each local midnight so every piece stays within one
    day, and is flagged non-recurring.
    """
    if end_at <= start_at:
        raise InvalidWindowError("end_at must be after start_at")
    if end_at - start_at > timedelta(days=DAYS_PER_WEEK):
        raise InvalidWindowError("Specific windows cannot exceed one week")

    tz = get_safe_timezone(tz_name)
    local_start = start_at.astimezone(tz)
    local_end = end_at.astimezone(tz)

    intervals = []
    cursor = local_start
    while cursor < local_end:
        next_midnight = datetime.combine(
            cursor.date() + timedelta(days=1), datetime.min.time(), tzinfo=tz
        )
        piece_end = min(local_end, next_midnight)
        day = cursor.weekday()
        start_minute = cursor.hour * 60 + cursor.minute
        if piece_end == next_midnight:
            end_minute = MINUTES_PER_DAY
        else:
            end_minute = piece_end.hour * 60 + piece_end.minute
        if end_minute > start_minute:
            intervals.append(CanonicalInterval(
                day * MINUTES_PER_DAY + start_minute,
                day * MINUTES_PER_DAY + end_minute,
                recurring=False,
            ))
        cursor = piece_end
    return sorted(intervals)


def normalize_windows(windows, tz_name: str = 'UTC', include_specific: bool = False,
                      split_midnight: Optional[bool] = None) -> List[CanonicalInterval]:
    """
    Normalize stored AvailabilityWindow rows (or anything with the same
    attributes) into canonical intervals.

    Specific-date windows are left out unless include_specific is set, which
    callers use only when they explicitly ask about "this week".
    """
    intervals: List[CanonicalInterval] = []
    for window in windows:
        if window.window_type == 'recurring':
            intervals.extend(from_recurring(
                window.day_of_week, window.start_minutes, window.end_minutes,
                split_midnight=split_midnight,
            ))
        elif include_specific:
            intervals.extend(from_specific(window.start_at, window.end_at, tz_name))
    return sorted(intervals)


# =============================================================================
# CALENDAR RANGE STRINGS
# =============================================================================

def parse_canonical_range(text: str) -> Optional[CanonicalInterval]:
    """
    Parse a "[lower,upper)" range string.

    Either bracket style is tolerated on both ends. Returns None for
    malformed text and for ranges whose day falls outside 0-6 or whose
    minute bounds fall outside 0-1440 relative to that day.
    """
    if not isinstance(text, str):
        return None
    match = RANGE_PATTERN.match(text)
    if not match:
        logger.debug(f"Discarding malformed canonical range {text!r}")
        return None

    lower, upper = int(match.group(1)), int(match.group(2))
    if lower < 0:
        return None
    day = lower // MINUTES_PER_DAY
    start_minutes = lower - day * MINUTES_PER_DAY
    end_minutes = upper - day * MINUTES_PER_DAY
    if day >= DAYS_PER_WEEK or end_minutes > MINUTES_PER_DAY or end_minutes <= start_minutes:
        logger.debug(f"Discarding out-of-range canonical range {text!r}")
        return None
    return CanonicalInterval(lower, upper)


def format_canonical_range(interval: CanonicalInterval) -> str:
    return f"[{interval.start},{interval.end})"


def parse_canonical_ranges(texts: Iterable[str]) -> List[CanonicalInterval]:
    """Parse many range strings, dropping the malformed ones."""
    parsed = (parse_canonical_range(text) for text in texts)
    return sorted(interval for interval in parsed if interval is not None)
