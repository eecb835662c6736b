"""
Availability services.

- replace_windows: swap a profile's or posting's windows for a new set
- profile_intervals: canonical intervals of one profile
- common_availability_for_posting: weekly windows when the whole team is free
"""

import logging
from typing import Iterable, List, Mapping, Optional

from django.db import transaction

from .calendar import busy_intervals_for_profiles
from .models import AvailabilityWindow
from .normalizer import DayWindow, InvalidWindowError, normalize_windows
from .overlap import find_common_windows, intersect, split_by_day, total_minutes

logger = logging.getLogger(__name__)


def replace_windows(*, profile=None, posting=None, windows: Iterable[Mapping]) -> List[AvailabilityWindow]:
    """
    Replace all windows of one owner.

    Each mapping carries window_type plus either day_of_week/start_minutes/
    end_minutes or start_at/end_at. Every window is validated before any
    row is written.
    """
    if (profile is None) == (posting is None):
        raise ValueError("Exactly one of profile or posting is required")

    rows = []
    for data in windows:
        window = AvailabilityWindow(
            profile=profile,
            posting=posting,
            window_type=data.get('window_type', AvailabilityWindow.WindowType.RECURRING),
            day_of_week=data.get('day_of_week'),
            start_minutes=data.get('start_minutes'),
            end_minutes=data.get('end_minutes'),
            specific_date=data.get('specific_date'),
            start_at=data.get('start_at'),
            end_at=data.get('end_at'),
        )
        window.clean()
        rows.append(window)

    owner_filter = {'profile': profile} if profile is not None else {'posting': posting}
    with transaction.atomic():
        AvailabilityWindow.objects.filter(**owner_filter).delete()
        AvailabilityWindow.objects.bulk_create(rows)
    return rows


def profile_intervals(profile, include_specific: bool = False):
    return normalize_windows(
        profile.availability_windows.all(),
        tz_name=profile.timezone,
        include_specific=include_specific,
    )


def posting_intervals(posting, include_specific: bool = False):
    return normalize_windows(
        posting.availability_windows.all(),
        tz_name=posting.creator.timezone,
        include_specific=include_specific,
    )


def common_availability_for_posting(posting, include_busy: bool = True,
                                    include_specific: bool = False) -> List[DayWindow]:
    """
    Weekly windows when the creator and every accepted member are available.

    Posting-level windows, when the creator declared any, further restrict
    the result. Calendar busy blocks of all members are subtracted.
    """
    members = posting.team_members()
    parties = []
    for member in members:
        try:
            parties.append(profile_intervals(member, include_specific=include_specific))
        except InvalidWindowError as e:
            logger.warning(f"Skipping invalid windows for profile {member.pk}: {e}")
            parties.append([])

    declared = posting_intervals(posting, include_specific=include_specific)
    if declared:
        parties.append(declared)

    busy = busy_intervals_for_profiles(m.pk for m in members) if include_busy else []
    common = find_common_windows(parties, busy)
    return [interval.to_day_window() for interval in split_by_day(common)]


def coverage_fraction(target: Iterable, available: Iterable) -> Optional[float]:
    """Share of target minutes covered by available minutes; None when target is empty."""
    target = list(target)
    target_minutes = total_minutes(target)
    if not target_minutes:
        return None
    return total_minutes(intersect(target, available)) / target_minutes
