"""
Availability Overlap Engine

Computes the time common to every party (e.g. all members of a team) from
their canonical intervals, then removes busy time.

- intersect: two-pointer sweep over two sorted interval lists
- common_availability: left fold of intersect across all parties
- subtract: interval difference, one busy block can split an interval in two
- find_common_windows: intersection followed by busy-block subtraction

intersect keeps touching intervals apart, so intersecting a list with itself
gives the list back unchanged. common_availability and subtract return merged
results sorted by (start, end). An empty list means the parties share no time;
it is not an error.
"""

from typing import Iterable, List, Sequence

from .normalizer import MINUTES_PER_DAY, CanonicalInterval


def _coalesce(intervals: Iterable[CanonicalInterval], join_touching: bool) -> List[CanonicalInterval]:
    result: List[CanonicalInterval] = []
    for interval in sorted(intervals):
        if result and (
            interval.start < result[-1].end
            or (join_touching and interval.start == result[-1].end)
        ):
            last = result[-1]
            if interval.end > last.end:
                result[-1] = CanonicalInterval(last.start, interval.end, last.recurring)
        else:
            result.append(interval)
    return result


def merge(intervals: Iterable[CanonicalInterval]) -> List[CanonicalInterval]:
    """Sort and coalesce overlapping or touching intervals."""
    return _coalesce(intervals, join_touching=True)


def _disjoint(intervals: Iterable[CanonicalInterval]) -> List[CanonicalInterval]:
    """Sort and coalesce strictly overlapping intervals; touching ones stay separate."""
    return _coalesce(intervals, join_touching=False)


def intersect(a: Iterable[CanonicalInterval], b: Iterable[CanonicalInterval]) -> List[CanonicalInterval]:
    """Intervals present in both lists."""
    left, right = _disjoint(a), _disjoint(b)
    result = []
    i = j = 0
    while i < len(left) and j < len(right):
        start = max(left[i].start, right[j].start)
        end = min(left[i].end, right[j].end)
        if start < end:
            result.append(CanonicalInterval(start, end))
        # Advance whichever interval finishes first
        if left[i].end <= right[j].end:
            i += 1
        else:
            j += 1
    return result


def common_availability(parties: Sequence[Iterable[CanonicalInterval]]) -> List[CanonicalInterval]:
    """Intervals shared by every party; no parties means no common time."""
    if not parties:
        return []
    common = _disjoint(parties[0])
    for party in parties[1:]:
        if not common:
            break
        common = intersect(common, party)
    return merge(common)


def subtract(intervals: Iterable[CanonicalInterval], busy: Iterable[CanonicalInterval]) -> List[CanonicalInterval]:
    """Remove busy time from intervals."""
    blocks = merge(busy)
    result = []
    for interval in merge(intervals):
        cursor = interval.start
        for block in blocks:
            if block.end <= cursor:
                continue
            if block.start >= interval.end:
                break
            if block.start > cursor:
                result.append(CanonicalInterval(cursor, block.start))
            cursor = max(cursor, block.end)
            if cursor >= interval.end:
                break
        if cursor < interval.end:
            result.append(CanonicalInterval(cursor, interval.end))
    return result


def find_common_windows(
    parties: Sequence[Iterable[CanonicalInterval]],
    busy: Iterable[CanonicalInterval] = (),
) -> List[CanonicalInterval]:
    """Common declared availability of all parties minus everyone's busy blocks."""
    return subtract(common_availability(parties), busy)


def split_by_day(intervals: Iterable[CanonicalInterval]) -> List[CanonicalInterval]:
    """Cut intervals at day boundaries so each one maps to a single day."""
    pieces = []
    for interval in intervals:
        start = interval.start
        while start < interval.end:
            day_end = (start // MINUTES_PER_DAY + 1) * MINUTES_PER_DAY
            end = min(interval.end, day_end)
            pieces.append(CanonicalInterval(start, end, interval.recurring))
            start = end
    return pieces


def total_minutes(intervals: Iterable[CanonicalInterval]) -> int:
    return sum(interval.duration for interval in merge(intervals))
