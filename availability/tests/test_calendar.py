"""
Tests for calendar busy-time projection, iCal parsing and sync.
"""

from datetime import datetime, timedelta, timezone as dt_timezone
from zoneinfo import ZoneInfo

import pytest

from availability.calendar import BusyPeriod, project_to_canonical_week, sync_connection
from availability.ical import ICalParseError, parse_ical_busy
from availability.models import CalendarBusyBlock, CalendarConnection
from availability.tasks import sync_calendar_connection

UTC = dt_timezone.utc


def _period(day, hour, minutes=60):
    start = datetime(2024, 1, day, hour, 0, tzinfo=UTC)
    return BusyPeriod(start, start + timedelta(minutes=minutes))


ICS_FEED = """BEGIN:VCALENDAR
VERSION:2.0
PRODID:-//Tests//Feed//EN
BEGIN:VEVENT
UID:standup-1
DTSTART:20240101T100000Z
DTEND:20240101T110000Z
SUMMARY:Standup
END:VEVENT
BEGIN:VEVENT
UID:holiday
DTSTART;VALUE=DATE:20240102
DTEND;VALUE=DATE:20240103
SUMMARY:Holiday
END:VEVENT
BEGIN:VEVENT
UID:standup-2
DTSTART:20240108T100000Z
DTEND:20240108T110000Z
SUMMARY:Standup
END:VEVENT
END:VCALENDAR
"""


class TestProjection:

    def test_slot_busy_in_two_weeks_is_kept(self):
        periods = [_period(1, 10), _period(8, 10)]  # Mondays in ISO weeks 1 and 2
        assert project_to_canonical_week(periods, 'UTC', min_weeks=2) == ['[600,660)']

    def test_one_off_event_is_dropped(self):
        periods = [_period(1, 10), _period(8, 10), _period(2, 14)]
        assert project_to_canonical_week(periods, 'UTC', min_weeks=2) == ['[600,660)']

    def test_same_week_repeats_count_once(self):
        periods = [_period(1, 10), _period(1, 10)]
        assert project_to_canonical_week(periods, 'UTC', min_weeks=2) == []

    def test_projected_in_profile_timezone(self):
        periods = [_period(1, 15), _period(8, 15)]
        # 15:00 UTC is 10:00 in New York in January
        assert project_to_canonical_week(periods, 'America/New_York', min_weeks=2) == ['[600,660)']

    def test_adjacent_slots_merge_within_a_day_only(self):
        periods = [
            BusyPeriod(datetime(2024, 1, 1, 23, 0, tzinfo=UTC), datetime(2024, 1, 2, 1, 0, tzinfo=UTC)),
            BusyPeriod(datetime(2024, 1, 8, 23, 0, tzinfo=UTC), datetime(2024, 1, 9, 1, 0, tzinfo=UTC)),
        ]
        assert project_to_canonical_week(periods, 'UTC', min_weeks=2) == ['[1380,1440)', '[1440,1500)']


class TestICalParsing:

    def test_timed_events_only(self):
        periods = parse_ical_busy(ICS_FEED)
        assert [p.start for p in periods] == [
            datetime(2024, 1, 1, 10, 0, tzinfo=UTC),
            datetime(2024, 1, 8, 10, 0, tzinfo=UTC),
        ]

    def test_floating_times_use_fallback_timezone(self):
        feed = ICS_FEED.replace('T100000Z', 'T100000').replace('T110000Z', 'T110000')
        periods = parse_ical_busy(feed, fallback_tz='Europe/Berlin')
        assert periods[0].start.tzinfo is not None
        assert periods[0].start.astimezone(ZoneInfo('Europe/Berlin')).hour == 10

    def test_garbage_rejected(self):
        with pytest.raises(ICalParseError):
            parse_ical_busy('this is not a calendar')


@pytest.mark.django_db
class TestSyncConnection:

    def test_sync_replaces_blocks_and_marks_synced(self, calendar_connection_factory, calendar_busy_block_factory):
        connection = calendar_connection_factory()
        calendar_busy_block_factory(connection=connection, canonical_range='[0,15)')

        ranges = sync_connection(connection, [_period(1, 10), _period(8, 10)])

        assert ranges == ['[600,660)']
        stored = list(CalendarBusyBlock.objects.filter(connection=connection).values_list('canonical_range', flat=True))
        assert stored == ['[600,660)']
        connection.refresh_from_db()
        assert connection.sync_status == CalendarConnection.SyncStatus.SYNCED
        assert connection.last_synced_at is not None

    def test_sync_api_accepts_ics(self, profile, client_for, calendar_connection_factory):
        connection = calendar_connection_factory(profile=profile)
        client = client_for(profile)

        response = client.post(
            f'/api/availability/connections/{connection.pk}/sync/',
            {'ics': ICS_FEED},
            format='json',
        )

        assert response.status_code == 200
        assert response.data['canonical_ranges'] == ['[600,660)']
        assert response.data['connection']['sync_status'] == 'synced'

    def test_sync_api_requires_one_source(self, profile, client_for, calendar_connection_factory):
        connection = calendar_connection_factory(profile=profile)
        response = client_for(profile).post(
            f'/api/availability/connections/{connection.pk}/sync/', {}, format='json'
        )
        assert response.status_code == 400
        assert response.data['error']['code'] == 'VALIDATION'

    def test_other_profiles_connection_not_found(self, profile, client_for, calendar_connection_factory):
        connection = calendar_connection_factory()
        response = client_for(profile).post(
            f'/api/availability/connections/{connection.pk}/sync/', {'busy': []}, format='json'
        )
        assert response.status_code == 404
        assert response.data['error']['code'] == 'NOT_FOUND'

    def test_large_push_is_synced_in_the_background(self, profile, client_for, calendar_connection_factory,
                                                     settings, django_capture_on_commit_callbacks):
        settings.MESHIT = {**settings.MESHIT, 'CALENDAR_SYNC_INLINE_LIMIT': 1}
        connection = calendar_connection_factory(profile=profile)
        busy = [
            {'start': '2024-01-01T10:00:00Z', 'end': '2024-01-01T11:00:00Z'},
            {'start': '2024-01-08T10:00:00Z', 'end': '2024-01-08T11:00:00Z'},
        ]

        with django_capture_on_commit_callbacks(execute=True):
            response = client_for(profile).post(
                f'/api/availability/connections/{connection.pk}/sync/', {'busy': busy}, format='json'
            )

        assert response.status_code == 202
        assert response.data['canonical_ranges'] is None
        assert response.data['connection']['sync_status'] == 'syncing'
        connection.refresh_from_db()
        assert connection.sync_status == CalendarConnection.SyncStatus.SYNCED
        stored = CalendarBusyBlock.objects.filter(connection=connection).values_list('canonical_range', flat=True)
        assert list(stored) == ['[600,660)']


@pytest.mark.django_db
class TestSyncTask:

    def test_task_projects_pushed_periods(self, calendar_connection_factory):
        connection = calendar_connection_factory()
        busy = [
            {'start': '2024-01-01T10:00:00Z', 'end': '2024-01-01T11:00:00Z'},
            {'start': '2024-01-08T10:00:00Z', 'end': '2024-01-08T11:00:00Z'},
            {'start': '2024-01-09T12:00:00Z', 'end': '2024-01-09T11:00:00Z'},
        ]

        result = sync_calendar_connection.apply(args=(str(connection.pk), busy)).get()

        assert result['status'] == 'synced'
        assert result['ranges'] == ['[600,660)']

    def test_task_missing_connection(self):
        result = sync_calendar_connection.apply(
            args=('00000000-0000-0000-0000-000000000000', [])
        ).get()

        assert result['status'] == 'missing'
