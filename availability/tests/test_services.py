"""
Tests for team common availability and the profile availability endpoints.
"""

import pytest
from django.test import override_settings

from availability.normalizer import CanonicalInterval as I, DayWindow
from availability.services import common_availability_for_posting, coverage_fraction


@pytest.mark.django_db
class TestCommonAvailabilityForPosting:

    def test_creator_and_accepted_member(self, posting, availability_window_factory, application_factory):
        availability_window_factory(profile=posting.creator, day_of_week=0, start_minutes=540, end_minutes=720)
        member = application_factory(posting=posting, status='accepted').applicant
        availability_window_factory(profile=member, day_of_week=0, start_minutes=600, end_minutes=780)

        assert common_availability_for_posting(posting) == [DayWindow(0, 600, 720)]

    def test_pending_applicants_are_ignored(self, posting, availability_window_factory, application_factory):
        availability_window_factory(profile=posting.creator, day_of_week=2, start_minutes=540, end_minutes=720)
        pending = application_factory(posting=posting, status='pending').applicant
        availability_window_factory(profile=pending, day_of_week=4, start_minutes=540, end_minutes=720)

        assert common_availability_for_posting(posting) == [DayWindow(2, 540, 720)]

    def test_busy_blocks_subtracted(self, posting, availability_window_factory,
                                    application_factory, calendar_busy_block_factory,
                                    calendar_connection_factory):
        availability_window_factory(profile=posting.creator, day_of_week=0, start_minutes=540, end_minutes=720)
        member = application_factory(posting=posting, status='accepted').applicant
        availability_window_factory(profile=member, day_of_week=0, start_minutes=540, end_minutes=720)
        calendar_busy_block_factory(
            connection=calendar_connection_factory(profile=member), canonical_range='[600,630)'
        )

        assert common_availability_for_posting(posting) == [DayWindow(0, 540, 600), DayWindow(0, 630, 720)]

    def test_member_without_windows_means_no_common_time(self, posting, availability_window_factory,
                                                         application_factory):
        availability_window_factory(profile=posting.creator)
        application_factory(posting=posting, status='accepted')

        assert common_availability_for_posting(posting) == []

    def test_api_restricted_to_team(self, posting, other_profile, client_for, availability_window_factory):
        availability_window_factory(profile=posting.creator, day_of_week=1, start_minutes=0, end_minutes=60)

        response = client_for(posting.creator).get(f'/api/postings/{posting.pk}/common-availability/')
        assert response.status_code == 200
        assert response.data == {'windows': [{'day_of_week': 1, 'start_minutes': 0, 'end_minutes': 60}]}

        response = client_for(other_profile).get(f'/api/postings/{posting.pk}/common-availability/')
        assert response.status_code == 403
        assert response.data['error']['code'] == 'FORBIDDEN'


class TestCoverageFraction:

    def test_fraction_of_target_covered(self):
        assert coverage_fraction([I(0, 100)], [I(50, 200)]) == 0.5

    def test_empty_target(self):
        assert coverage_fraction([], [I(0, 10)]) is None


@pytest.mark.django_db
class TestProfileAvailabilityAPI:

    def test_put_grid_creates_one_window_per_bucket(self, profile, client_for):
        client = client_for(profile)
        response = client.put(
            '/api/profiles/me/availability/',
            {'grid': {'mon': ['morning', 'afternoon']}},
            format='json',
        )
        assert response.status_code == 200
        assert len(response.data['windows']) == 2

        response = client.get('/api/profiles/me/availability/')
        assert response.data['grid'] == {'mon': ['morning', 'afternoon']}
        assert response.data['grid_cells'] == {'mon': {'morning': 'full', 'afternoon': 'full'}}

    def test_get_marks_partly_covered_buckets(self, profile, client_for, availability_window_factory):
        availability_window_factory(profile=profile)
        response = client_for(profile).get('/api/profiles/me/availability/')
        assert response.status_code == 200
        assert response.data['grid'] == {}
        assert response.data['grid_cells'] == {'mon': {'morning': 'partial'}}

    def test_put_replaces_previous_windows(self, profile, client_for, availability_window_factory):
        availability_window_factory(profile=profile, day_of_week=6)
        response = client_for(profile).put(
            '/api/profiles/me/availability/',
            {'windows': [{'day_of_week': 2, 'start_minutes': 60, 'end_minutes': 120}]},
            format='json',
        )
        assert response.status_code == 200
        assert [w['day_of_week'] for w in response.data['windows']] == [2]

    def test_midnight_crossing_window_rejected(self, profile, client_for):
        response = client_for(profile).put(
            '/api/profiles/me/availability/',
            {'windows': [{'day_of_week': 0, 'start_minutes': 1320, 'end_minutes': 120}]},
            format='json',
        )
        assert response.status_code == 400
        assert response.data['error']['code'] == 'VALIDATION'
        assert profile.availability_windows.count() == 0

    @override_settings(MESHIT_AVAILABILITY={'SPLIT_MIDNIGHT_WINDOWS': True})
    def test_midnight_crossing_window_accepted_when_split_enabled(self, profile, client_for):
        response = client_for(profile).put(
            '/api/profiles/me/availability/',
            {'windows': [{'day_of_week': 0, 'start_minutes': 1320, 'end_minutes': 120}]},
            format='json',
        )
        assert response.status_code == 200
        assert profile.availability_windows.count() == 1
