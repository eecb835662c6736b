"""
MeshIt Test Configuration - pytest fixtures and factories

This module provides:
- pytest-django configuration
- factory_boy factories for every model
- Shared fixtures for API tests (clients authenticated as a profile's user)

Background effects (notifications, embedding refreshes) run on transaction
commit. Tests asserting on them wrap the call in
django_capture_on_commit_callbacks(execute=True).

RUNNING TESTS:
# Run all tests
pytest -v

# Run one app
pytest postings/tests -v

# Run by marker
pytest -m workflow -v
"""

import uuid
from datetime import timedelta

import factory
import pytest
from django.utils import timezone
from factory.django import DjangoModelFactory


# ============================================================================
# USER FACTORIES
# ============================================================================

class UserFactory(DjangoModelFactory):
    """Factory for the Django auth user."""

    class Meta:
        model = 'auth.User'
        django_get_or_create = ('username',)

    username = factory.LazyAttribute(lambda o: f"user_{uuid.uuid4().hex[:8]}")
    email = factory.LazyAttribute(lambda o: f"{o.username}@example.com")
    password = factory.PostGenerationMethodCall('set_password', 'testpass123')
    is_active = True


class StaffUserFactory(UserFactory):
    is_staff = True


# ============================================================================
# SKILL FACTORIES
# ============================================================================

class SkillNodeFactory(DjangoModelFactory):
    """Root skill unless a parent is given."""

    class Meta:
        model = 'skills.SkillNode'

    name = factory.Sequence(lambda n: f"Skill {n}")
    parent = None
    aliases = factory.LazyFunction(list)


# ============================================================================
# PROFILE FACTORIES
# ============================================================================

class ProfileFactory(DjangoModelFactory):
    class Meta:
        model = 'profiles.Profile'

    user = factory.SubFactory(UserFactory)
    full_name = factory.Faker('name')
    headline = ''
    bio = ''
    interests = factory.LazyFunction(list)
    timezone = 'UTC'
    remote_preference = 50
    needs_embedding = False


class ProfileSkillFactory(DjangoModelFactory):
    class Meta:
        model = 'profiles.ProfileSkill'

    profile = factory.SubFactory(ProfileFactory)
    skill = factory.SubFactory(SkillNodeFactory)
    level = 5


# ============================================================================
# POSTING FACTORIES
# ============================================================================

class PostingFactory(DjangoModelFactory):
    class Meta:
        model = 'postings.Posting'

    creator = factory.SubFactory(ProfileFactory)
    title = factory.Sequence(lambda n: f"Posting {n}")
    description = factory.Faker('sentence')
    category = 'hackathon'
    mode = 'remote'
    team_size_min = 1
    team_size_max = 3
    auto_accept = False
    status = 'open'
    expires_at = factory.LazyFunction(lambda: timezone.now() + timedelta(days=30))
    needs_embedding = False


class ExpiredPostingFactory(PostingFactory):
    status = 'expired'
    expires_at = factory.LazyFunction(lambda: timezone.now() - timedelta(days=1))


class PostingSkillFactory(DjangoModelFactory):
    class Meta:
        model = 'postings.PostingSkill'

    posting = factory.SubFactory(PostingFactory)
    skill = factory.SubFactory(SkillNodeFactory)
    min_level = None


class ApplicationFactory(DjangoModelFactory):
    class Meta:
        model = 'postings.Application'

    posting = factory.SubFactory(PostingFactory)
    applicant = factory.SubFactory(ProfileFactory)
    cover_message = ''
    status = 'pending'


class MeetingProposalFactory(DjangoModelFactory):
    class Meta:
        model = 'postings.MeetingProposal'

    posting = factory.SubFactory(PostingFactory)
    proposed_by = factory.LazyAttribute(lambda o: o.posting.creator)
    title = 'Kickoff'
    start_time = factory.LazyFunction(lambda: timezone.now() + timedelta(days=2))
    end_time = factory.LazyAttribute(lambda o: o.start_time + timedelta(hours=1))
    status = 'proposed'


# ============================================================================
# AVAILABILITY FACTORIES
# ============================================================================

class AvailabilityWindowFactory(DjangoModelFactory):
    """Recurring Monday 09:00-12:00 window owned by a profile."""

    class Meta:
        model = 'availability.AvailabilityWindow'

    profile = factory.SubFactory(ProfileFactory)
    posting = None
    window_type = 'recurring'
    day_of_week = 0
    start_minutes = 540
    end_minutes = 720


class CalendarConnectionFactory(DjangoModelFactory):
    class Meta:
        model = 'availability.CalendarConnection'

    profile = factory.SubFactory(ProfileFactory)
    provider = 'google'


class CalendarBusyBlockFactory(DjangoModelFactory):
    class Meta:
        model = 'availability.CalendarBusyBlock'

    connection = factory.SubFactory(CalendarConnectionFactory)
    profile = factory.LazyAttribute(lambda o: o.connection.profile)
    canonical_range = '[600,660)'


# ============================================================================
# MATCHING / NOTIFICATION FACTORIES
# ============================================================================

class MatchFactory(DjangoModelFactory):
    class Meta:
        model = 'matching.Match'

    profile = factory.SubFactory(ProfileFactory)
    posting = factory.SubFactory(PostingFactory)
    score = 0.5
    score_breakdown = None
    status = 'pending'


class NotificationFactory(DjangoModelFactory):
    class Meta:
        model = 'notifications.Notification'

    recipient = factory.SubFactory(ProfileFactory)
    kind = 'match_found'
    title = 'New match'
    body = ''


# ============================================================================
# FACTORY FIXTURES
# ============================================================================

@pytest.fixture
def user_factory(db):
    return UserFactory


@pytest.fixture
def staff_user_factory(db):
    return StaffUserFactory


@pytest.fixture
def skill_factory(db):
    return SkillNodeFactory


@pytest.fixture
def profile_factory(db):
    return ProfileFactory


@pytest.fixture
def profile_skill_factory(db):
    return ProfileSkillFactory


@pytest.fixture
def posting_factory(db):
    return PostingFactory


@pytest.fixture
def expired_posting_factory(db):
    return ExpiredPostingFactory


@pytest.fixture
def posting_skill_factory(db):
    return PostingSkillFactory


@pytest.fixture
def application_factory(db):
    return ApplicationFactory


@pytest.fixture
def meeting_proposal_factory(db):
    return MeetingProposalFactory


@pytest.fixture
def availability_window_factory(db):
    return AvailabilityWindowFactory


@pytest.fixture
def calendar_connection_factory(db):
    return CalendarConnectionFactory


@pytest.fixture
def calendar_busy_block_factory(db):
    return CalendarBusyBlockFactory


@pytest.fixture
def match_factory(db):
    return MatchFactory


@pytest.fixture
def notification_factory(db):
    return NotificationFactory


# ============================================================================
# COMMON FIXTURES
# ============================================================================

@pytest.fixture
def profile(db):
    return ProfileFactory()


@pytest.fixture
def other_profile(db):
    return ProfileFactory()


@pytest.fixture
def posting(db, profile):
    """An open posting created by `profile`."""
    return PostingFactory(creator=profile)


@pytest.fixture
def api_client(db):
    """Provide a DRF API test client."""
    from rest_framework.test import APIClient
    return APIClient()


@pytest.fixture
def client_for(db):
    """Build an APIClient authenticated as the given profile's user."""
    from rest_framework.test import APIClient

    def _client_for(profile):
        client = APIClient()
        client.force_authenticate(user=profile.user)
        return client
    return _client_for


@pytest.fixture
def authenticated_api_client(db, api_client, profile):
    """Provide a DRF API test client authenticated as `profile`."""
    api_client.force_authenticate(user=profile.user)
    return api_client
