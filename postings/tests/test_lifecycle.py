"""
Tests for posting expiry and the reactivate / extend / repost lifecycle.
"""

from datetime import timedelta

import pytest
from django.utils import timezone

from api.exceptions import ForbiddenError, InvalidTransitionError, ValidationFailedError
from postings.models import Application, Posting
from postings.services import lifecycle_service
from postings.tasks import expire_overdue_postings


@pytest.mark.django_db
class TestExpireOverdue:

    def test_only_open_overdue_postings_expire(self, posting_factory):
        overdue = posting_factory(expires_at=timezone.now() - timedelta(minutes=1))
        current = posting_factory()
        closed = posting_factory(status='closed', expires_at=timezone.now() - timedelta(days=3))

        assert lifecycle_service.expire_overdue() == 1

        for posting in (overdue, current, closed):
            posting.refresh_from_db()
        assert overdue.status == Posting.PostingStatus.EXPIRED
        assert current.status == Posting.PostingStatus.OPEN
        assert closed.status == Posting.PostingStatus.CLOSED

    def test_periodic_task(self, posting_factory):
        posting_factory(expires_at=timezone.now() - timedelta(hours=1))
        result = expire_overdue_postings.apply().get()
        assert result == {'status': 'success', 'expired': 1}


@pytest.mark.django_db
class TestReactivate:

    def test_reopens_for_ninety_days(self, expired_posting_factory):
        posting = expired_posting_factory()
        posting = lifecycle_service.reactivate(posting, posting.creator)

        assert posting.status == Posting.PostingStatus.OPEN
        assert posting.expires_at - timezone.now() > timedelta(days=89)

    def test_open_posting_refused(self, posting):
        with pytest.raises(InvalidTransitionError) as excinfo:
            lifecycle_service.reactivate(posting, posting.creator)
        assert "'open'" in str(excinfo.value.detail)

    def test_creator_only(self, expired_posting_factory, other_profile):
        posting = expired_posting_factory()
        with pytest.raises(ForbiddenError):
            lifecycle_service.reactivate(posting, other_profile)


@pytest.mark.django_db
class TestExtendDeadline:

    def test_days_keep_applications(self, expired_posting_factory, application_factory):
        posting = expired_posting_factory()
        application_factory(posting=posting)

        posting = lifecycle_service.extend_deadline(posting, posting.creator, days=14)

        assert posting.status == Posting.PostingStatus.OPEN
        assert timedelta(days=13) < posting.expires_at - timezone.now() <= timedelta(days=14)
        assert posting.applications.count() == 1

    def test_default_extension(self, expired_posting_factory):
        posting = expired_posting_factory()
        posting = lifecycle_service.extend_deadline(posting, posting.creator)
        assert timedelta(days=6) < posting.expires_at - timezone.now() <= timedelta(days=7)

    def test_past_instant_rejected(self, expired_posting_factory):
        posting = expired_posting_factory()
        with pytest.raises(ValidationFailedError):
            lifecycle_service.extend_deadline(
                posting, posting.creator, expires_at=timezone.now() - timedelta(days=1)
            )

    def test_open_but_overdue_counts_as_expired(self, posting_factory):
        posting = posting_factory(expires_at=timezone.now() - timedelta(minutes=5))
        posting = lifecycle_service.extend_deadline(posting, posting.creator, days=3)
        assert posting.expires_at > timezone.now()

    def test_api(self, expired_posting_factory, client_for):
        posting = expired_posting_factory()
        target = timezone.now() + timedelta(days=20)

        response = client_for(posting.creator).post(
            f'/api/postings/{posting.pk}/extend-deadline/',
            {'expires_at': target.isoformat()},
            format='json',
        )

        assert response.status_code == 200
        assert response.data['status'] == 'open'

    def test_api_rejects_both_inputs(self, expired_posting_factory, client_for):
        posting = expired_posting_factory()
        response = client_for(posting.creator).post(
            f'/api/postings/{posting.pk}/extend-deadline/',
            {'days': 3, 'expires_at': (timezone.now() + timedelta(days=3)).isoformat()},
            format='json',
        )
        assert response.status_code == 400
        assert response.data['error']['code'] == 'VALIDATION'


@pytest.mark.django_db
class TestRepost:

    def test_clears_applications(self, expired_posting_factory, application_factory, client_for):
        posting = expired_posting_factory()
        application_factory(posting=posting, status='accepted')
        application_factory(posting=posting, status='waitlisted')

        response = client_for(posting.creator).post(f'/api/postings/{posting.pk}/repost/', {'days': 30}, format='json')

        assert response.status_code == 200
        assert response.data['status'] == 'open'
        assert response.data['reposted_at'] is not None
        assert not Application.objects.filter(posting=posting).exists()

    def test_non_creator_forbidden(self, expired_posting_factory, other_profile, client_for):
        posting = expired_posting_factory()
        response = client_for(other_profile).post(f'/api/postings/{posting.pk}/repost/', {}, format='json')
        assert response.status_code == 403
