"""
Tests for join requests: capacity, waitlist and promotion.
"""

import pytest

from api.exceptions import ConflictError, ForbiddenError, InvalidTransitionError, ValidationFailedError
from notifications.models import Notification
from postings.models import Application, Posting
from postings.services import application_service


def _decide_url(application):
    return f'/api/postings/applications/{application.pk}/decide/'


def _withdraw_url(application):
    return f'/api/postings/applications/{application.pk}/withdraw/'


@pytest.mark.django_db
class TestApply:

    def test_pending_by_default(self, posting, other_profile):
        application = application_service.create(posting, other_profile, 'Count me in')
        assert application.status == Application.ApplicationStatus.PENDING
        assert application.cover_message == 'Count me in'

    def test_auto_accept_fills_last_seat(self, posting_factory, profile_factory):
        posting = posting_factory(auto_accept=True, team_size_max=1)

        first = application_service.create(posting, profile_factory())
        second = application_service.create(posting, profile_factory())

        posting.refresh_from_db()
        assert first.status == Application.ApplicationStatus.ACCEPTED
        assert first.decided_at is not None
        assert second.status == Application.ApplicationStatus.WAITLISTED
        assert posting.status == Posting.PostingStatus.FILLED
        assert second.waitlist_position() == 1

    def test_cannot_apply_to_own_posting(self, posting):
        with pytest.raises(ValidationFailedError):
            application_service.create(posting, posting.creator)

    def test_duplicate_application_conflicts(self, posting, other_profile):
        application_service.create(posting, other_profile)
        with pytest.raises(ConflictError):
            application_service.create(posting, other_profile)

    @pytest.mark.parametrize('status', ['closed', 'expired'])
    def test_closed_or_expired_posting_refuses(self, posting_factory, other_profile, status):
        posting = posting_factory(status=status)
        with pytest.raises(InvalidTransitionError) as excinfo:
            application_service.create(posting, other_profile)
        assert status in str(excinfo.value.detail)

    def test_creator_notified(self, posting, other_profile, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            application_service.create(posting, other_profile)

        notification = Notification.objects.get(recipient=posting.creator)
        assert notification.kind == Notification.Kind.APPLICATION_RECEIVED
        assert notification.related_profile == other_profile

    def test_creator_opted_out(self, profile_factory, posting_factory, other_profile,
                               django_capture_on_commit_callbacks):
        creator = profile_factory(notification_preferences={'in_app': {'interest_received': False}})
        posting = posting_factory(creator=creator)

        with django_capture_on_commit_callbacks(execute=True):
            application_service.create(posting, other_profile)

        assert not Notification.objects.filter(recipient=creator).exists()


@pytest.mark.django_db
@pytest.mark.workflow
class TestCapacity:

    def test_third_accept_on_two_seat_posting_conflicts(self, posting_factory, profile_factory, client_for):
        posting = posting_factory(team_size_max=2)
        applications = [application_service.create(posting, profile_factory()) for _ in range(3)]
        client = client_for(posting.creator)

        for application in applications[:2]:
            response = client.patch(_decide_url(application), {'status': 'accepted'}, format='json')
            assert response.status_code == 200
            assert response.data['status'] == 'accepted'

        posting.refresh_from_db()
        assert posting.status == Posting.PostingStatus.FILLED
        assert posting.accepted_count() == 2

        response = client.patch(_decide_url(applications[2]), {'status': 'accepted'}, format='json')
        assert response.status_code == 409
        assert response.data['error']['code'] == 'CONFLICT'
        applications[2].refresh_from_db()
        assert applications[2].status == Application.ApplicationStatus.PENDING

    def test_apply_to_filled_posting_waitlists(self, posting_factory, application_factory, profile_factory):
        posting = posting_factory(team_size_max=1, status='filled')
        application_factory(posting=posting, status='accepted')

        application = application_service.create(posting, profile_factory())
        assert application.status == Application.ApplicationStatus.WAITLISTED

    def test_reject_does_not_use_a_seat(self, posting, application_factory):
        application = application_factory(posting=posting)
        application = application_service.decide(application, posting.creator, 'rejected')
        assert application.status == Application.ApplicationStatus.REJECTED
        assert posting.accepted_count() == 0

    def test_accepted_match_counts_toward_capacity(self, posting_factory, application_factory, match_factory):
        posting = posting_factory(team_size_max=1)
        match_factory(posting=posting, status='accepted')
        application = application_factory(posting=posting)

        with pytest.raises(ConflictError):
            application_service.decide(application, posting.creator, 'accepted')

    def test_member_through_match_cannot_take_a_second_seat(self, posting_factory, application_factory,
                                                            match_factory):
        posting = posting_factory(team_size_max=2)
        seated = match_factory(posting=posting, status='accepted')
        application = application_factory(posting=posting, applicant=seated.profile)

        with pytest.raises(ConflictError, match='already a member'):
            application_service.decide(application, posting.creator, 'accepted')

        application.refresh_from_db()
        assert application.status == Application.ApplicationStatus.PENDING
        assert posting.accepted_count() == 1

    def test_member_through_match_cannot_apply(self, posting_factory, match_factory):
        posting = posting_factory(team_size_max=2, auto_accept=True)
        seated = match_factory(posting=posting, status='accepted')

        with pytest.raises(ConflictError):
            application_service.create(posting, seated.profile)


@pytest.mark.django_db
class TestDecide:

    def test_only_creator_decides(self, posting, application_factory, other_profile, client_for):
        application = application_factory(posting=posting)
        response = client_for(other_profile).patch(_decide_url(application), {'status': 'accepted'}, format='json')
        assert response.status_code == 403
        assert response.data['error']['code'] == 'FORBIDDEN'

    def test_invalid_status(self, posting, application_factory):
        application = application_factory(posting=posting)
        with pytest.raises(ValidationFailedError):
            application_service.decide(application, posting.creator, 'withdrawn')

    def test_decided_application_cannot_be_decided_again(self, posting, application_factory, client_for):
        application = application_factory(posting=posting, status='rejected')
        response = client_for(posting.creator).patch(_decide_url(application), {'status': 'accepted'}, format='json')
        assert response.status_code == 400
        assert response.data['error']['code'] == 'VALIDATION'
        assert "'rejected'" in response.data['error']['message']

    def test_applicant_notified(self, posting, application_factory, django_capture_on_commit_callbacks):
        application = application_factory(posting=posting)
        with django_capture_on_commit_callbacks(execute=True):
            application_service.decide(application, posting.creator, 'accepted')

        notification = Notification.objects.get(recipient=application.applicant)
        assert notification.kind == Notification.Kind.APPLICATION_ACCEPTED


@pytest.mark.django_db
@pytest.mark.workflow
class TestWithdrawAndPromotion:

    def test_auto_accept_promotes_oldest_waitlisted(self, posting_factory, profile_factory, client_for,
                                                    django_capture_on_commit_callbacks):
        posting = posting_factory(auto_accept=True, team_size_max=1)
        holder = application_service.create(posting, profile_factory())
        first_waiting = application_service.create(posting, profile_factory())
        second_waiting = application_service.create(posting, profile_factory())

        with django_capture_on_commit_callbacks(execute=True):
            response = client_for(holder.applicant).patch(_withdraw_url(holder), format='json')

        assert response.status_code == 200
        assert response.data['status'] == 'withdrawn'
        first_waiting.refresh_from_db()
        second_waiting.refresh_from_db()
        posting.refresh_from_db()
        assert first_waiting.status == Application.ApplicationStatus.ACCEPTED
        assert second_waiting.status == Application.ApplicationStatus.WAITLISTED
        assert second_waiting.waitlist_position() == 1
        assert posting.status == Posting.PostingStatus.FILLED
        assert Notification.objects.filter(
            recipient=first_waiting.applicant, kind=Notification.Kind.WAITLIST_PROMOTED
        ).exists()

    def test_manual_posting_reopens_and_tells_creator(self, posting_factory, profile_factory,
                                                      django_capture_on_commit_callbacks):
        posting = posting_factory(team_size_max=1)
        holder = application_service.create(posting, profile_factory())
        application_service.decide(holder, posting.creator, 'accepted')
        waiting = application_service.create(posting, profile_factory())
        assert waiting.status == Application.ApplicationStatus.WAITLISTED

        with django_capture_on_commit_callbacks(execute=True):
            application_service.withdraw(holder, holder.applicant)

        posting.refresh_from_db()
        waiting.refresh_from_db()
        assert posting.status == Posting.PostingStatus.OPEN
        assert waiting.status == Application.ApplicationStatus.WAITLISTED
        assert Notification.objects.filter(
            recipient=posting.creator, kind=Notification.Kind.WAITLIST_SPOT_OPENED
        ).exists()

        # The creator can now accept the waitlisted applicant directly
        waiting = application_service.decide(waiting, posting.creator, 'accepted')
        assert waiting.status == Application.ApplicationStatus.ACCEPTED

    def test_withdrawing_last_member_reopens(self, posting_factory, application_factory):
        posting = posting_factory(team_size_max=1, status='filled')
        holder = application_factory(posting=posting, status='accepted')

        application_service.withdraw(holder, holder.applicant)

        posting.refresh_from_db()
        assert posting.status == Posting.PostingStatus.OPEN

    def test_withdrawing_duplicate_seat_keeps_posting_filled(self, posting_factory, profile_factory,
                                                             application_factory, match_factory):
        posting = posting_factory(team_size_max=1, auto_accept=True, status='filled')
        member = profile_factory()
        match_factory(posting=posting, profile=member, status='accepted')
        duplicate = application_factory(posting=posting, applicant=member, status='accepted')
        waiting = application_factory(posting=posting, status='waitlisted')

        promoted = application_service.promote_from_waitlist(posting)
        assert promoted is None
        application_service.withdraw(duplicate, member)

        posting.refresh_from_db()
        waiting.refresh_from_db()
        assert posting.status == Posting.PostingStatus.FILLED
        assert posting.accepted_member_ids() == {member.pk}
        assert waiting.status == Application.ApplicationStatus.WAITLISTED

    def test_withdraw_pending_keeps_posting(self, posting, application_factory):
        application = application_factory(posting=posting)
        application = application_service.withdraw(application, application.applicant)
        assert application.status == Application.ApplicationStatus.WITHDRAWN

    def test_only_applicant_withdraws(self, posting, application_factory):
        application = application_factory(posting=posting)
        with pytest.raises(ForbiddenError):
            application_service.withdraw(application, posting.creator)

    def test_rejected_cannot_withdraw(self, posting, application_factory):
        application = application_factory(posting=posting, status='rejected')
        with pytest.raises(InvalidTransitionError):
            application_service.withdraw(application, application.applicant)


@pytest.mark.django_db
class TestApplicationAPI:

    def test_create_and_list(self, posting, other_profile, client_for):
        client = client_for(other_profile)
        response = client.post(
            '/api/postings/applications/',
            {'posting': str(posting.pk), 'cover_message': 'Hi'},
            format='json',
        )
        assert response.status_code == 201
        assert response.data['status'] == 'pending'

        application_id = response.data['id']
        response = client.get('/api/postings/applications/')
        assert [a['id'] for a in response.data] == [application_id]

        response = client_for(posting.creator).get('/api/postings/applications/', {'posting': str(posting.pk)})
        assert len(response.data) == 1

    def test_posting_applications_creator_only(self, posting, application_factory, other_profile, client_for):
        application_factory(posting=posting)

        response = client_for(posting.creator).get(f'/api/postings/{posting.pk}/applications/')
        assert response.status_code == 200
        assert len(response.data) == 1

        response = client_for(other_profile).get(f'/api/postings/{posting.pk}/applications/')
        assert response.status_code == 403

    def test_unknown_application(self, profile, client_for):
        response = client_for(profile).patch(
            '/api/postings/applications/00000000-0000-0000-0000-000000000000/withdraw/', format='json'
        )
        assert response.status_code == 404
        assert response.data['error']['code'] == 'NOT_FOUND'

    def test_malformed_application_id_is_not_found(self, profile, client_for):
        response = client_for(profile).patch('/api/postings/applications/not-a-uuid/withdraw/', format='json')
        assert response.status_code == 404
        assert response.data['error']['code'] == 'NOT_FOUND'
        assert response.data['error']['message'] == 'Application not found'

    def test_decide_validates_body_before_lookup(self, profile, client_for):
        response = client_for(profile).patch(
            '/api/postings/applications/00000000-0000-0000-0000-000000000000/decide/', {}, format='json'
        )
        assert response.status_code == 400
        assert response.data['error']['code'] == 'VALIDATION'

    def test_decide_unknown_application(self, profile, client_for):
        response = client_for(profile).patch(
            '/api/postings/applications/not-a-uuid/decide/', {'status': 'accepted'}, format='json'
        )
        assert response.status_code == 404
