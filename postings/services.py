"""
Posting services.

Application lifecycle, posting lifecycle and meeting proposals. Every
operation takes the acting profile explicitly and raises api.exceptions
errors on guard failures. Transitions that change team capacity run inside
one transaction with the posting row locked, so concurrent accepts cannot
overfill a team.

Notifications are scheduled with the notification service and only go out
after the transaction commits.
"""

import logging
import re
from datetime import datetime, timedelta
from typing import Dict, Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from api.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidTransitionError,
    ValidationFailedError,
)
from availability.services import replace_windows
from matching.embeddings import schedule_embedding
from notifications.models import Notification
from notifications.preferences import NotificationType
from notifications.services import notification_service

from .models import Application, MeetingProposal, MeetingResponse, Posting, PostingSkill

logger = logging.getLogger(__name__)

ApplicationStatus = Application.ApplicationStatus
PostingStatus = Posting.PostingStatus


def _meshit_setting(key: str, default):
    return settings.MESHIT.get(key, default)


def _lock_posting(posting: Posting) -> Posting:
    """Re-read the posting with a row lock; call inside transaction.atomic()."""
    return Posting.objects.select_for_update().get(pk=posting.pk)


def sync_capacity_status(posting: Posting) -> None:
    """Fill an open posting at capacity; reopen a filled one below it."""
    if posting.is_at_capacity():
        if posting.status == PostingStatus.OPEN:
            posting.mark_filled()
    else:
        posting.reopen()


# =============================================================================
# POSTINGS
# =============================================================================

EMBEDDED_FIELDS = {'title', 'description'}


def derive_title(description: str) -> str:
    """First sentence or line of the description, capped at 100 characters."""
    first = re.split(r'[.\n]', (description or '').strip(), maxsplit=1)[0]
    return first.strip()[:100] or 'Untitled Posting'


class PostingService:
    """Create, edit and delete postings (edits and deletes are creator only)."""

    def _set_required_skills(self, posting: Posting, skills) -> None:
        posting.required_skills.all().delete()
        PostingSkill.objects.bulk_create([
            PostingSkill(posting=posting, skill=item['skill'], min_level=item.get('min_level'))
            for item in skills
        ])

    def _apply_related(self, posting: Posting, skills, windows) -> None:
        if skills is not None:
            self._set_required_skills(posting, skills)
        if windows is not None:
            replace_windows(posting=posting, windows=windows)

    def create(self, actor, data: Dict) -> Posting:
        data = dict(data)
        skills = data.pop('required_skills', None)
        windows = data.pop('availability_windows', None)
        if not (data.get('title') or '').strip():
            data['title'] = derive_title(data.get('description', ''))

        with transaction.atomic():
            posting = Posting(creator=actor, status=PostingStatus.OPEN, needs_embedding=True, **data)
            posting.full_clean(exclude=['creator'])
            posting.save()
            self._apply_related(posting, skills, windows)

        logger.info(f"Posting {posting.pk} created by {actor.pk}")
        schedule_embedding('posting', posting.pk)
        return posting

    def update(self, posting: Posting, actor, data: Dict) -> Posting:
        if posting.creator_id != actor.pk:
            raise ForbiddenError("Not authorized to edit this posting")
        data = dict(data)
        skills = data.pop('required_skills', None)
        windows = data.pop('availability_windows', None)
        needs_embedding = skills is not None or bool(EMBEDDED_FIELDS & set(data))

        with transaction.atomic():
            for field, value in data.items():
                setattr(posting, field, value)
            if needs_embedding:
                posting.needs_embedding = True
            posting.full_clean(exclude=['creator'])
            posting.save()
            self._apply_related(posting, skills, windows)

        if needs_embedding:
            schedule_embedding('posting', posting.pk)
        return posting

    def delete(self, posting: Posting, actor) -> None:
        if posting.creator_id != actor.pk:
            raise ForbiddenError("Not authorized to delete this posting")
        logger.info(f"Posting {posting.pk} deleted by {actor.pk}")
        posting.delete()


# =============================================================================
# APPLICATIONS
# =============================================================================

class ApplicationService:
    """
    Join requests and their state machine.

    pending -> accepted | rejected (creator decides)
    waitlisted -> accepted | rejected (creator decides, or promotion)
    pending | accepted | waitlisted -> withdrawn (applicant)
    """

    def create(self, posting: Posting, actor, cover_message: str = '') -> Application:
        """
        Submit a join request.

        A filled posting waitlists the request; an auto-accept posting with
        free seats accepts it immediately, otherwise it stays pending.
        """
        if posting.creator_id == actor.pk:
            raise ValidationFailedError("You cannot apply to your own posting")

        with transaction.atomic():
            posting = _lock_posting(posting)
            if not posting.accepts_applications:
                raise InvalidTransitionError('apply', posting.status)
            if Application.objects.filter(posting=posting, applicant=actor).exists():
                raise ConflictError("You have already applied to this posting")
            if actor.pk in posting.accepted_member_ids():
                raise ConflictError("You are already a member of this team")

            if posting.status == PostingStatus.FILLED or posting.is_at_capacity():
                status = ApplicationStatus.WAITLISTED
            elif posting.auto_accept:
                status = ApplicationStatus.ACCEPTED
            else:
                status = ApplicationStatus.PENDING

            application = Application.objects.create(
                posting=posting,
                applicant=actor,
                cover_message=cover_message,
                status=status,
                decided_at=timezone.now() if status == ApplicationStatus.ACCEPTED else None,
            )
            posting.fill_if_at_capacity()

        logger.info(f"Application {application.pk} to posting {posting.pk} created as {status}")
        notification_service.schedule(
            posting.creator,
            Notification.Kind.APPLICATION_RECEIVED,
            "New join request",
            f'{actor.display_name} wants to join "{posting.title}"',
            preference=NotificationType.INTEREST_RECEIVED,
            related_posting=posting,
            related_application=application,
            related_profile=actor,
        )
        return application

    def decide(self, application: Application, actor, status: str) -> Application:
        """Accept or reject a pending or waitlisted application."""
        if status not in (ApplicationStatus.ACCEPTED, ApplicationStatus.REJECTED):
            raise ValidationFailedError("status must be 'accepted' or 'rejected'")
        if application.posting.creator_id != actor.pk:
            raise ForbiddenError("Only the posting creator can decide on applications")

        with transaction.atomic():
            posting = _lock_posting(application.posting)
            application = Application.objects.select_for_update().get(pk=application.pk)
            if not application.can_be_decided:
                raise InvalidTransitionError('decide', application.status)
            if status == ApplicationStatus.ACCEPTED:
                if application.applicant_id in posting.accepted_member_ids():
                    raise ConflictError("Applicant is already a member of this team")
                if posting.is_at_capacity():
                    raise ConflictError("Posting is already at capacity")

            application.set_status(status)
            if status == ApplicationStatus.ACCEPTED:
                sync_capacity_status(posting)

        logger.info(f"Application {application.pk} {status} by {actor.pk}")
        if status == ApplicationStatus.ACCEPTED:
            notification_service.schedule(
                application.applicant,
                Notification.Kind.APPLICATION_ACCEPTED,
                "Request accepted",
                f'You have joined "{posting.title}"',
                preference=NotificationType.APPLICATION_ACCEPTED,
                related_posting=posting,
                related_application=application,
            )
        else:
            notification_service.schedule(
                application.applicant,
                Notification.Kind.APPLICATION_REJECTED,
                "Request declined",
                f'Your request to join "{posting.title}" was declined',
                preference=NotificationType.APPLICATION_REJECTED,
                related_posting=posting,
                related_application=application,
            )
        application.posting = posting
        return application

    def withdraw(self, application: Application, actor) -> Application:
        """
        Withdraw an application.

        Withdrawing an accepted seat promotes the next waitlisted applicant
        in the same transaction.
        """
        if application.applicant_id != actor.pk:
            raise ForbiddenError("Only the applicant can withdraw an application")

        with transaction.atomic():
            posting = _lock_posting(application.posting)
            application = Application.objects.select_for_update().get(pk=application.pk)
            if not application.can_withdraw:
                raise InvalidTransitionError('withdraw', application.status)

            held_seat = application.status == ApplicationStatus.ACCEPTED
            application.set_status(ApplicationStatus.WITHDRAWN)
            if held_seat:
                self.promote_from_waitlist(posting)

        logger.info(f"Application {application.pk} withdrawn")
        application.posting = posting
        return application

    def promote_from_waitlist(self, posting: Posting) -> Optional[Application]:
        """
        Offer a freed seat to the oldest waitlisted application.

        With auto-accept the application is accepted; otherwise the creator
        is told a spot opened and the posting reopens for a manual decision.
        Nothing is offered while the team is still at capacity, which happens
        when the withdrawn seat was a duplicate. Returns the promoted (or
        offered) application, None when no seat is free or the waitlist is
        empty.
        """
        with transaction.atomic():
            candidate = (
                Application.objects.select_for_update()
                .filter(posting=posting, status=ApplicationStatus.WAITLISTED)
                .exclude(applicant_id__in=posting.accepted_member_ids())
                .order_by('created_at')
                .first()
            )
            if candidate is None or posting.is_at_capacity():
                sync_capacity_status(posting)
                return None

            if posting.auto_accept:
                candidate.set_status(ApplicationStatus.ACCEPTED)
                sync_capacity_status(posting)
                logger.info(f"Promoted application {candidate.pk} from waitlist")
                notification_service.schedule(
                    candidate.applicant,
                    Notification.Kind.WAITLIST_PROMOTED,
                    "You're in!",
                    f'A spot opened up and you have joined "{posting.title}"',
                    preference=NotificationType.APPLICATION_ACCEPTED,
                    related_posting=posting,
                    related_application=candidate,
                )
            else:
                sync_capacity_status(posting)
                notification_service.schedule(
                    posting.creator,
                    Notification.Kind.WAITLIST_SPOT_OPENED,
                    "Spot opened",
                    f'A spot opened on "{posting.title}"; {candidate.applicant.display_name} is next on the waitlist',
                    preference=NotificationType.INTEREST_RECEIVED,
                    related_posting=posting,
                    related_application=candidate,
                    related_profile=candidate.applicant,
                )
        return candidate


# =============================================================================
# POSTING LIFECYCLE
# =============================================================================

class PostingLifecycleService:
    """Reactivate, extend or repost expired postings (creator only)."""

    def _require_creator(self, posting: Posting, actor) -> None:
        if posting.creator_id != actor.pk:
            raise ForbiddenError("Only the posting creator can change this posting")

    def _require_expired(self, posting: Posting, action: str) -> None:
        if not posting.is_expired:
            raise InvalidTransitionError(action, posting.status)

    def resolve_expiry(self, days: Optional[int] = None, expires_at: Optional[datetime] = None) -> datetime:
        """New deadline from an explicit future instant or a number of days from now."""
        now = timezone.now()
        if expires_at is not None:
            if expires_at <= now:
                raise ValidationFailedError("expires_at must be in the future")
            return expires_at
        if days is None:
            days = _meshit_setting('DEFAULT_EXTENSION_DAYS', 7)
        if days < 1:
            raise ValidationFailedError("days must be at least 1")
        return now + timedelta(days=days)

    def reactivate(self, posting: Posting, actor) -> Posting:
        self._require_creator(posting, actor)
        self._require_expired(posting, 'reactivate')

        posting.status = PostingStatus.OPEN
        posting.expires_at = timezone.now() + timedelta(days=_meshit_setting('REACTIVATE_DAYS', 90))
        posting.save(update_fields=['status', 'expires_at', 'updated_at'])
        logger.info(f"Posting {posting.pk} reactivated until {posting.expires_at:%Y-%m-%d}")
        return posting

    def extend_deadline(self, posting: Posting, actor, days: Optional[int] = None,
                        expires_at: Optional[datetime] = None) -> Posting:
        """Reopen with a new deadline; existing applications are kept."""
        self._require_creator(posting, actor)
        self._require_expired(posting, 'extend deadline')

        posting.expires_at = self.resolve_expiry(days, expires_at)
        posting.status = PostingStatus.OPEN
        posting.save(update_fields=['status', 'expires_at', 'updated_at'])
        logger.info(f"Posting {posting.pk} deadline extended to {posting.expires_at:%Y-%m-%d}")
        return posting

    def repost(self, posting: Posting, actor, days: Optional[int] = None,
               expires_at: Optional[datetime] = None) -> Posting:
        """Reopen with a new deadline and a clean slate of applications."""
        self._require_creator(posting, actor)
        self._require_expired(posting, 'repost')
        new_expiry = self.resolve_expiry(days, expires_at)

        with transaction.atomic():
            deleted, _ = Application.objects.filter(posting=posting).delete()
            posting.expires_at = new_expiry
            posting.status = PostingStatus.OPEN
            posting.reposted_at = timezone.now()
            posting.save(update_fields=['status', 'expires_at', 'reposted_at', 'updated_at'])

        logger.info(f"Posting {posting.pk} reposted, {deleted} applications cleared")
        return posting

    def expire_overdue(self, now: Optional[datetime] = None) -> int:
        """Mark open postings past their deadline as expired."""
        now = now or timezone.now()
        return Posting.objects.filter(
            status=PostingStatus.OPEN,
            expires_at__lte=now,
        ).update(status=PostingStatus.EXPIRED, updated_at=now)


# =============================================================================
# MEETING PROPOSALS
# =============================================================================

class ProposalService:
    """Meeting proposals for a posting's team."""

    def require_team_member(self, posting: Posting, actor) -> None:
        if not posting.is_team_member(actor):
            raise ForbiddenError("Not a team member")

    def create(self, posting: Posting, actor, start_time: datetime, end_time: datetime,
               title: str = '', description: str = '') -> MeetingProposal:
        if posting.creator_id != actor.pk:
            raise ForbiddenError("Only the posting owner can propose meetings")
        if end_time <= start_time:
            raise ValidationFailedError("end_time must be after start_time")

        limit = _meshit_setting('MAX_PROPOSALS_PER_POSTING', 5)
        active = MeetingProposal.objects.filter(
            posting=posting,
            status__in=MeetingProposal.ACTIVE_STATUSES,
        ).count()
        if active >= limit:
            raise ValidationFailedError(f"Maximum of {limit} active proposals per posting")

        proposal = MeetingProposal.objects.create(
            posting=posting,
            proposed_by=actor,
            title=title,
            description=description,
            start_time=start_time,
            end_time=end_time,
        )
        for member in posting.team_members():
            if member.pk == actor.pk:
                continue
            notification_service.schedule(
                member,
                Notification.Kind.MEETING_PROPOSED,
                "Meeting proposed",
                f'{title or "A meeting"} for "{posting.title}" on {start_time:%Y-%m-%d %H:%M} UTC',
                related_posting=posting,
                related_profile=actor,
            )
        return proposal

    def update_status(self, proposal: MeetingProposal, actor, status: str) -> MeetingProposal:
        """Confirm or cancel a proposal that is still proposed."""
        if proposal.posting.creator_id != actor.pk:
            raise ForbiddenError("Only the posting owner can update proposals")
        allowed = (MeetingProposal.ProposalStatus.CONFIRMED, MeetingProposal.ProposalStatus.CANCELLED)
        if status not in allowed:
            raise ValidationFailedError("status must be 'confirmed' or 'cancelled'")
        if proposal.status != MeetingProposal.ProposalStatus.PROPOSED:
            raise ValidationFailedError(f"Cannot change status from '{proposal.status}' to '{status}'")

        proposal.status = status
        proposal.save(update_fields=['status', 'updated_at'])
        return proposal

    def respond(self, proposal: MeetingProposal, actor, response: str) -> MeetingResponse:
        """Record (or replace) a team member's answer to a proposed meeting."""
        self.require_team_member(proposal.posting, actor)
        if proposal.status != MeetingProposal.ProposalStatus.PROPOSED:
            raise ValidationFailedError("Can only respond to proposed meetings")
        if response not in MeetingResponse.ResponseChoice.values:
            raise ValidationFailedError("response must be 'available' or 'unavailable'")

        record, _ = MeetingResponse.objects.update_or_create(
            proposal=proposal,
            responder=actor,
            defaults={'response': response},
        )
        return record


posting_service = PostingService()
application_service = ApplicationService()
lifecycle_service = PostingLifecycleService()
proposal_service = ProposalService()
