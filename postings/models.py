"""
Posting models.

- Posting: a collaboration opportunity (hackathon team, study group, side project)
- PostingSkill: a required skill with an optional minimum level
- Application: a request by a profile to join a posting's team
- MeetingProposal / MeetingResponse: proposed team meetings and member replies

Status lifecycles:
    Posting:      open -> filled -> open (slot freed), open -> expired -> open
                  (reactivate / extend / repost), any -> closed
    Application:  pending -> accepted | rejected
                  waitlisted -> accepted (promotion or owner decision)
                  pending | accepted | waitlisted -> withdrawn
    Proposal:     proposed -> confirmed | cancelled
"""

from datetime import timedelta

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from core.models import TimestampedModel


def default_expiry():
    return timezone.now() + timedelta(days=settings.MESHIT.get('REACTIVATE_DAYS', 90))


# =============================================================================
# POSTING
# =============================================================================

class Posting(TimestampedModel):
    """A collaboration opportunity created by a profile."""

    class PostingStatus(models.TextChoices):
        OPEN = 'open', _('Open')
        FILLED = 'filled', _('Filled')
        CLOSED = 'closed', _('Closed')
        EXPIRED = 'expired', _('Expired')

    class WorkMode(models.TextChoices):
        REMOTE = 'remote', _('Remote')
        HYBRID = 'hybrid', _('Hybrid')
        ONSITE = 'onsite', _('On-site')

    creator = models.ForeignKey(
        'profiles.Profile',
        on_delete=models.CASCADE,
        related_name='postings'
    )
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    category = models.CharField(max_length=100, blank=True, db_index=True)
    mode = models.CharField(max_length=20, choices=WorkMode.choices, default=WorkMode.REMOTE)
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)

    team_size_min = models.PositiveSmallIntegerField(default=1, validators=[MinValueValidator(1)])
    team_size_max = models.PositiveSmallIntegerField(default=1, validators=[MinValueValidator(1)])
    skill_level_min = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MaxValueValidator(10)]
    )
    hours_per_week = models.PositiveSmallIntegerField(null=True, blank=True)
    auto_accept = models.BooleanField(
        default=False,
        help_text=_('Accept join requests immediately while seats remain')
    )

    status = models.CharField(
        max_length=20,
        choices=PostingStatus.choices,
        default=PostingStatus.OPEN,
        db_index=True
    )
    expires_at = models.DateTimeField(default=default_expiry, db_index=True)
    reposted_at = models.DateTimeField(null=True, blank=True)

    embedding = models.JSONField(null=True, blank=True)
    needs_embedding = models.BooleanField(default=True, db_index=True)

    class Meta:
        verbose_name = _('Posting')
        verbose_name_plural = _('Postings')
        ordering = ['-created_at']

    def __str__(self):
        return self.title

    def clean(self):
        super().clean()
        if self.team_size_max < self.team_size_min:
            raise ValidationError({'team_size_max': _('Maximum team size cannot be below the minimum.')})

    @property
    def is_expired(self) -> bool:
        return self.status == self.PostingStatus.EXPIRED or (
            self.expires_at is not None and self.expires_at <= timezone.now()
        )

    @property
    def accepts_applications(self) -> bool:
        return self.status in {self.PostingStatus.OPEN, self.PostingStatus.FILLED}

    def accepted_member_ids(self) -> set:
        """Profiles holding a seat through an accepted application or match."""
        from matching.models import Match

        members = set(
            self.applications.filter(
                status=Application.ApplicationStatus.ACCEPTED
            ).values_list('applicant_id', flat=True)
        )
        members.update(
            Match.objects.filter(
                posting=self, status=Match.MatchStatus.ACCEPTED
            ).values_list('profile_id', flat=True)
        )
        members.discard(self.creator_id)
        return members

    def accepted_count(self) -> int:
        return len(self.accepted_member_ids())

    def is_at_capacity(self) -> bool:
        return self.accepted_count() >= self.team_size_max

    def team_members(self):
        """Creator plus every accepted member."""
        from profiles.models import Profile

        ids = self.accepted_member_ids() | {self.creator_id}
        return list(Profile.objects.filter(pk__in=ids).order_by('created_at'))

    def is_team_member(self, profile) -> bool:
        return profile.pk == self.creator_id or profile.pk in self.accepted_member_ids()

    def mark_filled(self) -> None:
        if self.status != self.PostingStatus.FILLED:
            self.status = self.PostingStatus.FILLED
            self.save(update_fields=['status', 'updated_at'])

    def reopen(self) -> None:
        """Revert a filled posting to open after a seat frees up."""
        if self.status == self.PostingStatus.FILLED:
            self.status = self.PostingStatus.OPEN
            self.save(update_fields=['status', 'updated_at'])

    def fill_if_at_capacity(self) -> bool:
        if self.status == self.PostingStatus.OPEN and self.is_at_capacity():
            self.mark_filled()
            return True
        return False


class PostingSkill(TimestampedModel):
    """A skill the posting requires; descendant skills also satisfy it."""

    posting = models.ForeignKey(Posting, on_delete=models.CASCADE, related_name='required_skills')
    skill = models.ForeignKey('skills.SkillNode', on_delete=models.PROTECT, related_name='posting_requirements')
    min_level = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MaxValueValidator(10)]
    )

    class Meta:
        verbose_name = _('Posting Skill')
        verbose_name_plural = _('Posting Skills')
        constraints = [
            models.UniqueConstraint(fields=['posting', 'skill'], name='postings_postingskill_unique')
        ]

    def __str__(self):
        if self.min_level is not None:
            return f"{self.skill.name} (>= {self.min_level})"
        return self.skill.name


# =============================================================================
# APPLICATION
# =============================================================================

class Application(TimestampedModel):
    """A request by a profile to join a posting's team."""

    class ApplicationStatus(models.TextChoices):
        PENDING = 'pending', _('Pending')
        ACCEPTED = 'accepted', _('Accepted')
        REJECTED = 'rejected', _('Rejected')
        WAITLISTED = 'waitlisted', _('Waitlisted')
        WITHDRAWN = 'withdrawn', _('Withdrawn')

    WITHDRAWABLE_STATUSES = frozenset({
        ApplicationStatus.PENDING,
        ApplicationStatus.ACCEPTED,
        ApplicationStatus.WAITLISTED,
    })
    DECIDABLE_STATUSES = frozenset({
        ApplicationStatus.PENDING,
        ApplicationStatus.WAITLISTED,
    })

    posting = models.ForeignKey(Posting, on_delete=models.CASCADE, related_name='applications')
    applicant = models.ForeignKey(
        'profiles.Profile',
        on_delete=models.CASCADE,
        related_name='applications'
    )
    cover_message = models.TextField(blank=True)
    status = models.CharField(
        max_length=20,
        choices=ApplicationStatus.choices,
        default=ApplicationStatus.PENDING,
        db_index=True
    )
    decided_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = _('Application')
        verbose_name_plural = _('Applications')
        ordering = ['created_at']
        constraints = [
            models.UniqueConstraint(fields=['posting', 'applicant'], name='postings_application_unique')
        ]

    def __str__(self):
        return f"{self.applicant} -> {self.posting} ({self.status})"

    @property
    def can_withdraw(self) -> bool:
        return self.status in self.WITHDRAWABLE_STATUSES

    @property
    def can_be_decided(self) -> bool:
        return self.status in self.DECIDABLE_STATUSES

    def set_status(self, status: str) -> None:
        self.status = status
        fields = ['status', 'updated_at']
        if status in {self.ApplicationStatus.ACCEPTED, self.ApplicationStatus.REJECTED}:
            self.decided_at = timezone.now()
            fields.append('decided_at')
        self.save(update_fields=fields)

    def waitlist_position(self) -> int:
        """1-based place in the waitlist, by arrival order."""
        return Application.objects.filter(
            posting_id=self.posting_id,
            status=self.ApplicationStatus.WAITLISTED,
            created_at__lte=self.created_at,
        ).count()


# =============================================================================
# MEETING PROPOSALS
# =============================================================================

class MeetingProposal(TimestampedModel):
    """A proposed meeting time for a posting's team."""

    class ProposalStatus(models.TextChoices):
        PROPOSED = 'proposed', _('Proposed')
        CONFIRMED = 'confirmed', _('Confirmed')
        CANCELLED = 'cancelled', _('Cancelled')

    ACTIVE_STATUSES = frozenset({ProposalStatus.PROPOSED, ProposalStatus.CONFIRMED})

    posting = models.ForeignKey(Posting, on_delete=models.CASCADE, related_name='meeting_proposals')
    proposed_by = models.ForeignKey(
        'profiles.Profile',
        on_delete=models.CASCADE,
        related_name='meeting_proposals'
    )
    title = models.CharField(max_length=200, blank=True)
    description = models.TextField(blank=True)
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()
    status = models.CharField(
        max_length=20,
        choices=ProposalStatus.choices,
        default=ProposalStatus.PROPOSED
    )

    class Meta:
        verbose_name = _('Meeting Proposal')
        verbose_name_plural = _('Meeting Proposals')
        ordering = ['start_time']

    def __str__(self):
        return f"{self.title or 'Meeting'} @ {self.start_time:%Y-%m-%d %H:%M}"

    def clean(self):
        super().clean()
        if self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValidationError({'end_time': _('End time must be after start time.')})


class MeetingResponse(TimestampedModel):
    """A team member's availability for a proposed meeting."""

    class ResponseChoice(models.TextChoices):
        AVAILABLE = 'available', _('Available')
        UNAVAILABLE = 'unavailable', _('Unavailable')

    proposal = models.ForeignKey(MeetingProposal, on_delete=models.CASCADE, related_name='responses')
    responder = models.ForeignKey(
        'profiles.Profile',
        on_delete=models.CASCADE,
        related_name='meeting_responses'
    )
    response = models.CharField(max_length=20, choices=ResponseChoice.choices)

    class Meta:
        verbose_name = _('Meeting Response')
        verbose_name_plural = _('Meeting Responses')
        constraints = [
            models.UniqueConstraint(fields=['proposal', 'responder'], name='postings_meetingresponse_unique')
        ]

    def __str__(self):
        return f"{self.responder} {self.response}"
