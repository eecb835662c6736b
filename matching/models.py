"""
Match model.

A Match is a scored (profile, posting) pairing produced by the matching
pipeline. It is created once, idempotently, and then moves through:

    pending -> applied -> accepted | declined
"""

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from core.models import TimestampedModel


class Match(TimestampedModel):
    """A scored pairing between a profile and a posting."""

    class MatchStatus(models.TextChoices):
        PENDING = 'pending', _('Pending')
        APPLIED = 'applied', _('Applied')
        ACCEPTED = 'accepted', _('Accepted')
        DECLINED = 'declined', _('Declined')

    profile = models.ForeignKey(
        'profiles.Profile',
        on_delete=models.CASCADE,
        related_name='matches'
    )
    posting = models.ForeignKey(
        'postings.Posting',
        on_delete=models.CASCADE,
        related_name='matches'
    )
    score = models.FloatField(validators=[MinValueValidator(0.0), MaxValueValidator(1.0)])
    score_breakdown = models.JSONField(null=True, blank=True)
    status = models.CharField(
        max_length=20,
        choices=MatchStatus.choices,
        default=MatchStatus.PENDING,
        db_index=True
    )
    responded_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = _('Match')
        verbose_name_plural = _('Matches')
        ordering = ['-score']
        constraints = [
            models.UniqueConstraint(fields=['profile', 'posting'], name='matching_match_unique')
        ]

    def __str__(self):
        return f"{self.profile} ~ {self.posting} ({self.score:.2f})"

    def set_status(self, status: str) -> None:
        self.status = status
        self.responded_at = timezone.now()
        self.save(update_fields=['status', 'responded_at', 'updated_at'])
