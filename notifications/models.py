"""
Notification model.

In-app notifications only; browser/push delivery is handled by an external
collaborator reading these rows.
"""

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from core.models import TimestampedModel


class Notification(TimestampedModel):
    """A message shown in the recipient's notification inbox."""

    class Kind(models.TextChoices):
        APPLICATION_RECEIVED = 'application_received', _('Application received')
        APPLICATION_ACCEPTED = 'application_accepted', _('Application accepted')
        APPLICATION_REJECTED = 'application_rejected', _('Application rejected')
        WAITLIST_PROMOTED = 'waitlist_promoted', _('Promoted from waitlist')
        WAITLIST_SPOT_OPENED = 'waitlist_spot_opened', _('Waitlist spot opened')
        MATCH_FOUND = 'match_found', _('Match found')
        MEETING_PROPOSED = 'meeting_proposed', _('Meeting proposed')

    recipient = models.ForeignKey(
        'profiles.Profile',
        on_delete=models.CASCADE,
        related_name='notifications'
    )
    kind = models.CharField(max_length=40, choices=Kind.choices, db_index=True)
    title = models.CharField(max_length=200)
    body = models.TextField(blank=True)

    related_posting = models.ForeignKey(
        'postings.Posting',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )
    related_application = models.ForeignKey(
        'postings.Application',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )
    related_profile = models.ForeignKey(
        'profiles.Profile',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )

    is_read = models.BooleanField(default=False, db_index=True)
    read_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = _('Notification')
        verbose_name_plural = _('Notifications')
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.kind} -> {self.recipient_id}"

    def mark_as_read(self) -> None:
        if not self.is_read:
            self.is_read = True
            self.read_at = timezone.now()
            self.save(update_fields=['is_read', 'read_at', 'updated_at'])
