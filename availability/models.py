"""
Availability models.

- AvailabilityWindow: recurring (weekly) or specific-date window owned by
  exactly one profile or one posting
- CalendarConnection: an external calendar linked to a profile, with sync status
- CalendarBusyBlock: canonical weekly busy ranges derived from a connection,
  replaced wholesale on every sync
"""

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from core.models import TimestampedModel

from .normalizer import MINUTES_PER_DAY, parse_canonical_range, split_midnight_enabled


class AvailabilityWindow(TimestampedModel):
    """A block of time when a profile (or a posting's team) is available."""

    class WindowType(models.TextChoices):
        RECURRING = 'recurring', _('Recurring')
        SPECIFIC = 'specific', _('Specific date')

    profile = models.ForeignKey(
        'profiles.Profile',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='availability_windows'
    )
    posting = models.ForeignKey(
        'postings.Posting',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='availability_windows'
    )
    window_type = models.CharField(
        max_length=20,
        choices=WindowType.choices,
        default=WindowType.RECURRING
    )

    # Recurring windows
    day_of_week = models.PositiveSmallIntegerField(null=True, blank=True, help_text=_('0=Monday'))
    start_minutes = models.PositiveSmallIntegerField(null=True, blank=True)
    end_minutes = models.PositiveSmallIntegerField(null=True, blank=True)

    # Specific-date windows
    specific_date = models.DateField(null=True, blank=True)
    start_at = models.DateTimeField(null=True, blank=True)
    end_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = _('Availability Window')
        verbose_name_plural = _('Availability Windows')
        ordering = ['day_of_week', 'start_minutes', 'start_at']
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(profile__isnull=False, posting__isnull=True)
                    | Q(profile__isnull=True, posting__isnull=False)
                ),
                name='availability_window_single_owner'
            ),
        ]

    def __str__(self):
        if self.window_type == self.WindowType.RECURRING:
            return f"day {self.day_of_week} {self.start_minutes}-{self.end_minutes}"
        return f"{self.start_at} - {self.end_at}"

    def clean(self):
        super().clean()
        if bool(self.profile_id) == bool(self.posting_id):
            raise ValidationError(_('A window belongs to exactly one profile or one posting.'))

        if self.window_type == self.WindowType.RECURRING:
            if self.day_of_week is None or not 0 <= self.day_of_week <= 6:
                raise ValidationError({'day_of_week': _('Day of week must be between 0 and 6.')})
            if self.start_minutes is None or self.end_minutes is None:
                raise ValidationError(_('Recurring windows need start and end minutes.'))
            if not (0 <= self.start_minutes < MINUTES_PER_DAY and 0 <= self.end_minutes <= MINUTES_PER_DAY):
                raise ValidationError(_('Recurring window minutes must lie within 0-1440.'))
            if self.end_minutes <= self.start_minutes and not split_midnight_enabled():
                raise ValidationError(_('Recurring windows cannot cross midnight.'))
        else:
            if not self.start_at or not self.end_at:
                raise ValidationError(_('Specific windows need start and end instants.'))
            if self.end_at <= self.start_at:
                raise ValidationError({'end_at': _('End must be after start.')})


class CalendarConnection(TimestampedModel):
    """An external calendar linked to a profile."""

    class Provider(models.TextChoices):
        GOOGLE = 'google', _('Google Calendar')
        ICAL = 'ical', _('iCal feed')

    class SyncStatus(models.TextChoices):
        PENDING = 'pending', _('Pending')
        SYNCING = 'syncing', _('Syncing')
        SYNCED = 'synced', _('Synced')
        ERROR = 'error', _('Error')

    profile = models.ForeignKey(
        'profiles.Profile',
        on_delete=models.CASCADE,
        related_name='calendar_connections'
    )
    provider = models.CharField(max_length=20, choices=Provider.choices)
    sync_status = models.CharField(
        max_length=20,
        choices=SyncStatus.choices,
        default=SyncStatus.PENDING
    )
    sync_error = models.TextField(blank=True)
    last_synced_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = _('Calendar Connection')
        verbose_name_plural = _('Calendar Connections')

    def __str__(self):
        return f"{self.get_provider_display()} for {self.profile_id}"

    def mark_status(self, status: str, error: str = '') -> None:
        """Record a sync status change; a successful sync stamps last_synced_at."""
        self.sync_status = status
        self.sync_error = error[:2000] if error else ''
        fields = ['sync_status', 'sync_error', 'updated_at']
        if status == self.SyncStatus.SYNCED:
            self.last_synced_at = timezone.now()
            fields.append('last_synced_at')
        self.save(update_fields=fields)


class CalendarBusyBlock(TimestampedModel):
    """A canonical weekly busy range derived from an external calendar."""

    connection = models.ForeignKey(
        CalendarConnection,
        on_delete=models.CASCADE,
        related_name='busy_blocks'
    )
    profile = models.ForeignKey(
        'profiles.Profile',
        on_delete=models.CASCADE,
        related_name='busy_blocks'
    )
    canonical_range = models.CharField(max_length=32, help_text=_('"[start,end)" in week minutes'))

    class Meta:
        verbose_name = _('Calendar Busy Block')
        verbose_name_plural = _('Calendar Busy Blocks')

    def __str__(self):
        return self.canonical_range

    @property
    def interval(self):
        return parse_canonical_range(self.canonical_range)
