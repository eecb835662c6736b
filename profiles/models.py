"""
Profile models.

A Profile is the person behind a user account: what they can do (skills with
levels), when they are free (availability windows), where they are, and how
they want to be notified.
"""

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from availability.timezones import validate_timezone
from core.models import TimestampedModel


def validate_timezone_name(value):
    if not validate_timezone(value):
        raise ValidationError(_('%(value)s is not a valid IANA timezone.'), params={'value': value})


class Profile(TimestampedModel):
    """A person who can create postings and join teams."""

    class LocationMode(models.TextChoices):
        REMOTE = 'remote', _('Remote')
        IN_PERSON = 'in_person', _('In person')
        EITHER = 'either', _('Either')

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='profile'
    )
    full_name = models.CharField(max_length=200, blank=True)
    headline = models.CharField(max_length=200, blank=True)
    bio = models.TextField(blank=True)
    interests = models.JSONField(default=list, blank=True)
    languages = models.JSONField(default=list, blank=True)

    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)
    location_mode = models.CharField(
        max_length=20,
        choices=LocationMode.choices,
        default=LocationMode.EITHER
    )
    remote_preference = models.PositiveSmallIntegerField(
        default=50,
        validators=[MaxValueValidator(100)],
        help_text=_('0 = strongly prefers in person, 100 = strongly prefers remote')
    )
    timezone = models.CharField(max_length=64, default='UTC', validators=[validate_timezone_name])
    hours_per_week = models.PositiveSmallIntegerField(null=True, blank=True)

    embedding = models.JSONField(null=True, blank=True)
    needs_embedding = models.BooleanField(default=True, db_index=True)
    notification_preferences = models.JSONField(null=True, blank=True)

    class Meta:
        verbose_name = _('Profile')
        verbose_name_plural = _('Profiles')

    def __str__(self):
        return self.full_name or self.user.get_username()

    @property
    def display_name(self) -> str:
        return self.full_name or 'Someone'

    def skill_levels(self):
        """Mapping of skill node id to declared level."""
        return {ps.skill_id: ps.level for ps in self.skills.all()}


class ProfileSkill(TimestampedModel):
    """A skill held by a profile, with a self-assessed level from 0 to 10."""

    profile = models.ForeignKey(Profile, on_delete=models.CASCADE, related_name='skills')
    skill = models.ForeignKey('skills.SkillNode', on_delete=models.PROTECT, related_name='profile_skills')
    level = models.PositiveSmallIntegerField(
        default=5,
        validators=[MinValueValidator(0), MaxValueValidator(10)]
    )

    class Meta:
        verbose_name = _('Profile Skill')
        verbose_name_plural = _('Profile Skills')
        constraints = [
            models.UniqueConstraint(fields=['profile', 'skill'], name='profiles_profileskill_unique')
        ]

    def __str__(self):
        return f"{self.skill.name} ({self.level})"
