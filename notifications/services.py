"""
Notification service.

Notifications are secondary effects: they are created after the primary
change commits, and a failure to create one is logged and swallowed.

Usage:
    from notifications.services import notification_service

    notification_service.schedule(
        recipient=applicant,
        kind=Notification.Kind.APPLICATION_ACCEPTED,
        preference=NotificationType.APPLICATION_ACCEPTED,
        title="Request accepted",
        body=f'You have joined "{posting.title}"',
        related_posting=posting,
    )
"""

import logging
from typing import Optional

from django.utils import timezone

from core.effects import BackgroundEffect, defer

from .models import Notification
from .preferences import Channel, should_notify

logger = logging.getLogger(__name__)


class NotificationService:
    """Creates in-app notifications while honouring recipient preferences."""

    def notify(
        self,
        recipient,
        kind: str,
        title: str,
        body: str = '',
        preference: Optional[str] = None,
        related_posting=None,
        related_application=None,
        related_profile=None,
    ) -> Optional[Notification]:
        """
        Create the notification now.

        Returns None when the recipient opted out of this preference on the
        in-app channel.
        """
        if preference and not should_notify(recipient.notification_preferences, preference, Channel.IN_APP):
            logger.debug(f"Recipient {recipient.pk} opted out of {preference}")
            return None

        notification = Notification.objects.create(
            recipient=recipient,
            kind=kind,
            title=title,
            body=body,
            related_posting=related_posting,
            related_application=related_application,
            related_profile=related_profile,
        )
        logger.info(f"Notification {kind} created for profile {recipient.pk}")
        return notification

    def schedule(self, recipient, kind: str, title: str, body: str = '', **kwargs) -> BackgroundEffect:
        """Create the notification once the current transaction commits."""
        return defer(f"notify:{kind}", self.notify, recipient, kind, title, body, **kwargs)

    def get_unread_count(self, profile) -> int:
        return Notification.objects.filter(recipient=profile, is_read=False).count()

    def mark_all_as_read(self, profile) -> int:
        return Notification.objects.filter(recipient=profile, is_read=False).update(
            is_read=True, read_at=timezone.now()
        )


notification_service = NotificationService()
