"""
Notification preferences.

Preferences are stored on the profile as a JSON document keyed by channel
and then by notification type:

    {"in_app": {"match_found": true, ...}, "browser": {"match_found": false, ...}}

Anything missing (the whole document, a channel, or a type) means "notify".
"""

import copy
from typing import Dict, Optional


class NotificationType:
    INTEREST_RECEIVED = 'interest_received'
    APPLICATION_ACCEPTED = 'application_accepted'
    APPLICATION_REJECTED = 'application_rejected'
    FRIEND_REQUEST = 'friend_request'
    SEQUENTIAL_INVITE = 'sequential_invite'
    NEW_MESSAGE = 'new_message'
    MATCH_FOUND = 'match_found'

    ALL = (
        INTEREST_RECEIVED,
        APPLICATION_ACCEPTED,
        APPLICATION_REJECTED,
        FRIEND_REQUEST,
        SEQUENTIAL_INVITE,
        NEW_MESSAGE,
        MATCH_FOUND,
    )


class Channel:
    IN_APP = 'in_app'
    BROWSER = 'browser'

    ALL = (IN_APP, BROWSER)


DEFAULT_PREFERENCES: Dict[str, Dict[str, bool]] = {
    Channel.IN_APP: {t: True for t in NotificationType.ALL},
    Channel.BROWSER: {
        **{t: True for t in NotificationType.ALL},
        NotificationType.APPLICATION_REJECTED: False,
        NotificationType.MATCH_FOUND: False,
    },
}


def should_notify(prefs: Optional[Dict], notification_type: str, channel: str) -> bool:
    """Whether a notification of this type goes out on this channel."""
    if not prefs:
        return True
    channel_prefs = prefs.get(channel)
    if not isinstance(channel_prefs, dict):
        return True
    value = channel_prefs.get(notification_type)
    return True if value is None else bool(value)


def merge_preferences(prefs: Optional[Dict]) -> Dict[str, Dict[str, bool]]:
    """Complete a stored (possibly partial) document with the defaults."""
    merged = copy.deepcopy(DEFAULT_PREFERENCES)
    for channel, values in (prefs or {}).items():
        if channel not in merged or not isinstance(values, dict):
            continue
        for notification_type, enabled in values.items():
            if notification_type in merged[channel]:
                merged[channel][notification_type] = bool(enabled)
    return merged
