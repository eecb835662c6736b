"""
Notification serializers.
"""

from rest_framework import serializers

from .models import Notification
from .preferences import DEFAULT_PREFERENCES


class NotificationSerializer(serializers.ModelSerializer):
    """Inbox entry."""

    class Meta:
        model = Notification
        fields = [
            'id', 'kind', 'title', 'body',
            'related_posting', 'related_application', 'related_profile',
            'is_read', 'read_at', 'created_at',
        ]
        read_only_fields = fields


class NotificationPreferencesSerializer(serializers.Serializer):
    """
    Partial preference document: {channel: {type: bool}}.

    Unknown channels or notification types are rejected.
    """
    in_app = serializers.DictField(child=serializers.BooleanField(), required=False)
    browser = serializers.DictField(child=serializers.BooleanField(), required=False)

    def validate(self, attrs):
        for channel, values in attrs.items():
            unknown = set(values) - set(DEFAULT_PREFERENCES[channel])
            if unknown:
                raise serializers.ValidationError(
                    {channel: f"Unknown notification types: {', '.join(sorted(unknown))}"}
                )
        return attrs
