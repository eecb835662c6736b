"""
Notification API.

- GET  /api/notifications/              inbox of the current profile (?unread=true)
- POST /api/notifications/{id}/read/    mark one as read
- POST /api/notifications/read-all/     mark every unread one as read
- GET  /api/notifications/unread-count/
- GET/PUT /api/notifications/preferences/
"""

import logging

from rest_framework import mixins, permissions, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from profiles.services import get_actor_profile

from .models import Notification
from .preferences import merge_preferences
from .serializers import NotificationPreferencesSerializer, NotificationSerializer
from .services import notification_service

logger = logging.getLogger(__name__)


class NotificationViewSet(mixins.ListModelMixin,
                          mixins.RetrieveModelMixin,
                          viewsets.GenericViewSet):
    """
    ViewSet for the current profile's notifications.

    Actions:
    - read: mark one notification as read
    - read_all: mark all notifications as read
    - unread_count: number of unread notifications
    """
    serializer_class = NotificationSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        profile = get_actor_profile(self.request.user)
        queryset = Notification.objects.filter(recipient=profile)
        if self.request.query_params.get('unread') in ('true', '1'):
            queryset = queryset.filter(is_read=False)
        return queryset

    @action(detail=True, methods=['post'])
    def read(self, request, pk=None):
        notification = self.get_object()
        notification.mark_as_read()
        return Response(self.get_serializer(notification).data)

    @action(detail=False, methods=['post'], url_path='read-all')
    def read_all(self, request):
        profile = get_actor_profile(request.user)
        updated = notification_service.mark_all_as_read(profile)
        return Response({'updated': updated})

    @action(detail=False, methods=['get'], url_path='unread-count')
    def unread_count(self, request):
        profile = get_actor_profile(request.user)
        return Response({'unread': notification_service.get_unread_count(profile)})


class NotificationPreferencesView(APIView):
    """Read or update the current profile's notification preferences."""
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        profile = get_actor_profile(request.user)
        return Response(merge_preferences(profile.notification_preferences))

    def put(self, request):
        profile = get_actor_profile(request.user)
        serializer = NotificationPreferencesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        stored = merge_preferences(profile.notification_preferences)
        for channel, values in serializer.validated_data.items():
            stored[channel].update(values)
        profile.notification_preferences = stored
        profile.save(update_fields=['notification_preferences', 'updated_at'])
        logger.info(f"Updated notification preferences for profile {profile.pk}")
        return Response(stored)
