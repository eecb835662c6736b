"""
Availability API.

- Calendar connections of the current profile (list, create, delete)
- POST connections/{id}/sync/ stores busy periods pushed by the calendar collaborator
  (a list of periods or a raw iCal document)
- GET busy-blocks/ lists the projected weekly busy ranges
"""

import logging

from django.conf import settings
from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from api.exceptions import ValidationFailedError
from core.effects import defer
from profiles.services import get_actor_profile

from .calendar import BusyPeriod, sync_connection
from .ical import ICalParseError, parse_ical_busy
from .models import CalendarBusyBlock, CalendarConnection
from .serializers import (
    CalendarBusyBlockSerializer,
    CalendarConnectionSerializer,
    CalendarSyncSerializer,
)
from .tasks import sync_calendar_connection

logger = logging.getLogger(__name__)


class CalendarConnectionViewSet(mixins.ListModelMixin,
                                mixins.CreateModelMixin,
                                mixins.RetrieveModelMixin,
                                mixins.DestroyModelMixin,
                                viewsets.GenericViewSet):
    """
    ViewSet for the current profile's calendar connections.

    Actions:
    - sync: replace the connection's busy blocks from pushed busy periods
      (large pushes are handed to the calendar queue and answered with 202)
    """
    serializer_class = CalendarConnectionSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        profile = get_actor_profile(self.request.user)
        return CalendarConnection.objects.filter(profile=profile).order_by('-created_at')

    def perform_create(self, serializer):
        serializer.save(profile=get_actor_profile(self.request.user))

    @action(detail=True, methods=['post'])
    def sync(self, request, pk=None):
        connection = self.get_object()
        serializer = CalendarSyncSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = serializer.validated_data
        if 'ics' in data:
            try:
                periods = parse_ical_busy(data['ics'], connection.profile.timezone)
            except ICalParseError as e:
                raise ValidationFailedError(str(e))
        else:
            periods = [BusyPeriod(p['start'], p['end']) for p in data['busy']]

        if len(periods) > settings.MESHIT.get('CALENDAR_SYNC_INLINE_LIMIT', 500):
            return self._sync_in_background(connection, periods)

        ranges = sync_connection(connection, periods)
        connection.refresh_from_db()
        return Response(
            {
                'connection': CalendarConnectionSerializer(connection).data,
                'canonical_ranges': ranges,
            },
            status=status.HTTP_200_OK
        )

    def _sync_in_background(self, connection, periods):
        connection.mark_status(CalendarConnection.SyncStatus.SYNCING)
        busy = [{'start': p.start.isoformat(), 'end': p.end.isoformat()} for p in periods]
        defer(f"calendar-sync:{connection.pk}", sync_calendar_connection.delay, str(connection.pk), busy)
        logger.info(f"Queued calendar sync of {len(busy)} periods for connection {connection.pk}")
        return Response(
            {
                'connection': CalendarConnectionSerializer(connection).data,
                'canonical_ranges': None,
            },
            status=status.HTTP_202_ACCEPTED
        )


class CalendarBusyBlockViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """Busy blocks of the current profile."""
    serializer_class = CalendarBusyBlockSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        profile = get_actor_profile(self.request.user)
        return CalendarBusyBlock.objects.filter(profile=profile).order_by('canonical_range')
