"""
Celery tasks for calendar synchronization.
"""

import logging
from typing import Any, Dict, List

from celery import shared_task
from django.utils.dateparse import parse_datetime

logger = logging.getLogger(__name__)


@shared_task(
    name='availability.tasks.sync_calendar_connection',
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    queue='calendar'
)
def sync_calendar_connection(self, connection_id: str, busy: List[Dict[str, str]]) -> Dict[str, Any]:
    """
    Project busy periods delivered by the calendar collaborator onto the
    weekly clock and store them for one connection.

    Args:
        connection_id: CalendarConnection primary key
        busy: [{'start': ISO-8601, 'end': ISO-8601}, ...]
    """
    from .calendar import BusyPeriod, sync_connection
    from .models import CalendarConnection

    try:
        connection = CalendarConnection.objects.select_related('profile').get(pk=connection_id)
    except CalendarConnection.DoesNotExist:
        logger.warning(f"Calendar connection {connection_id} no longer exists")
        return {'status': 'missing', 'connection_id': connection_id}

    periods = []
    for item in busy:
        start, end = parse_datetime(item.get('start') or ''), parse_datetime(item.get('end') or '')
        if start and end and end > start:
            periods.append(BusyPeriod(start, end))

    try:
        ranges = sync_connection(connection, periods)
    except Exception as exc:
        raise self.retry(exc=exc)

    return {'status': 'synced', 'connection_id': connection_id, 'ranges': ranges}
