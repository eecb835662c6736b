"""
Celery configuration for the MeshIt project.

This module configures Celery for async task processing with:
- Auto-discovery of tasks from all registered Django apps
- Dedicated queues for embeddings and calendar sync
- Periodic schedules for posting expiry and embedding batches
"""

import os

from celery import Celery
from celery.schedules import crontab
from datetime import timedelta
from kombu import Exchange, Queue

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'meshit.settings')

app = Celery('meshit')

# All celery-related configuration keys use a `CELERY_` prefix in settings.
app.config_from_object('django.conf:settings', namespace='CELERY')

app.autodiscover_tasks()


# ==================== QUEUE CONFIGURATION ====================

default_exchange = Exchange('default', type='direct')

app.conf.task_queues = (
    Queue('default', default_exchange, routing_key='default'),
    Queue('embeddings', default_exchange, routing_key='embeddings'),
    Queue('calendar', default_exchange, routing_key='calendar'),
)

app.conf.task_default_queue = 'default'
app.conf.task_default_exchange = 'default'
app.conf.task_default_routing_key = 'default'


# ==================== TASK ROUTING ====================

app.conf.task_routes = {
    'matching.tasks.*': {'queue': 'embeddings'},
    'availability.tasks.*': {'queue': 'calendar'},
}


# ==================== PERIODIC TASKS ====================

app.conf.beat_schedule = {
    'expire-overdue-postings-hourly': {
        'task': 'postings.tasks.expire_overdue_postings',
        'schedule': crontab(minute=5),
    },
    'process-pending-embeddings': {
        'task': 'matching.tasks.process_pending_embeddings',
        'schedule': timedelta(minutes=2),
    },
}
