"""
Celery tasks for postings.
"""

import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    name='postings.tasks.expire_overdue_postings',
    max_retries=3,
    default_retry_delay=300,
)
def expire_overdue_postings(self):
    """
    Flip open postings past their deadline to expired.

    Returns:
        dict: Number of postings expired.
    """
    from .services import lifecycle_service

    try:
        expired = lifecycle_service.expire_overdue()
    except Exception as exc:
        logger.error(f"Error expiring postings: {exc}")
        raise self.retry(exc=exc)

    if expired:
        logger.info(f"Expired {expired} overdue postings")
    return {'status': 'success', 'expired': expired}
