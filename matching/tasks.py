"""
Celery tasks for embeddings.
"""

import logging
from typing import Any, Dict

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(
    name='matching.tasks.generate_embedding',
    bind=True,
    max_retries=2,
    queue='embeddings'
)
def generate_embedding(self, kind: str, pk: str) -> Dict[str, Any]:
    """
    Refresh the embedding of one profile or posting.

    Retries twice with a linear backoff (1s, 2s). The final failure is
    logged and reported in the result, never raised: the edit that
    triggered it has already been saved and the row stays flagged for the
    next batch.
    """
    from .embeddings import EmbeddingError, embed_instance

    try:
        outcome = embed_instance(kind, pk)
    except EmbeddingError as exc:
        if self.request.retries < self.max_retries:
            raise self.retry(exc=exc, countdown=self.request.retries + 1)
        logger.warning(f"Giving up on embedding for {kind} {pk}: {exc}")
        return {'status': 'failed', 'kind': kind, 'id': pk, 'error': str(exc)}

    return {'status': outcome, 'kind': kind, 'id': pk}


@shared_task(
    name='matching.tasks.process_pending_embeddings',
    bind=True,
    max_retries=1,
    queue='embeddings'
)
def process_pending_embeddings(self, batch_size: int = None) -> Dict[str, Any]:
    """Embed a batch of flagged profiles and postings."""
    from .embeddings import process_pending

    stats = process_pending(batch_size=batch_size)
    return {'status': 'success', **stats}
