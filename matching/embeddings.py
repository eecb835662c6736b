"""
Embedding generation for profiles and postings.

Text is composed from the fields that describe a profile or a posting and
turned into a vector:
- with OPENAI_API_KEY configured, through the OpenAI embeddings API
- otherwise through a deterministic local hashing embedding

Rows whose text changed carry needs_embedding=True. They are refreshed in
the background, either one by one right after the edit commits
(schedule_embedding) or in batches (process_pending).
"""

import hashlib
import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional

import openai
from django.conf import settings

from core.effects import BackgroundEffect, defer
from postings.models import Posting
from profiles.models import Profile

from .tasks import generate_embedding

logger = logging.getLogger(__name__)

LOCAL_MODEL = 'local_hashing'


class EmbeddingError(Exception):
    """Embedding generation failed."""


@dataclass
class EmbeddingResult:
    """Result of embedding generation."""
    vector: List[float]
    model: str
    tokens_used: int = 0


# ============================================================================
# Text composition
# ============================================================================

def compose_profile_text(profile: Profile) -> str:
    parts = []
    if profile.headline:
        parts.append(f"Headline: {profile.headline}")
    if profile.bio:
        parts.append(f"About: {profile.bio}")
    skills = [ps.skill.name for ps in profile.skills.select_related('skill').order_by('skill__name')]
    if skills:
        parts.append(f"Skills: {', '.join(skills)}")
    if profile.interests:
        parts.append(f"Interests: {', '.join(profile.interests)}")
    return '\n\n'.join(parts)


def compose_posting_text(posting: Posting) -> str:
    parts = [f"Title: {posting.title}", f"Description: {posting.description}"]
    skills = [ps.skill.name for ps in posting.required_skills.select_related('skill').order_by('skill__name')]
    if skills:
        parts.append(f"Required Skills: {', '.join(skills)}")
    return '\n\n'.join(parts)


# ============================================================================
# Embedding service
# ============================================================================

class EmbeddingService:
    """
    Service for generating text embeddings.

    The backend is chosen by configuration: OpenAI when an API key is set,
    the local hashing embedding otherwise. Failures raise EmbeddingError so
    callers can retry.
    """

    def __init__(self, api_key: str = None, model: str = None, dimensions: int = None):
        self.api_key = settings.OPENAI_API_KEY if api_key is None else api_key
        self.model = model or settings.EMBEDDING_MODEL
        self.dimensions = dimensions or settings.EMBEDDING_DIMENSIONS
        self.client = openai.OpenAI(api_key=self.api_key) if self.api_key else None

    @property
    def uses_openai(self) -> bool:
        return self.client is not None

    def generate(self, text: str) -> EmbeddingResult:
        text = (text or '').strip()
        if not text:
            raise EmbeddingError("Text cannot be empty")
        if self.uses_openai:
            return self._generate_openai_embedding(text)
        return self._generate_local_embedding(text)

    def _generate_openai_embedding(self, text: str) -> EmbeddingResult:
        try:
            response = self.client.embeddings.create(
                input=text,
                model=self.model,
                dimensions=self.dimensions,
            )
        except openai.OpenAIError as e:
            raise EmbeddingError(f"OpenAI embedding failed: {e}") from e

        vector = response.data[0].embedding
        if len(vector) != self.dimensions:
            raise EmbeddingError(f"Expected embedding dimension {self.dimensions}, got {len(vector)}")
        return EmbeddingResult(vector=vector, model=self.model, tokens_used=response.usage.total_tokens)

    def _generate_local_embedding(self, text: str) -> EmbeddingResult:
        """Hashing embedding: each word spreads weight over a few fixed positions."""
        words = text.lower().split()
        vector = [0.0] * self.dimensions

        for word in set(words):
            hash_int = int(hashlib.md5(word.encode()).hexdigest(), 16)
            tf = words.count(word) / len(words)
            idf = math.log(1 + 1 / (1 + words.count(word)))
            for j in range(min(10, self.dimensions)):
                vector[(hash_int + j * 7) % self.dimensions] += tf * idf

        magnitude = math.sqrt(sum(x * x for x in vector))
        if magnitude > 0:
            vector = [x / magnitude for x in vector]
        return EmbeddingResult(vector=vector, model=LOCAL_MODEL, tokens_used=len(words))


# ============================================================================
# Persistence
# ============================================================================

EMBEDDABLE = {
    'profile': (Profile, compose_profile_text),
    'posting': (Posting, compose_posting_text),
}


def embed_instance(kind: str, pk, service: EmbeddingService = None) -> str:
    """
    Refresh the stored embedding of one profile or posting.

    Returns 'embedded', 'skipped' (nothing to embed) or 'missing'. Raises
    EmbeddingError when generation fails.
    """
    if kind not in EMBEDDABLE:
        raise ValueError(f"Unknown embedding kind: {kind}")
    model, compose = EMBEDDABLE[kind]

    instance = model.objects.filter(pk=pk).first()
    if instance is None:
        logger.warning(f"{kind} {pk} no longer exists, embedding skipped")
        return 'missing'

    text = compose(instance)
    if not text.strip():
        model.objects.filter(pk=pk).update(embedding=None, needs_embedding=False)
        return 'skipped'

    result = (service or EmbeddingService()).generate(text)
    model.objects.filter(pk=pk).update(embedding=result.vector, needs_embedding=False)
    logger.info(f"Embedded {kind} {pk} with {result.model}")
    return 'embedded'


def schedule_embedding(kind: str, pk) -> BackgroundEffect:
    """Queue an embedding refresh once the current transaction commits."""
    return defer(f"embedding:{kind}", generate_embedding.delay, kind, str(pk))


def process_pending(batch_size: Optional[int] = None, service: EmbeddingService = None) -> Dict[str, int]:
    """
    Embed up to batch_size flagged rows, profiles first.

    A failing row is counted and left flagged for the next batch.
    """
    if batch_size is None:
        batch_size = settings.MESHIT.get('EMBEDDING_BATCH_SIZE', 50)
    service = service or EmbeddingService()
    stats = {'processed': 0, 'skipped': 0, 'failed': 0}

    remaining = batch_size
    for kind, (model, _compose) in EMBEDDABLE.items():
        if remaining <= 0:
            break
        pks = list(
            model.objects.filter(needs_embedding=True)
            .order_by('updated_at')
            .values_list('pk', flat=True)[:remaining]
        )
        remaining -= len(pks)
        for pk in pks:
            try:
                outcome = embed_instance(kind, pk, service)
            except EmbeddingError as e:
                logger.warning(f"Embedding failed for {kind} {pk}: {e}")
                stats['failed'] += 1
                continue
            if outcome == 'embedded':
                stats['processed'] += 1
            else:
                stats['skipped'] += 1

    logger.info(f"Embedding batch done: {stats}")
    return stats
