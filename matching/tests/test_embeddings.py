"""
Tests for embedding generation and the embedding tasks.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import openai
import pytest

from matching.embeddings import (
    LOCAL_MODEL,
    EmbeddingError,
    EmbeddingService,
    compose_posting_text,
    compose_profile_text,
    embed_instance,
    process_pending,
)
from matching.tasks import generate_embedding, process_pending_embeddings


class TestLocalEmbedding:

    def test_deterministic_unit_vector(self):
        service = EmbeddingService(api_key='', dimensions=32)

        first = service.generate('Rust developer looking for a hackathon team')
        second = service.generate('Rust developer looking for a hackathon team')

        assert first.vector == second.vector
        assert first.model == LOCAL_MODEL
        assert len(first.vector) == 32
        assert sum(x * x for x in first.vector) == pytest.approx(1.0)

    def test_empty_text_rejected(self):
        with pytest.raises(EmbeddingError):
            EmbeddingService(api_key='').generate('   ')


class TestOpenAIEmbedding:

    def _service(self):
        service = EmbeddingService(api_key='sk-test', model='text-embedding-3-small', dimensions=3)
        service.client = MagicMock()
        return service

    def test_vector_returned(self):
        service = self._service()
        service.client.embeddings.create.return_value = SimpleNamespace(
            data=[SimpleNamespace(embedding=[0.1, 0.2, 0.3])],
            usage=SimpleNamespace(total_tokens=7),
        )

        result = service.generate('hello world')

        assert result.vector == [0.1, 0.2, 0.3]
        assert result.tokens_used == 7
        service.client.embeddings.create.assert_called_once_with(
            input='hello world', model='text-embedding-3-small', dimensions=3
        )

    def test_api_error_wrapped(self):
        service = self._service()
        service.client.embeddings.create.side_effect = openai.OpenAIError('service unavailable')

        with pytest.raises(EmbeddingError):
            service.generate('hello world')

    def test_wrong_dimension_rejected(self):
        service = self._service()
        service.client.embeddings.create.return_value = SimpleNamespace(
            data=[SimpleNamespace(embedding=[0.1, 0.2])],
            usage=SimpleNamespace(total_tokens=2),
        )

        with pytest.raises(EmbeddingError):
            service.generate('hello world')


@pytest.mark.django_db
class TestComposition:

    def test_profile_text(self, profile_factory, profile_skill_factory, skill_factory):
        profile = profile_factory(headline='Backend dev', bio='', interests=['climbing'])
        profile_skill_factory(profile=profile, skill=skill_factory(name='Python'))

        text = compose_profile_text(profile)

        assert 'Headline: Backend dev' in text
        assert 'Skills: Python' in text
        assert 'Interests: climbing' in text
        assert 'About' not in text

    def test_posting_text(self, posting_factory, posting_skill_factory, skill_factory):
        posting = posting_factory(title='Chess bot', description='Build an engine')
        posting_skill_factory(posting=posting, skill=skill_factory(name='C++'))

        assert compose_posting_text(posting) == (
            "Title: Chess bot\n\nDescription: Build an engine\n\nRequired Skills: C++"
        )


@pytest.mark.django_db
class TestEmbedInstance:

    def test_embeds_and_clears_flag(self, profile_factory, settings):
        profile = profile_factory(bio='Data engineer', needs_embedding=True)

        assert embed_instance('profile', profile.pk) == 'embedded'

        profile.refresh_from_db()
        assert len(profile.embedding) == settings.EMBEDDING_DIMENSIONS
        assert profile.needs_embedding is False

    def test_empty_profile_skipped(self, profile_factory):
        profile = profile_factory(needs_embedding=True)

        assert embed_instance('profile', profile.pk) == 'skipped'

        profile.refresh_from_db()
        assert profile.embedding is None
        assert profile.needs_embedding is False

    def test_missing_row(self, posting):
        posting_pk = posting.pk
        posting.delete()
        assert embed_instance('posting', posting_pk) == 'missing'

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            embed_instance('team', 1)


@pytest.mark.django_db
class TestGenerateEmbeddingTask:

    def test_success(self, posting_factory):
        posting = posting_factory(needs_embedding=True)

        result = generate_embedding.apply(args=('posting', str(posting.pk))).get()

        assert result['status'] == 'embedded'
        posting.refresh_from_db()
        assert posting.needs_embedding is False

    def test_retries_then_reports_failure(self, profile_factory, monkeypatch):
        profile = profile_factory(bio='Designer', needs_embedding=True)
        calls = []

        def failing_generate(self, text):
            calls.append(text)
            raise EmbeddingError('vendor down')

        monkeypatch.setattr(EmbeddingService, 'generate', failing_generate)
        # Eager retries re-run through apply(); they only loop when errors do not propagate
        monkeypatch.setitem(generate_embedding.app.conf, 'CELERY_TASK_EAGER_PROPAGATES', False)

        result = generate_embedding.apply(args=('profile', str(profile.pk)), throw=False).get()

        assert len(calls) == 3
        assert result['status'] == 'failed'
        assert 'vendor down' in result['error']
        profile.refresh_from_db()
        assert profile.needs_embedding is True
        assert profile.embedding is None


@pytest.mark.django_db
class TestProcessPending:

    def test_batch_limits_and_order(self, profile_factory, posting_factory):
        profile_factory(bio='First', needs_embedding=True)
        profile_factory(bio='Second', needs_embedding=True)
        posting = posting_factory(needs_embedding=True)

        stats = process_pending(batch_size=2)

        assert stats == {'processed': 2, 'skipped': 0, 'failed': 0}
        posting.refresh_from_db()
        assert posting.needs_embedding is True

    def test_failures_counted_and_left_flagged(self, profile_factory):
        profile = profile_factory(bio='Flaky', needs_embedding=True)
        service = MagicMock()
        service.generate.side_effect = EmbeddingError('timeout')

        stats = process_pending(batch_size=10, service=service)

        assert stats == {'processed': 0, 'skipped': 0, 'failed': 1}
        profile.refresh_from_db()
        assert profile.needs_embedding is True

    def test_empty_rows_skipped(self, profile_factory, posting_factory):
        profile_factory(needs_embedding=True)
        posting_factory(needs_embedding=True)

        stats = process_pending(batch_size=10)

        assert stats == {'processed': 1, 'skipped': 1, 'failed': 0}

    def test_task_wraps_stats(self, posting_factory):
        posting_factory(needs_embedding=True)

        result = process_pending_embeddings.apply(kwargs={'batch_size': 5}).get()

        assert result == {'status': 'success', 'processed': 1, 'skipped': 0, 'failed': 0}
