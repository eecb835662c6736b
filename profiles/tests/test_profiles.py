"""
Tests for profile onboarding, edits and background re-embedding.
"""

import pytest
from django.contrib.auth.models import AnonymousUser

from api.exceptions import UnauthorizedError
from profiles.models import Profile
from profiles.services import get_actor_profile


@pytest.mark.django_db
class TestProfileMe:

    def test_get_without_profile_is_not_found(self, user_factory, api_client):
        user = user_factory()
        api_client.force_authenticate(user=user)

        response = api_client.get('/api/profiles/me/')

        assert response.status_code == 404
        assert response.data == {'error': {'code': 'NOT_FOUND', 'message': 'Profile not found'}}

    def test_patch_creates_profile(self, user_factory, api_client, django_capture_on_commit_callbacks):
        user = user_factory()
        api_client.force_authenticate(user=user)

        with django_capture_on_commit_callbacks(execute=True):
            response = api_client.patch(
                '/api/profiles/me/',
                {'full_name': 'Ada Lovelace', 'timezone': 'Europe/London'},
                format='json',
            )

        assert response.status_code == 200
        assert response.data['full_name'] == 'Ada Lovelace'
        assert Profile.objects.get(user=user).timezone == 'Europe/London'

    def test_invalid_timezone_rejected(self, profile, client_for):
        response = client_for(profile).patch('/api/profiles/me/', {'timezone': 'Mars/Olympus'}, format='json')
        assert response.status_code == 400
        assert response.data['error']['code'] == 'VALIDATION'

    def test_invalid_latitude_rejected(self, profile, client_for):
        response = client_for(profile).patch('/api/profiles/me/', {'latitude': 120}, format='json')
        assert response.status_code == 400

    def test_text_edit_refreshes_embedding(self, profile, client_for, django_capture_on_commit_callbacks):
        assert profile.embedding is None

        with django_capture_on_commit_callbacks(execute=True):
            response = client_for(profile).patch(
                '/api/profiles/me/', {'bio': 'Rust and embedded systems hacker'}, format='json'
            )

        assert response.status_code == 200
        profile.refresh_from_db()
        assert profile.needs_embedding is False
        assert len(profile.embedding) == 64

    def test_non_text_edit_does_not_flag(self, profile, client_for, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            client_for(profile).patch('/api/profiles/me/', {'hours_per_week': 10}, format='json')

        assert callbacks == []
        profile.refresh_from_db()
        assert profile.needs_embedding is False

    def test_skills_replaced(self, profile, client_for, skill_factory, profile_skill_factory):
        profile_skill_factory(profile=profile)
        python = skill_factory(name='Python')

        response = client_for(profile).patch(
            '/api/profiles/me/', {'skills': [{'skill': str(python.pk), 'level': 8}]}, format='json'
        )

        assert response.status_code == 200
        assert [(s['name'], s['level']) for s in response.data['skills']] == [('Python', 8)]
        assert profile.skill_levels() == {python.pk: 8}

    def test_public_profile(self, profile, other_profile, client_for):
        response = client_for(profile).get(f'/api/profiles/{other_profile.pk}/')
        assert response.status_code == 200
        assert 'notification_preferences' not in response.data


@pytest.mark.django_db
class TestGetActorProfile:

    def test_anonymous_user_unauthorized(self):
        with pytest.raises(UnauthorizedError):
            get_actor_profile(AnonymousUser())
