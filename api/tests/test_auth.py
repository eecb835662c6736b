"""
Tests for token authentication and the API schema.
"""

import pytest


@pytest.mark.django_db
class TestTokenAuthentication:

    def test_obtain_and_use_token(self, api_client, profile):
        response = api_client.post(
            '/api/auth/token/',
            {'username': profile.user.username, 'password': 'testpass123'},
            format='json',
        )
        assert response.status_code == 200
        assert {'access', 'refresh'} <= set(response.data)

        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")
        me = api_client.get('/api/profiles/me/')

        assert me.status_code == 200
        assert me.data['id'] == str(profile.pk)

    def test_bad_credentials(self, api_client, profile):
        response = api_client.post(
            '/api/auth/token/',
            {'username': profile.user.username, 'password': 'wrong'},
            format='json',
        )

        assert response.status_code == 401
        assert response.data['error']['code'] == 'UNAUTHORIZED'

    def test_garbage_token(self, api_client):
        api_client.credentials(HTTP_AUTHORIZATION='Bearer not-a-token')

        response = api_client.get('/api/notifications/')

        assert response.status_code == 401
        assert response.data['error']['code'] == 'UNAUTHORIZED'


@pytest.mark.django_db
class TestSchema:

    def test_schema_served(self, api_client):
        response = api_client.get('/api/schema/')
        assert response.status_code == 200

    def test_health(self, api_client):
        response = api_client.get('/health/')

        assert response.status_code == 200
        assert response.json()['database'] == 'connected'
