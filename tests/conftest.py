"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path
import pytest

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from task_tracker.interface.web_app import create_app
from task_tracker.store import MemoryStore

TEST_SECRET = 'test-secret-key-that-is-long-enough-for-hs256'


@pytest.fixture
def store():
    """Fresh, empty store for every test."""
    return MemoryStore()


@pytest.fixture
def app(store):
    """Flask app bound to the per-test store."""
    return create_app(store, {'TESTING': True, 'JWT_SECRET_KEY': TEST_SECRET})


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def register_user(client):
    """Register a user through the API and return the response body."""
    def _register(email="a@x.com", password="p", name="A"):
        response = client.post('/api/auth/register', json={
            "email": email, "password": password, "name": name
        })
        assert response.status_code == 201, response.get_json()
        return response.get_json()
    return _register


@pytest.fixture
def auth_headers(register_user):
    """Register a user and return Bearer headers for it."""
    def _headers(email="a@x.com", password="p", name="A"):
        body = register_user(email, password, name)
        return {"Authorization": f"Bearer {body['token']}"}
    return _headers


@pytest.fixture
def create_task(client):
    """Create a task through the API and return it."""
    def _create(headers, **fields):
        payload = {"title": "Buy milk"}
        payload.update(fields)
        response = client.post('/api/tasks', json=payload, headers=headers)
        assert response.status_code == 201, response.get_json()
        return response.get_json()
    return _create


# Sample users for consistency
@pytest.fixture
def test_users():
    return {
        "alice": {"email": "alice@example.com", "password": "alice-pw", "name": "Alice"},
        "bob": {"email": "bob@example.com", "password": "bob-pw", "name": "Bob"},
    }
