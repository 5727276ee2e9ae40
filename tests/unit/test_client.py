"""Unit tests for the Python API client and the board helpers."""

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
import requests
from task_tracker.client import (
    APIError, NETWORK_ERROR, TaskTrackerClient, filter_tasks, is_overdue, task_stats,
)


def fake_response(status_code, body):
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.json.return_value = body
    return response


AUTH_BODY = {
    "message": "Login successful",
    "user": {"id": 1, "email": "a@x.com", "name": "A"},
    "token": "signed.jwt.token",
}


class TestClientAuth:

    @patch("task_tracker.client.requests.Session.request")
    def test_login_stores_token_and_sends_it(self, mock_request, tmp_path):
        token_file = tmp_path / "token"
        mock_request.return_value = fake_response(200, AUTH_BODY)

        client = TaskTrackerClient("http://api.test/api", token_path=token_file)
        client.login("a@x.com", "p")

        assert client.token == "signed.jwt.token"
        assert token_file.read_text() == "signed.jwt.token"
        assert client.user["name"] == "A"

        mock_request.return_value = fake_response(200, [])
        client.list_tasks()
        method, url = mock_request.call_args.args
        headers = mock_request.call_args.kwargs["headers"]
        assert (method, url) == ("GET", "http://api.test/api/tasks")
        assert headers["Authorization"] == "Bearer signed.jwt.token"

    @patch("task_tracker.client.requests.Session.request")
    def test_token_reloaded_from_file(self, mock_request, tmp_path):
        token_file = tmp_path / "token"
        token_file.write_text("saved-token")
        mock_request.return_value = fake_response(200, {"user": AUTH_BODY["user"]})

        client = TaskTrackerClient("http://api.test/api", token_path=token_file)
        user = client.me()

        assert client.token == "saved-token"
        assert user["email"] == "a@x.com"

    @patch("task_tracker.client.requests.Session.request")
    def test_rejected_token_is_discarded(self, mock_request, tmp_path):
        token_file = tmp_path / "token"
        token_file.write_text("stale-token")
        mock_request.return_value = fake_response(401, {"error": "Invalid token: User not found"})

        client = TaskTrackerClient("http://api.test/api", token_path=token_file)
        with pytest.raises(APIError) as exc:
            client.me()

        assert exc.value.status_code == 401
        assert exc.value.message == "Invalid token: User not found"
        assert client.token is None
        assert not token_file.exists()

    @patch("task_tracker.client.requests.Session.request")
    def test_logout_forgets_token(self, mock_request, tmp_path):
        token_file = tmp_path / "token"
        token_file.write_text("saved-token")
        mock_request.return_value = fake_response(200, {"message": "Logged out successfully"})

        client = TaskTrackerClient("http://api.test/api", token_path=token_file)
        client.logout()

        assert client.token is None
        assert not token_file.exists()


class TestClientErrors:

    @patch("task_tracker.client.requests.Session.request")
    def test_server_error_message_surfaces(self, mock_request):
        mock_request.return_value = fake_response(400, {"error": "User already exists"})

        client = TaskTrackerClient("http://api.test/api")
        with pytest.raises(APIError) as exc:
            client.register("a@x.com", "p", "A")

        assert exc.value.status_code == 400
        assert str(exc.value) == "User already exists"

    @patch("task_tracker.client.requests.Session.request")
    def test_network_failure(self, mock_request):
        mock_request.side_effect = requests.ConnectionError("refused")

        client = TaskTrackerClient("http://api.test/api", token="t")
        with pytest.raises(APIError) as exc:
            client.list_tasks()

        assert exc.value.status_code is None
        assert exc.value.message == NETWORK_ERROR

    @patch("task_tracker.client.requests.Session.request")
    def test_update_sends_only_given_fields(self, mock_request):
        mock_request.return_value = fake_response(200, {"id": 3})

        client = TaskTrackerClient("http://api.test/api", token="t")
        client.update_task(3, completed=False, due_date=None)

        assert mock_request.call_args.kwargs["json"] == {"completed": False, "dueDate": None}


class TestBoardHelpers:

    TASKS = [
        {"id": 1, "completed": True, "dueDate": None},
        {"id": 2, "completed": False, "dueDate": "2000-01-01"},
        {"id": 3, "completed": False, "dueDate": "2999-01-01"},
    ]

    def test_filters(self):
        assert [t["id"] for t in filter_tasks(self.TASKS, "all")] == [1, 2, 3]
        assert [t["id"] for t in filter_tasks(self.TASKS, "completed")] == [1]
        assert [t["id"] for t in filter_tasks(self.TASKS, "pending")] == [2, 3]

    def test_overdue(self):
        now = datetime(2024, 6, 1, tzinfo=timezone.utc)

        assert is_overdue(self.TASKS[1], now)
        assert not is_overdue(self.TASKS[2], now)
        assert not is_overdue({"completed": True, "dueDate": "2000-01-01"}, now)
        assert not is_overdue({"completed": False, "dueDate": "not a date"}, now)

    def test_stats(self):
        assert task_stats(self.TASKS) == {"total": 3, "completed": 1, "pending": 2}
