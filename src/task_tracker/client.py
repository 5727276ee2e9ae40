"""
Python client for the Task Tracker API.

Mirrors what the browser client does: keeps the issued token (optionally in a
file, like the browser's single localStorage key) and sends it as a Bearer
header. Also carries the board helpers the dashboard uses to filter and
count tasks.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:3000/api"
NETWORK_ERROR = "Network error. Please try again."


class APIError(Exception):
    """Non-2xx response (status_code set) or network failure (status_code None)."""

    def __init__(self, status_code: Optional[int], message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class TaskTrackerClient:
    def __init__(self, base_url: str = DEFAULT_BASE_URL, token: Optional[str] = None,
                 token_path: Optional[Path] = None, timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.token_path = Path(token_path) if token_path else None
        self.timeout = timeout
        self.session = requests.Session()
        self.token = token or self._load_token()
        self.user: Optional[Dict[str, Any]] = None

    # ---- token persistence ----

    def _load_token(self) -> Optional[str]:
        if self.token_path and self.token_path.exists():
            return self.token_path.read_text(encoding="utf-8").strip() or None
        return None

    def _save_token(self, token: Optional[str]) -> None:
        self.token = token
        if not self.token_path:
            return
        if token:
            self.token_path.parent.mkdir(parents=True, exist_ok=True)
            self.token_path.write_text(token, encoding="utf-8")
        elif self.token_path.exists():
            self.token_path.unlink()

    # ---- transport ----

    def _request(self, method: str, path: str, payload: Optional[Dict] = None,
                 auth: bool = True) -> Any:
        headers = {"Content-Type": "application/json"}
        if auth and self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            response = self.session.request(
                method,
                f"{self.base_url}{path}",
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"{method} {path} failed: {e}")
            raise APIError(None, NETWORK_ERROR) from e

        try:
            data = response.json()
        except ValueError:
            data = {}

        if not response.ok:
            message = data.get("error") if isinstance(data, dict) else None
            raise APIError(response.status_code, message or f"Request failed ({response.status_code})")
        return data

    # ---- auth ----

    def health(self) -> Dict[str, Any]:
        return self._request("GET", "/health", auth=False)

    def register(self, email: str, password: str, name: str) -> Dict[str, Any]:
        data = self._request("POST", "/auth/register",
                             {"email": email, "password": password, "name": name}, auth=False)
        self._save_token(data["token"])
        self.user = data["user"]
        return data

    def login(self, email: str, password: str) -> Dict[str, Any]:
        data = self._request("POST", "/auth/login",
                             {"email": email, "password": password}, auth=False)
        self._save_token(data["token"])
        self.user = data["user"]
        return data

    def logout(self) -> Dict[str, Any]:
        """Tell the server, then forget the token locally."""
        try:
            return self._request("POST", "/auth/logout", auth=False)
        finally:
            self._save_token(None)
            self.user = None

    def me(self) -> Dict[str, Any]:
        """Resolve the stored token; a rejected token is discarded."""
        try:
            data = self._request("GET", "/auth/me")
        except APIError as e:
            if e.status_code == 401:
                self._save_token(None)
                self.user = None
            raise
        self.user = data["user"]
        return self.user

    # ---- tasks ----

    def list_tasks(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/tasks")

    def get_task(self, task_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/tasks/{task_id}")

    def create_task(self, title: str, description: str = "", priority: str = "medium",
                    due_date: Optional[str] = None) -> Dict[str, Any]:
        return self._request("POST", "/tasks", {
            "title": title,
            "description": description,
            "priority": priority,
            "dueDate": due_date,
        })

    def update_task(self, task_id: int, **fields) -> Dict[str, Any]:
        """Send only the given fields; due_date is accepted as an alias of dueDate."""
        if "due_date" in fields:
            fields["dueDate"] = fields.pop("due_date")
        return self._request("PUT", f"/tasks/{task_id}", fields)

    def delete_task(self, task_id: int) -> Dict[str, Any]:
        return self._request("DELETE", f"/tasks/{task_id}")

    def toggle_task(self, task_id: int) -> Dict[str, Any]:
        return self._request("PATCH", f"/tasks/{task_id}/toggle")


# ==================== Board helpers ====================

def filter_tasks(tasks: List[Dict[str, Any]], mode: str = "all") -> List[Dict[str, Any]]:
    """Apply the dashboard filter: all, completed or pending."""
    if mode == "completed":
        return [t for t in tasks if t.get("completed")]
    if mode == "pending":
        return [t for t in tasks if not t.get("completed")]
    return list(tasks)


def _parse_due_date(value: str) -> Optional[datetime]:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_overdue(task: Dict[str, Any], now: Optional[datetime] = None) -> bool:
    """Incomplete task whose due date has passed. Unparseable dates never are."""
    if task.get("completed") or not task.get("dueDate"):
        return False
    due = _parse_due_date(task["dueDate"])
    if due is None:
        return False
    return due < (now or datetime.now(timezone.utc))


def task_stats(tasks: List[Dict[str, Any]]) -> Dict[str, int]:
    completed = sum(1 for t in tasks if t.get("completed"))
    return {"total": len(tasks), "completed": completed, "pending": len(tasks) - completed}
