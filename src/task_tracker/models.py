"""Data models for users and tasks."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from werkzeug.security import generate_password_hash, check_password_hash


def _format_timestamp(value: datetime) -> str:
    return value.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def _parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value.replace('Z', '+00:00'))


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string, e.g. 2024-05-01T12:00:00.000Z."""
    return _format_timestamp(datetime.now(timezone.utc))


@dataclass
class User:
    """User model for authentication."""
    id: int
    email: str
    password_hash: str
    name: str
    created_at: str = field(default_factory=utc_now_iso)

    @staticmethod
    def hash_password(password: str) -> str:
        """Hash a password for storing."""
        return generate_password_hash(password, method='pbkdf2:sha256')

    def verify_password(self, password: str) -> bool:
        """Check if provided password matches hash."""
        return check_password_hash(self.password_hash, password)

    def to_public(self) -> Dict[str, Any]:
        """Fields safe to return to clients."""
        return {'id': self.id, 'email': self.email, 'name': self.name}


@dataclass
class Task:
    """A task owned by a single user."""
    id: int
    user_id: int
    title: Optional[str]
    description: Optional[str] = ''
    completed: Optional[bool] = False
    priority: Optional[str] = 'medium'
    due_date: Optional[str] = None
    created_at: str = field(default_factory=utc_now_iso)
    updated_at: str = field(default_factory=utc_now_iso)

    # Wire names of the fields a client may change
    EDITABLE_FIELDS = ('title', 'description', 'completed', 'priority', 'due_date')

    def touch(self) -> None:
        """Refresh updated_at. The new value is always later than the old one."""
        now = datetime.now(timezone.utc)
        now = now.replace(microsecond=now.microsecond // 1000 * 1000)
        last = _parse_timestamp(self.updated_at)
        if now <= last:
            now = last + timedelta(milliseconds=1)
        self.updated_at = _format_timestamp(now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'userId': self.user_id,
            'title': self.title,
            'description': self.description,
            'completed': self.completed,
            'priority': self.priority,
            'dueDate': self.due_date,
            'createdAt': self.created_at,
            'updatedAt': self.updated_at,
        }
