"""In-memory storage for users and tasks."""

import logging
import threading
from dataclasses import replace
from typing import Any, Dict, List, Optional, Tuple

from task_tracker.errors import TaskNotFoundError, UserExistsError
from task_tracker.models import Task, User

logger = logging.getLogger(__name__)


class MemoryStore:
    """
    Process-lifetime store for users and tasks.

    One instance is built per application (or per test) and handed to the
    services. Every read and write goes through a re-entrant lock, and the
    objects handed out are copies, so callers can never change stored state
    outside these methods. Ids come from counters starting at 1 and are never
    reused.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._users: List[User] = []
        self._tasks: List[Task] = []
        self._next_user_id = 1
        self._next_task_id = 1
        logger.debug("MemoryStore ready")

    # ---- users ----

    def add_user(self, email: str, password_hash: str, name: str) -> User:
        """Append a new user. The email check and the append happen atomically."""
        with self._lock:
            if self._find_user(email) is not None:
                raise UserExistsError(email)
            user = User(
                id=self._next_user_id,
                email=email,
                password_hash=password_hash,
                name=name,
            )
            self._next_user_id += 1
            self._users.append(user)
            return replace(user)

    def find_user_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            user = self._find_user(email)
            return replace(user) if user else None

    def get_user(self, user_id: int) -> Optional[User]:
        with self._lock:
            for user in self._users:
                if user.id == user_id:
                    return replace(user)
            return None

    def _find_user(self, email: str) -> Optional[User]:
        for user in self._users:
            if user.email == email:
                return user
        return None

    # ---- tasks ----

    def add_task(
        self,
        user_id: int,
        title: str,
        description: str = '',
        completed: bool = False,
        priority: str = 'medium',
        due_date: Optional[str] = None,
    ) -> Task:
        with self._lock:
            task = Task(
                id=self._next_task_id,
                user_id=user_id,
                title=title,
                description=description,
                completed=completed,
                priority=priority,
                due_date=due_date,
            )
            task.updated_at = task.created_at
            self._next_task_id += 1
            self._tasks.append(task)
            return replace(task)

    def list_tasks(self, user_id: int) -> List[Task]:
        """All tasks owned by user_id, in insertion order."""
        with self._lock:
            return [replace(t) for t in self._tasks if t.user_id == user_id]

    def find_task(self, task_id: int, user_id: int) -> Optional[Task]:
        with self._lock:
            index = self._task_index(task_id, user_id)
            return replace(self._tasks[index]) if index is not None else None

    def update_task(self, task_id: int, user_id: int, changes: Dict[str, Any]) -> Task:
        """Apply changes (snake_case field -> value) and refresh updated_at."""
        with self._lock:
            task = self._owned_task(task_id, user_id)
            for name, value in changes.items():
                if name not in Task.EDITABLE_FIELDS:
                    raise KeyError(name)
                setattr(task, name, value)
            task.touch()
            return replace(task)

    def toggle_task(self, task_id: int, user_id: int) -> Task:
        with self._lock:
            task = self._owned_task(task_id, user_id)
            task.completed = not task.completed
            task.touch()
            return replace(task)

    def remove_task(self, task_id: int, user_id: int) -> Task:
        with self._lock:
            index = self._task_index(task_id, user_id)
            if index is None:
                raise TaskNotFoundError(task_id, user_id)
            return self._tasks.pop(index)

    def _task_index(self, task_id: int, user_id: int) -> Optional[int]:
        for index, task in enumerate(self._tasks):
            if task.id == task_id and task.user_id == user_id:
                return index
        return None

    def _owned_task(self, task_id: int, user_id: int) -> Task:
        index = self._task_index(task_id, user_id)
        if index is None:
            raise TaskNotFoundError(task_id, user_id)
        return self._tasks[index]

    # ---- stats ----

    def counts(self) -> Tuple[int, int]:
        """Return (number of users, number of tasks)."""
        with self._lock:
            return len(self._users), len(self._tasks)
