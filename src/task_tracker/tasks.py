"""Task service: per-user task CRUD on top of the store."""

import logging
from typing import Any, Dict, List

from task_tracker.errors import TaskNotFoundError
from task_tracker.models import Task
from task_tracker.schemas import TaskCreateRequest
from task_tracker.store import MemoryStore

logger = logging.getLogger(__name__)


class TaskService:
    """All operations are scoped to the owning user.

    A task owned by someone else behaves exactly like a missing one.
    """

    def __init__(self, store: MemoryStore):
        self.store = store

    def list_tasks(self, user_id: int) -> List[Task]:
        tasks = self.store.list_tasks(user_id)
        logger.info(f"Tasks retrieved: user_id={user_id} count={len(tasks)}")
        return tasks

    def get_task(self, task_id: int, user_id: int) -> Task:
        task = self.store.find_task(task_id, user_id)
        if task is None:
            logger.info(f"Task not found: task_id={task_id} user_id={user_id}")
            raise TaskNotFoundError(task_id, user_id)
        return task

    def create_task(self, user_id: int, data: TaskCreateRequest) -> Task:
        task = self.store.add_task(
            user_id,
            title=data.title,
            description=data.description or '',
            completed=data.completed,
            priority=data.priority,
            due_date=data.due_date or None,
        )
        logger.info(
            f"Task created: task_id={task.id} user_id={user_id} "
            f"priority={task.priority} has_due_date={task.due_date is not None}"
        )
        return task

    def update_task(self, task_id: int, user_id: int, changes: Dict[str, Any]) -> Task:
        """Overwrite only the fields present in changes."""
        try:
            before = self.store.find_task(task_id, user_id)
            task = self.store.update_task(task_id, user_id, changes)
        except TaskNotFoundError:
            logger.info(f"Task update failed - task not found: task_id={task_id} user_id={user_id}")
            raise

        changed = {
            name: getattr(before, name) != getattr(task, name)
            for name in Task.EDITABLE_FIELDS
        } if before else {}
        logger.info(f"Task updated: task_id={task_id} user_id={user_id} changes={changed}")
        return task

    def delete_task(self, task_id: int, user_id: int) -> Task:
        try:
            task = self.store.remove_task(task_id, user_id)
        except TaskNotFoundError:
            logger.info(f"Task deletion failed - task not found: task_id={task_id} user_id={user_id}")
            raise
        logger.info(f"Task deleted: task_id={task.id} user_id={user_id} title={task.title!r}")
        return task

    def toggle_task(self, task_id: int, user_id: int) -> Task:
        try:
            task = self.store.toggle_task(task_id, user_id)
        except TaskNotFoundError:
            logger.info(f"Task toggle failed - task not found: task_id={task_id} user_id={user_id}")
            raise
        logger.info(
            f"Task completion toggled: task_id={task_id} user_id={user_id} "
            f"completed={task.completed}"
        )
        return task
