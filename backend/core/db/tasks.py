"""
Tasks Repository - Handles all task-related database operations
"""

from datetime import datetime, timezone
from typing import List, Optional

from core.errors import TaskNotFoundError, TaskValidationError
from core.logger import get_logger
from core.sqls import queries
from models.tasks import Task

from .base import BaseRepository

logger = get_logger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _clean_title(title: Optional[str]) -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        raise TaskValidationError("title is required")
    return cleaned


class TasksRepository(BaseRepository):
    """Repository for managing tasks in the database"""

    def create(self, title: str, description: str = "") -> Task:
        """Insert a new task

        Args:
            title: Task title, must not be blank
            description: Optional free text

        Returns:
            The stored task with its assigned id
        """
        title = _clean_title(title)
        now = _now()

        row = self._fetch_one(
            queries.INSERT_TASK, (title, description or "", now, now)
        )
        task = Task.model_validate(row)
        logger.debug(f"Created task: {task.id}")
        return task

    def get_by_id(self, task_id: int) -> Task:
        row = self._fetch_one(queries.SELECT_TASK_BY_ID, (task_id,))
        if row is None:
            raise TaskNotFoundError(task_id)
        return Task.model_validate(row)

    def list_all(self) -> List[Task]:
        rows = self._fetch_all(queries.SELECT_TASKS)
        return [Task.model_validate(row) for row in rows]

    def update(
        self,
        task_id: int,
        title: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Task:
        """Update title and/or description; None leaves a field unchanged"""
        with self._lock:
            current = self.get_by_id(task_id)
            new_title = current.title if title is None else _clean_title(title)
            new_description = current.description if description is None else description

            row = self._fetch_one(
                queries.UPDATE_TASK, (new_title, new_description, _now(), task_id)
            )

        if row is None:
            raise TaskNotFoundError(task_id)
        logger.debug(f"Updated task: {task_id}")
        return Task.model_validate(row)

    def set_completed(self, task_id: int, completed: bool) -> Task:
        """Mark a task completed or reopen it

        Completing an already completed task keeps its original completion time.
        """
        with self._lock:
            current = self.get_by_id(task_id)
            now = _now()

            if completed:
                completed_at = current.completed_at.isoformat() if current.completed_at else now
            else:
                completed_at = None

            row = self._fetch_one(
                queries.UPDATE_TASK_COMPLETION, (completed_at, now, task_id)
            )

        if row is None:
            raise TaskNotFoundError(task_id)
        logger.debug(f"Task {task_id} completed={completed}")
        return Task.model_validate(row)

    def delete(self, task_id: int) -> None:
        row = self._fetch_one(queries.DELETE_TASK, (task_id,))
        if row is None:
            raise TaskNotFoundError(task_id)
        logger.debug(f"Deleted task: {task_id}")
