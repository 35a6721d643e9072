"""
Task handlers

Each handler validates its input through a pydantic model and delegates to the
tasks repository. TaskNotFoundError and TaskValidationError are turned into
HTTP errors by the exception handlers installed in server.create_app().
"""

from fastapi import Depends

from core.db import DatabaseManager
from models.tasks import CreateTaskRequest, Task, TaskListResponse, UpdateTaskRequest

from . import api_handler, get_db


@api_handler(method="GET", path="/tasks")
def list_tasks(db: DatabaseManager = Depends(get_db)) -> TaskListResponse:
    """List all tasks ordered by id"""
    tasks = db.tasks.list_all()
    return TaskListResponse(message=f"Found {len(tasks)} task(s)", tasks=tasks)


@api_handler(method="POST", path="/tasks", status_code=201)
def create_task(
    body: CreateTaskRequest, db: DatabaseManager = Depends(get_db)
) -> Task:
    """Create a task"""
    return db.tasks.create(body.title, body.description)


@api_handler(method="GET", path="/tasks/{task_id}")
def get_task(task_id: int, db: DatabaseManager = Depends(get_db)) -> Task:
    """Get a task by id"""
    return db.tasks.get_by_id(task_id)


@api_handler(method="PUT", path="/tasks/{task_id}")
def update_task(
    task_id: int, body: UpdateTaskRequest, db: DatabaseManager = Depends(get_db)
) -> Task:
    """Update a task's title and/or description"""
    return db.tasks.update(task_id, title=body.title, description=body.description)


@api_handler(method="POST", path="/tasks/{task_id}/complete")
def complete_task(task_id: int, db: DatabaseManager = Depends(get_db)) -> Task:
    """Mark a task completed"""
    return db.tasks.set_completed(task_id, True)


@api_handler(method="POST", path="/tasks/{task_id}/reopen")
def reopen_task(task_id: int, db: DatabaseManager = Depends(get_db)) -> Task:
    """Clear a task's completion"""
    return db.tasks.set_completed(task_id, False)


@api_handler(method="DELETE", path="/tasks/{task_id}", status_code=204)
def delete_task(task_id: int, db: DatabaseManager = Depends(get_db)) -> None:
    """Delete a task"""
    db.tasks.delete(task_id)
