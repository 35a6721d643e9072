"""
Task models
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from .base import BaseModel


class Task(BaseModel):
    """A stored task record"""

    id: int
    title: str
    description: str = ""
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @field_validator("description", mode="before")
    @classmethod
    def none_to_empty(cls, value):
        return "" if value is None else value

    @property
    def completed(self) -> bool:
        return self.completed_at is not None


def _require_title(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("title must not be empty")
    return value


class CreateTaskRequest(BaseModel):
    """Body of POST /tasks"""

    title: str = Field(..., max_length=255)
    description: str = ""

    check_title = field_validator("title")(_require_title)


class UpdateTaskRequest(BaseModel):
    """Body of PUT /tasks/{task_id}; omitted fields are left unchanged"""

    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None

    @field_validator("title")
    @classmethod
    def check_title(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else _require_title(value)


class TaskListResponse(BaseModel):
    """Body of GET /tasks"""

    message: str
    tasks: List[Task]
