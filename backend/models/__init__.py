"""
Pydantic models for API requests and responses
"""

from .base import BaseModel
from .responses import HealthResponse, WelcomeResponse
from .tasks import CreateTaskRequest, Task, TaskListResponse, UpdateTaskRequest

__all__ = [
    "BaseModel",
    "CreateTaskRequest",
    "HealthResponse",
    "Task",
    "TaskListResponse",
    "UpdateTaskRequest",
    "WelcomeResponse",
]
