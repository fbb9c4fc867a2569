"""
Task storage package.

Exposes the Task record, its validated input schemas, and the repositories
that persist it.
"""

from .db import SQLiteRepository
from .exceptions import InvalidQueryError, StorageError, TaskNotFoundError, TaskStoreError
from .logging_config import setup_logging
from .models import Task
from .repositories import InMemoryRepository, ListQuery, Repository, get_repository
from .schemas import TaskCreate, TaskUpdate

__all__ = [
    "InMemoryRepository",
    "InvalidQueryError",
    "ListQuery",
    "Repository",
    "SQLiteRepository",
    "StorageError",
    "Task",
    "TaskCreate",
    "TaskNotFoundError",
    "TaskStoreError",
    "TaskUpdate",
    "get_repository",
    "setup_logging",
]
