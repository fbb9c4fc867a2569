from __future__ import annotations


class TaskStoreError(Exception):
    """Base class for errors raised by task_store."""


class TaskNotFoundError(TaskStoreError):
    def __init__(self, task_id: int):
        self.task_id = task_id
        super().__init__(f"Task '{task_id}' not found")


class InvalidQueryError(TaskStoreError):
    """Raised when list parameters cannot be turned into a ListQuery."""


class StorageError(TaskStoreError):
    """Raised when the storage backend fails."""
