from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from threading import RLock
from typing import Dict, Iterable, List, Optional, Tuple

from .exceptions import InvalidQueryError, TaskNotFoundError
from .models import Task, as_calendar_date
from .schemas import TaskCreate, TaskUpdate
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

SORT_FIELDS = ("id", "title", "due_date")
MAX_LIMIT = 1000


@dataclass(frozen=True)
class ListQuery:
    """
    Query parameters for listing tasks.
    """
    limit: int = 50
    offset: int = 0
    completed: Optional[bool] = None
    search: Optional[str] = None
    sort: str = "id"  # allowed: id, -id, title, -title, due_date, -due_date

    @property
    def descending(self) -> bool:
        return self.sort.startswith("-")

    @property
    def sort_field(self) -> str:
        field = self.sort.lstrip("-")
        return field if field in SORT_FIELDS else "id"

    # PUBLIC_INTERFACE
    @classmethod
    def from_params(
        cls,
        limit: int = 50,
        offset: int = 0,
        completed: Optional[bool] = None,
        search: Optional[str] = None,
        sort: Optional[str] = "id",
        order: Optional[str] = None,
    ) -> "ListQuery":
        """
        Build a ListQuery from raw parameters.

        - sort: one of id, title, due_date, optionally prefixed with '-' for descending
        - order: 'asc' or 'desc'; if provided, it overrides the direction in sort
        - search: stripped; blank means no search

        Raises:
            InvalidQueryError if any parameter is out of range or unknown.
        """
        if limit < 0 or limit > MAX_LIMIT:
            raise InvalidQueryError(f"limit must be between 0 and {MAX_LIMIT}")
        if offset < 0:
            raise InvalidQueryError("offset must be >= 0")

        normalized_sort = (sort or "id").strip().lower()
        field = normalized_sort.lstrip("-")
        if field not in SORT_FIELDS:
            raise InvalidQueryError(f"sort must be one of {', '.join(SORT_FIELDS)}")

        if order:
            ord_norm = order.strip().lower()
            if ord_norm not in {"asc", "desc"}:
                raise InvalidQueryError("order must be 'asc' or 'desc'")
            normalized_sort = f"-{field}" if ord_norm == "desc" else field

        return cls(
            limit=limit,
            offset=offset,
            completed=completed,
            search=(search.strip() or None) if search else None,
            sort=normalized_sort,
        )


def apply_update(task: Task, data: TaskUpdate) -> Task:
    for name, value in data.changes().items():
        setattr(task, name, value)
    return task


# PUBLIC_INTERFACE
class Repository(ABC):
    """Abstract repository contract for task storage backends."""

    @abstractmethod
    def save(self, task: Task) -> Task:
        """
        Insert a new task (id is None) or overwrite an existing one.

        The given task is not mutated; the stored copy is returned, with its
        id assigned for inserts.

        Raises:
            TaskNotFoundError if task.id is set but unknown to this repository.
        """

    @abstractmethod
    def get(self, task_id: int) -> Optional[Task]:
        """Return a Task by id, or None if not found."""

    @abstractmethod
    def update(self, task_id: int, data: TaskUpdate) -> Optional[Task]:
        """Update the fields set in data. Return the updated task or None if not found."""

    @abstractmethod
    def delete(self, task_id: int) -> bool:
        """Delete a Task by id. Return True if deleted, False if not found."""

    @abstractmethod
    def list(self, query: Optional[ListQuery] = None) -> Tuple[List[Task], int]:
        """
        Return a slice of Tasks and total count matching filters.
        - Supports limit/offset
        - Filter by completed
        - Substring search across title and description (case-insensitive)
        - Sorting by id/title/due_date (asc/desc), null values last
        """

    @abstractmethod
    def count(self, completed: Optional[bool] = None) -> int:
        """Return the number of stored tasks, optionally filtered by completion."""

    @abstractmethod
    def toggle_completed(self, task_id: int) -> Optional[Task]:
        """Flip the completed flag. Return the updated task or None if not found."""

    # PUBLIC_INTERFACE
    def create(self, data: TaskCreate) -> Task:
        """Create and return a new Task from validated input."""
        return self.save(
            Task(
                title=data.title,
                description=data.description,
                due_date=data.due_date,
                completed=data.completed,
            )
        )


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository suitable for testing and default runtime.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: Dict[int, Task] = {}
        self._next_id = 1

    def _allocate_id(self) -> int:
        with self._lock:
            i = self._next_id
            self._next_id += 1
            return i

    def save(self, task: Task) -> Task:
        stored = task.copy()
        stored.due_date = as_calendar_date(stored.due_date)
        with self._lock:
            if stored.id is None:
                stored.id = self._allocate_id()
                logger.info("Created task %s", stored.id)
            elif stored.id not in self._items:
                raise TaskNotFoundError(stored.id)
            self._items[stored.id] = stored
            return stored.copy()

    def get(self, task_id: int) -> Optional[Task]:
        with self._lock:
            item = self._items.get(task_id)
            return None if item is None else item.copy()

    def update(self, task_id: int, data: TaskUpdate) -> Optional[Task]:
        with self._lock:
            existing = self._items.get(task_id)
            if existing is None:
                return None
            updated = apply_update(existing.copy(), data)
            self._items[task_id] = updated
            return updated.copy()

    def toggle_completed(self, task_id: int) -> Optional[Task]:
        with self._lock:
            existing = self._items.get(task_id)
            if existing is None:
                return None
            existing.completed = not existing.completed
            return existing.copy()

    def delete(self, task_id: int) -> bool:
        with self._lock:
            removed = self._items.pop(task_id, None) is not None
        if removed:
            logger.info("Deleted task %s", task_id)
        return removed

    def count(self, completed: Optional[bool] = None) -> int:
        with self._lock:
            if completed is None:
                return len(self._items)
            return sum(1 for t in self._items.values() if t.completed == completed)

    def list(self, query: Optional[ListQuery] = None) -> Tuple[List[Task], int]:
        q = query or ListQuery()
        logger.debug("Listing tasks with %s", q)
        with self._lock:
            items: Iterable[Task] = self._items.values()

            # Filtering
            if q.completed is not None:
                items = [t for t in items if t.completed == q.completed]

            if q.search:
                s = q.search.lower()

                def matches(t: Task) -> bool:
                    return s in (t.title or "").lower() or s in (t.description or "").lower()

                items = [t for t in items if matches(t)]

            items = list(items)
            total = len(items)

            # Sorting: ties keep id order, missing values go last
            field = q.sort_field
            by_id = sorted(items, key=lambda t: t.id)
            present = [t for t in by_id if getattr(t, field) is not None]
            missing = [t for t in by_id if getattr(t, field) is None]
            present.sort(key=lambda t: getattr(t, field), reverse=q.descending)
            items_sorted = present + missing

            # Pagination
            start = max(q.offset, 0)
            end = start + max(q.limit, 0)
            page = items_sorted[start:end]

            # Return copies to avoid external mutation
            return [t.copy() for t in page], total


# PUBLIC_INTERFACE
def get_repository(settings: Optional[Settings] = None) -> Repository:
    """
    Factory to return a new repository for the configured backend.
    - memory: InMemoryRepository
    - sqlite: SQLiteRepository at settings.sqlite_db_path
    """
    settings = settings or get_settings()
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteRepository

        logger.info("Using sqlite task repository at %s", settings.sqlite_db_path)
        return SQLiteRepository(settings.sqlite_db_path)
    logger.info("Using in-memory task repository")
    return InMemoryRepository()
