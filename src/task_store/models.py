from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import ClassVar, Optional, Tuple


def as_calendar_date(value: Optional[date]) -> Optional[date]:
    """Drop the time part when a datetime is given where a calendar date is expected."""
    if isinstance(value, datetime):
        return value.date()
    return value


# PUBLIC_INTERFACE
@dataclass
class Task:
    """
    A plain Task record. Persistence is handled by a Repository, never by the
    record itself.

    Fields:
    - id: Identity assigned by the repository on first save; None until then
    - title: Optional short title
    - description: Optional detailed description
    - due_date: Optional calendar date (no time of day)
    - completed: Completion flag, False for new tasks
    """

    FIELDS: ClassVar[Tuple[str, ...]] = ("title", "description", "due_date", "completed")

    title: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[date] = None
    completed: bool = False
    id: Optional[int] = None

    def copy(self) -> "Task":
        return replace(self)
