from datetime import date, datetime

import pytest
from pydantic import ValidationError

from task_store.schemas import TaskCreate, TaskUpdate


class TestTaskCreate:
    def test_defaults(self):
        data = TaskCreate()
        assert data.title is None
        assert data.description is None
        assert data.due_date is None
        assert data.completed is False

    @pytest.mark.parametrize(
        "raw",
        ["2099-12-25", " 2099-12-25 ", "2099-12-25T13:45:00", date(2099, 12, 25), datetime(2099, 12, 25, 13, 45)],
    )
    def test_due_date_normalized_to_date(self, raw):
        data = TaskCreate(title="Pay bills", due_date=raw)
        assert data.due_date == date(2099, 12, 25)
        assert type(data.due_date) is date

    def test_due_date_invalid_string(self):
        with pytest.raises(ValidationError) as exc:
            TaskCreate(title="Due date bad", due_date="not-a-date")
        assert "Invalid due_date format" in str(exc.value)

    def test_due_date_invalid_type(self):
        with pytest.raises(ValidationError):
            TaskCreate(title="Due date bad", due_date=12)

    def test_unknown_fields_rejected(self):
        with pytest.raises(ValidationError):
            TaskCreate.model_validate({"title": "x", "priority": 1})

    def test_title_is_optional(self):
        data = TaskCreate(description="only a description")
        assert data.title is None


class TestTaskUpdate:
    def test_changes_only_contains_provided_fields(self):
        data = TaskUpdate.model_validate({"title": "Partial Updated", "completed": True})
        assert data.changes() == {"title": "Partial Updated", "completed": True}

    def test_explicit_none_is_kept_as_a_change(self):
        data = TaskUpdate.model_validate({"description": None, "due_date": None})
        assert data.changes() == {"description": None, "due_date": None}

    def test_empty_update(self):
        assert TaskUpdate().changes() == {}

    def test_completed_cannot_be_null(self):
        with pytest.raises(ValidationError):
            TaskUpdate.model_validate({"completed": None})

    def test_due_date_parsed(self):
        data = TaskUpdate.model_validate({"due_date": "2100-01-01"})
        assert data.changes() == {"due_date": date(2100, 1, 1)}

    def test_bad_due_date(self):
        with pytest.raises(ValidationError):
            TaskUpdate.model_validate({"due_date": "2100-13-45"})
