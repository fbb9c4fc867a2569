from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from datetime import date
from typing import Any, Dict, Generator, List, Optional, Tuple

from .exceptions import StorageError, TaskNotFoundError
from .models import Task, as_calendar_date
from .repositories import ListQuery, Repository, apply_update
from .schemas import TaskUpdate
from .table import TASK_TABLE, Table

logger = logging.getLogger(__name__)


def _to_row(task: Task) -> Dict[str, Any]:
    due = as_calendar_date(task.due_date)
    return {
        "title": task.title,
        "description": task.description,
        "due_date": due.isoformat() if due else None,
        "completed": 1 if task.completed else 0,
    }


def _py_lower(value: Optional[str]) -> Optional[str]:
    return value.lower() if value is not None else None


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SQLiteRepository(Repository):
    """
    Lightweight SQLite repository implementing the Repository interface.

    Statements are rendered from an explicit Table definition. Each operation
    opens its own connection, so ':memory:' databases are not supported.
    """

    def __init__(self, db_path: str, table: Table = TASK_TABLE) -> None:
        if db_path == ":memory:":
            raise ValueError("SQLiteRepository needs a file path; use InMemoryRepository instead")
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._table = table
        self._pk = table.primary_key.name
        self._data_columns = tuple(n for n in table.column_names if n != self._pk)
        self._init_db()

    @property
    def db_path(self) -> str:
        return self._db_path

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        try:
            conn = sqlite3.connect(self._db_path)
        except sqlite3.Error as e:
            raise StorageError(f"Unable to open task database {self._db_path}: {e}") from e
        conn.row_factory = sqlite3.Row
        # LIKE only folds ASCII; search lower-cases both sides with str.lower() instead
        conn.create_function("py_lower", 1, _py_lower, deterministic=True)
        try:
            yield conn
            conn.commit()
        except Exception as e:
            conn.rollback()
            if isinstance(e, sqlite3.Error):
                raise StorageError(str(e)) from e
            raise
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(self._table.create_sql())
            conn.execute(self._table.index_sql("completed"))
            conn.execute(self._table.index_sql("due_date"))
        logger.debug("Initialized table %s in %s", self._table.name, self._db_path)

    def _row_to_task(self, row: sqlite3.Row) -> Task:
        due = row["due_date"]
        return Task(
            id=int(row[self._pk]),
            title=row["title"],
            description=row["description"],
            due_date=date.fromisoformat(due) if due is not None else None,
            completed=bool(row["completed"]),
        )

    def _select_one(self, conn: sqlite3.Connection, task_id: int) -> Optional[sqlite3.Row]:
        return conn.execute(
            f"SELECT * FROM {self._table.name} WHERE {self._pk} = ?", (task_id,)
        ).fetchone()

    def _write(self, conn: sqlite3.Connection, task_id: int, task: Task) -> int:
        row = _to_row(task)
        assignments = ", ".join(f"{c} = ?" for c in self._data_columns)
        cur = conn.execute(
            f"UPDATE {self._table.name} SET {assignments} WHERE {self._pk} = ?",
            (*(row[c] for c in self._data_columns), task_id),
        )
        return cur.rowcount

    def save(self, task: Task) -> Task:
        with self._conn() as conn:
            if task.id is None:
                row = _to_row(task)
                placeholders = ", ".join("?" for _ in self._data_columns)
                cur = conn.execute(
                    f"INSERT INTO {self._table.name} ({', '.join(self._data_columns)}) "
                    f"VALUES ({placeholders})",
                    tuple(row[c] for c in self._data_columns),
                )
                task_id = cur.lastrowid
                logger.info("Created task %s", task_id)
            else:
                task_id = task.id
                if self._write(conn, task_id, task) == 0:
                    raise TaskNotFoundError(task_id)
            stored = self._select_one(conn, task_id)
            assert stored is not None
            return self._row_to_task(stored)

    def get(self, task_id: int) -> Optional[Task]:
        with self._conn() as conn:
            row = self._select_one(conn, task_id)
            return self._row_to_task(row) if row else None

    def update(self, task_id: int, data: TaskUpdate) -> Optional[Task]:
        with self._conn() as conn:
            # Hold the write lock across the read and the write
            conn.execute("BEGIN IMMEDIATE")
            row = self._select_one(conn, task_id)
            if not row:
                return None
            updated = apply_update(self._row_to_task(row), data)
            self._write(conn, task_id, updated)
            row2 = self._select_one(conn, task_id)
            assert row2 is not None
            return self._row_to_task(row2)

    def toggle_completed(self, task_id: int) -> Optional[Task]:
        with self._conn() as conn:
            cur = conn.execute(
                f"UPDATE {self._table.name} SET completed = 1 - completed WHERE {self._pk} = ?",
                (task_id,),
            )
            if cur.rowcount == 0:
                return None
            row = self._select_one(conn, task_id)
            assert row is not None
            return self._row_to_task(row)

    def delete(self, task_id: int) -> bool:
        with self._conn() as conn:
            cur = conn.execute(f"DELETE FROM {self._table.name} WHERE {self._pk} = ?", (task_id,))
            removed = cur.rowcount > 0
        if removed:
            logger.info("Deleted task %s", task_id)
        return removed

    def count(self, completed: Optional[bool] = None) -> int:
        sql = f"SELECT COUNT(*) AS cnt FROM {self._table.name}"
        params: list = []
        if completed is not None:
            sql += " WHERE completed = ?"
            params.append(1 if completed else 0)
        with self._conn() as conn:
            row = conn.execute(sql, params).fetchone()
            return int(row["cnt"]) if row else 0

    def list(self, query: Optional[ListQuery] = None) -> Tuple[List[Task], int]:
        q = query or ListQuery()
        logger.debug("Listing tasks with %s", q)
        clauses = []
        params: list = []

        if q.completed is not None:
            clauses.append("completed = ?")
            params.append(1 if q.completed else 0)

        if q.search:
            # Substring search on title and description
            clauses.append(
                "(py_lower(title) LIKE ? ESCAPE '\\' OR py_lower(description) LIKE ? ESCAPE '\\')"
            )
            like = f"%{_escape_like(q.search.lower())}%"
            params.extend([like, like])

        where_sql = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        field = q.sort_field
        direction = "DESC" if q.descending else "ASC"
        order_sql = f"ORDER BY ({field} IS NULL), {field} {direction}, {self._pk} ASC"

        limit = max(q.limit, 0)
        offset = max(q.offset, 0)

        with self._conn() as conn:
            count_row = conn.execute(
                f"SELECT COUNT(*) AS cnt FROM {self._table.name} {where_sql}", params
            ).fetchone()
            total = int(count_row["cnt"]) if count_row else 0

            rows = conn.execute(
                f"""
                SELECT * FROM {self._table.name}
                {where_sql}
                {order_sql}
                LIMIT ? OFFSET ?
                """,
                [*params, limit, offset],
            ).fetchall()
            return [self._row_to_task(r) for r in rows], total
