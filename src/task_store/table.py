"""
Explicit schema definition for the task table.

The SQLite backend renders its DDL and column lists from TASK_TABLE instead of
deriving them from the Task dataclass.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Column:
    name: str
    sql_type: str
    nullable: bool = True
    primary_key: bool = False
    default: Optional[str] = None

    def ddl(self) -> str:
        if self.primary_key:
            return f"{self.name} {self.sql_type} PRIMARY KEY AUTOINCREMENT"
        parts = [self.name, self.sql_type, "NULL" if self.nullable else "NOT NULL"]
        if self.default is not None:
            parts.append(f"DEFAULT {self.default}")
        return " ".join(parts)


@dataclass(frozen=True)
class Table:
    name: str
    columns: Tuple[Column, ...]

    @property
    def column_names(self) -> Tuple[str, ...]:
        return tuple(c.name for c in self.columns)

    @property
    def primary_key(self) -> Column:
        for column in self.columns:
            if column.primary_key:
                return column
        raise LookupError(f"table {self.name} has no primary key")

    def column(self, name: str) -> Column:
        for column in self.columns:
            if column.name == name:
                return column
        raise KeyError(name)

    # PUBLIC_INTERFACE
    def create_sql(self) -> str:
        """Return the CREATE TABLE IF NOT EXISTS statement for this table."""
        body = ",\n    ".join(c.ddl() for c in self.columns)
        return f"CREATE TABLE IF NOT EXISTS {self.name} (\n    {body}\n)"

    # PUBLIC_INTERFACE
    def index_sql(self, column_name: str) -> str:
        """Return the CREATE INDEX IF NOT EXISTS statement for a single column."""
        column = self.column(column_name)
        return (
            f"CREATE INDEX IF NOT EXISTS idx_{self.name}_{column.name} "
            f"ON {self.name}({column.name})"
        )


TASK_TABLE = Table(
    name="task",
    columns=(
        Column("id", "INTEGER", nullable=False, primary_key=True),
        Column("title", "TEXT"),
        Column("description", "TEXT"),
        Column("due_date", "TEXT"),
        Column("completed", "INTEGER", nullable=False, default="0"),
    ),
)
