"""SQLite-backed task storage, keyed by task id and owner."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from threading import RLock
from typing import Any


class DuplicateTaskError(Exception):
    """Raised when attempting to insert a task with a duplicate task_id."""


class TaskStore:
    """
    SQLite-backed storage for tasks.

    Every lookup, update and delete is filtered by both task_id and
    created_by, so a record is unreachable through any other owner.
    """

    _TASK_COLUMNS: tuple[str, ...] = (
        "task_id",
        "title",
        "done",
        "created_by",
        "created_at",
        "updated_by",
        "updated_at",
    )
    _UPDATABLE_COLUMNS: frozenset[str] = frozenset({"title", "done", "updated_by", "updated_at"})
    _TASK_SELECT_BASE_SQL = (
        "SELECT task_id, title, done, created_by, created_at, updated_by, updated_at FROM tasks"
    )

    def __init__(self, db_path: str) -> None:
        self._lock = RLock()
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._db = sqlite3.connect(db_path, check_same_thread=False)
        self._db.row_factory = sqlite3.Row
        self._db.execute("PRAGMA journal_mode=WAL")
        self._db.execute("PRAGMA busy_timeout=5000")
        self._init_schema()

    def _init_schema(self) -> None:
        with self._lock:
            self._db.executescript(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    task_id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    done INTEGER NOT NULL DEFAULT 0,
                    created_by TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_by TEXT,
                    updated_at TEXT
                );

                CREATE INDEX IF NOT EXISTS idx_tasks_created_by ON tasks (created_by);
                """
            )
            self._db.commit()

    def _row_to_task(self, row: sqlite3.Row) -> dict[str, Any]:
        task = {column: row[column] for column in self._TASK_COLUMNS}
        task["done"] = bool(task["done"])
        return task

    def insert_task(self, task_data: dict[str, Any]) -> None:
        """Insert a new task row."""
        values = tuple(task_data[column] for column in self._TASK_COLUMNS)

        with self._lock:
            try:
                self._db.execute(
                    "INSERT INTO tasks ("
                    "task_id, title, done, created_by, created_at, updated_by, updated_at"
                    ") VALUES (?, ?, ?, ?, ?, ?, ?)",
                    values,
                )
                self._db.commit()
            except sqlite3.IntegrityError as exc:
                self._db.rollback()
                if "unique" in str(exc).lower():
                    raise DuplicateTaskError(
                        f"A task with task_id={task_data['task_id']} already exists"
                    ) from exc
                raise

    def get_task(self, task_id: str, owner_id: str) -> dict[str, Any] | None:
        """Fetch a task by ID, only if owned by owner_id."""
        with self._lock:
            row = self._db.execute(
                self._TASK_SELECT_BASE_SQL + " WHERE task_id = ? AND created_by = ?",
                (task_id, owner_id),
            ).fetchone()
        if row is None:
            return None
        return self._row_to_task(row)

    def list_tasks(self, owner_id: str) -> list[dict[str, Any]]:
        """List every task owned by owner_id."""
        with self._lock:
            rows = self._db.execute(
                self._TASK_SELECT_BASE_SQL + " WHERE created_by = ?",
                (owner_id,),
            ).fetchall()
        return [self._row_to_task(row) for row in rows]

    def update_task(self, task_id: str, owner_id: str, updates: dict[str, Any]) -> int:
        """Update task columns and return the number of affected rows."""
        if len(updates) == 0:
            return 0

        if any(column not in self._UPDATABLE_COLUMNS for column in updates):
            msg = "Attempted to update a protected or unknown task column"
            raise ValueError(msg)

        set_clause = ", ".join(f"{column} = ?" for column in updates)
        params: list[object] = list(updates.values())
        params.extend((task_id, owner_id))

        query = "UPDATE tasks SET " + set_clause + " WHERE task_id = ? AND created_by = ?"  # nosec B608
        with self._lock:
            cursor = self._db.execute(query, params)
            self._db.commit()
        return int(cursor.rowcount)

    def delete_task(self, task_id: str, owner_id: str) -> int:
        """Delete a task owned by owner_id and return the number of removed rows."""
        with self._lock:
            cursor = self._db.execute(
                "DELETE FROM tasks WHERE task_id = ? AND created_by = ?",
                (task_id, owner_id),
            )
            self._db.commit()
        return int(cursor.rowcount)

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            self._db.close()
