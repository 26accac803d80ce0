# src/task_planner/tasks/task_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import time
import uuid
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

from ..core.errors import TaskNotFoundError, TaskStoreError, TaskValidationError
from .task_models import (
    DEFAULT_PRIORITY,
    PRIORITY_MAX,
    PRIORITY_MIN,
    TASK_INPUT_FIELDS,
    Task,
    TaskInput,
)

logger = logging.getLogger(__name__)


class TaskStore:
    """
    SQLite task store.

    The schema is simple and migration-safe:
    - create table if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Thread-safety:
    - each method opens its own SQLite connection, so every public call is
      atomic on its own; there is no cross-call transaction.

    Errors:
    - unknown ids raise TaskNotFoundError
    - bad input raises TaskValidationError
    - any sqlite3.Error (or an int SQLite cannot hold) is re-raised as TaskStoreError
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info("TaskStore ready db=%s total=%s", self._db_path, self.count_tasks())

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    @contextlib.contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = self._get_conn()
        try:
            yield conn
            conn.commit()
        except (sqlite3.Error, OverflowError) as e:
            conn.rollback()
            raise TaskStoreError(f"SQLite error on {self._db_path}: {e}") from e
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    priority INTEGER NOT NULL DEFAULT 2,
                    completed INTEGER NOT NULL DEFAULT 0,
                    deleted INTEGER NOT NULL DEFAULT 0,
                    created_at REAL NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )

            cur.execute("PRAGMA table_info(tasks)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE tasks ADD COLUMN {name} {decl}")
                logger.info("TaskStore migration: added column %s", name)

            add_col("priority", "INTEGER NOT NULL DEFAULT 2")
            add_col("completed", "INTEGER NOT NULL DEFAULT 0")
            add_col("deleted", "INTEGER NOT NULL DEFAULT 0")
            add_col("created_at", "REAL NOT NULL DEFAULT 0")
            add_col("updated_at", "REAL NOT NULL DEFAULT 0")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_state ON tasks(deleted, completed)")

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=str(row["id"]),
            name=str(row["name"] or ""),
            priority=int(row["priority"] if row["priority"] is not None else DEFAULT_PRIORITY),
            completed=bool(row["completed"]),
            deleted=bool(row["deleted"]),
            created_at=float(row["created_at"] or 0.0),
            updated_at=float(row["updated_at"] or 0.0),
        )

    @staticmethod
    def _clean_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
        """Validate a TaskInput-like mapping; returns column -> SQL value."""
        unknown = set(fields) - TASK_INPUT_FIELDS
        if unknown:
            raise TaskValidationError(f"Unknown task fields: {', '.join(sorted(unknown))}")

        out: dict[str, Any] = {}
        if "name" in fields:
            name = fields["name"]
            if not isinstance(name, str) or not name.strip():
                raise TaskValidationError("name must be a non-empty string")
            out["name"] = name.strip()
        if "priority" in fields:
            priority = fields["priority"]
            if isinstance(priority, bool) or not isinstance(priority, int):
                raise TaskValidationError("priority must be an integer")
            if not PRIORITY_MIN <= priority <= PRIORITY_MAX:
                raise TaskValidationError(f"priority {priority} is out of range")
            out["priority"] = priority
        for flag in ("completed", "deleted"):
            if flag in fields:
                if not isinstance(fields[flag], bool):
                    raise TaskValidationError(f"{flag} must be a boolean")
                out[flag] = int(fields[flag])
        return out

    # ---- public API ----

    def count_tasks(self) -> int:
        with self._connect() as conn:
            (n,) = conn.execute("SELECT COUNT(*) FROM tasks").fetchone()
            return int(n)

    def create(self, task_input: TaskInput | Mapping[str, Any]) -> Task:
        if "name" not in task_input:
            raise TaskValidationError("name is required")
        values = self._clean_fields(task_input)

        now = time.time()
        task = Task(
            id=uuid.uuid4().hex,
            name=values["name"],
            priority=values.get("priority", DEFAULT_PRIORITY),
            completed=bool(values.get("completed", 0)),
            deleted=bool(values.get("deleted", 0)),
            created_at=now,
            updated_at=now,
        )

        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO tasks(id, name, priority, completed, deleted, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    task.id,
                    task.name,
                    task.priority,
                    int(task.completed),
                    int(task.deleted),
                    task.created_at,
                    task.updated_at,
                ),
            )

        logger.info("Task %s created with name %r and priority %s.", task.id, task.name, task.priority)
        return task

    def get_task(self, task_id: str) -> Task | None:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (str(task_id),)).fetchone()
            return self._row_to_task(row) if row else None

    def update(self, task_id: str, fields: TaskInput | Mapping[str, Any]) -> Task:
        values = self._clean_fields(fields)
        if not values:
            raise TaskValidationError("No fields to update")

        assignments = [f"{col} = ?" for col in values]
        params: list[Any] = list(values.values())
        assignments.append("updated_at = ?")
        params.append(time.time())
        params.append(str(task_id))

        sql = f"UPDATE tasks SET {', '.join(assignments)} WHERE id = ?"

        with self._connect() as conn:
            cur = conn.execute(sql, params)
            if cur.rowcount != 1:
                raise TaskNotFoundError(str(task_id))
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (str(task_id),)).fetchone()

        task = self._row_to_task(row)
        logger.info(
            "Task %s updated (%s): name=%r priority=%s completed=%s deleted=%s",
            task.id,
            ", ".join(values),
            task.name,
            task.priority,
            task.completed,
            task.deleted,
        )
        return task

    def list_tasks(self, *, only_pending: bool = False, include_deleted: bool = False) -> list[Task]:
        """
        Return tasks ordered by priority, then creation time.

        only_pending: skip tasks marked as completed.
        include_deleted: also return soft-deleted tasks.
        """
        where: list[str] = []
        if only_pending:
            where.append("completed = 0")
        if not include_deleted:
            where.append("deleted = 0")

        sql = "SELECT * FROM tasks"
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY priority ASC, created_at ASC"

        with self._connect() as conn:
            tasks = [self._row_to_task(r) for r in conn.execute(sql).fetchall()]

        logger.debug("Retrieved %d tasks from the database.", len(tasks))
        return tasks

    def soft_delete(self, task_id: str) -> Task:
        return self.update(task_id, {"deleted": True})

    def complete(self, task_id: str) -> Task:
        return self.update(task_id, {"completed": True})

    def purge(self, *, completed_only: bool = False) -> int:
        """Physically delete tasks (all, or only completed ones). Returns the number removed."""
        with self._connect() as conn:
            if completed_only:
                cur = conn.execute("DELETE FROM tasks WHERE completed = 1")
            else:
                cur = conn.execute("DELETE FROM tasks")
            removed = int(cur.rowcount)

        if completed_only:
            logger.info("Purged %d completed tasks.", removed)
        else:
            logger.info("Purged all tasks (%d).", removed)
        return removed
