"""Owner-scoped task lifecycle: create, list, update, mark done, delete."""

from __future__ import annotations

import re
import sqlite3
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from task_tracker_service.core.exceptions import ServiceError
from task_tracker_service.logging import get_logger
from task_tracker_service.services.input_validator import validate_task, validate_task_status
from task_tracker_service.services.task_store import DuplicateTaskError

if TYPE_CHECKING:
    from task_tracker_service.services.task_store import TaskStore
    from task_tracker_service.services.token_validator import CallerIdentity

# Regex for task_id format: t-<uuid4>
_TASK_ID_RE = re.compile(
    r"^t-[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def _now_iso() -> str:
    """Return current UTC time as ISO 8601 string with Z suffix."""
    return datetime.now(UTC).isoformat(timespec="microseconds").replace("+00:00", "Z")


def is_valid_task_id(task_id: str) -> bool:
    """Check whether task_id is a well-formed task identifier."""
    return _TASK_ID_RE.match(task_id) is not None


def _validation_error(violations: list[str]) -> ServiceError:
    return ServiceError(
        "VALIDATION_ERROR",
        "; ".join(violations),
        400,
        {"violations": violations},
    )


def _store_error(exc: sqlite3.Error | DuplicateTaskError) -> ServiceError:
    return ServiceError("INTERNAL_ERROR", str(exc), 500, {})


class TaskManager:
    """
    Manages tasks on behalf of a verified caller.

    Every read, write and delete is scoped to (task_id, caller uid): a
    task owned by someone else is reported as TASK_NOT_FOUND, exactly as
    if it did not exist.

    Concurrent updates of the same task are last-write-wins; there is no
    version check.
    """

    def __init__(self, store: TaskStore) -> None:
        self._store = store
        self._logger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Private helper methods
    # ------------------------------------------------------------------

    @staticmethod
    def _task_to_response(row: dict[str, Any]) -> dict[str, Any]:
        """Convert a store row to the public task representation."""
        return {
            "_id": row["task_id"],
            "title": row["title"],
            "done": row["done"],
            "createdBy": row["created_by"],
            "createdAt": row["created_at"],
            "updatedBy": row["updated_by"],
            "updatedAt": row["updated_at"],
        }

    def _get_owned_task(self, caller: CallerIdentity, task_id: str) -> dict[str, Any]:
        """Validate the id and fetch the task scoped to the caller."""
        if not is_valid_task_id(task_id):
            raise ServiceError("INVALID_TASK_ID", "Invalid task id", 400, {})

        try:
            task = self._store.get_task(task_id, caller.uid)
        except sqlite3.Error as exc:
            raise _store_error(exc) from exc

        if task is None:
            raise ServiceError("TASK_NOT_FOUND", "Task not found", 404, {})
        return task

    def _save(self, caller: CallerIdentity, task: dict[str, Any], updates: dict[str, Any]) -> None:
        try:
            self._store.update_task(task["task_id"], caller.uid, updates)
        except sqlite3.Error as exc:
            raise _store_error(exc) from exc
        task.update(updates)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def create_task(self, caller: CallerIdentity, data: dict[str, Any]) -> dict[str, Any]:
        """Create a task owned by the caller."""
        violations = validate_task(data)
        if violations:
            raise _validation_error(violations)

        task = {
            "task_id": f"t-{uuid.uuid4()}",
            "title": data["title"],
            "done": False,
            "created_by": caller.uid,
            "created_at": _now_iso(),
            "updated_by": None,
            "updated_at": None,
        }
        try:
            self._store.insert_task(task)
        except (sqlite3.Error, DuplicateTaskError) as exc:
            raise _store_error(exc) from exc

        self._logger.debug("Task created", extra={"task_id": task["task_id"], "uid": caller.uid})
        return {"message": "Task created", **self._task_to_response(task)}

    async def list_tasks(self, caller: CallerIdentity) -> list[dict[str, Any]]:
        """List the caller's tasks. Order is not guaranteed."""
        try:
            rows = self._store.list_tasks(caller.uid)
        except sqlite3.Error as exc:
            raise _store_error(exc) from exc
        return [self._task_to_response(row) for row in rows]

    async def update_task(
        self,
        caller: CallerIdentity,
        task_id: str,
        data: dict[str, Any],
    ) -> dict[str, Any]:
        """Change the title (when supplied) and stamp the update."""
        task = self._get_owned_task(caller, task_id)

        if "title" in data:
            violations = validate_task(data)
            if violations:
                raise _validation_error(violations)

        updates: dict[str, Any] = {}
        if data.get("title"):
            updates["title"] = data["title"]
        updates["updated_by"] = caller.uid
        updates["updated_at"] = _now_iso()

        self._save(caller, task, updates)
        self._logger.debug("Task updated", extra={"task_id": task_id, "uid": caller.uid})
        return {"message": "Record updated", **self._task_to_response(task)}

    async def set_task_done(
        self,
        caller: CallerIdentity,
        task_id: str,
        data: dict[str, Any],
    ) -> dict[str, Any]:
        """
        Set the done flag and stamp the update.

        An omitted ``done`` means False: the task is marked not done rather
        than left unchanged.
        """
        task = self._get_owned_task(caller, task_id)

        violations = validate_task_status(data)
        if violations:
            raise _validation_error(violations)

        updates = {
            "done": data.get("done", False),
            "updated_by": caller.uid,
            "updated_at": _now_iso(),
        }

        self._save(caller, task, updates)
        self._logger.debug(
            "Task status updated",
            extra={"task_id": task_id, "uid": caller.uid, "done": updates["done"]},
        )
        return {"message": "Status updated", **self._task_to_response(task)}

    async def delete_task(self, caller: CallerIdentity, task_id: str) -> dict[str, Any]:
        """Permanently remove one of the caller's tasks."""
        self._get_owned_task(caller, task_id)

        try:
            self._store.delete_task(task_id, caller.uid)
        except sqlite3.Error as exc:
            raise _store_error(exc) from exc

        self._logger.debug("Task deleted", extra={"task_id": task_id, "uid": caller.uid})
        return {"message": "Record deleted"}

    def close(self) -> None:
        """Close the underlying store."""
        self._store.close()
