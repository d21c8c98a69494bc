"""API routers."""

from task_tracker_service.routers import health, tasks, users

__all__ = ["health", "tasks", "users"]
