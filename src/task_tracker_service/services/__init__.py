"""Service layer components."""

from task_tracker_service.services.credential_manager import CredentialManager
from task_tracker_service.services.task_manager import TaskManager
from task_tracker_service.services.task_store import TaskStore
from task_tracker_service.services.token_validator import CallerIdentity, TokenValidator

__all__ = [
    "CallerIdentity",
    "CredentialManager",
    "TaskManager",
    "TaskStore",
    "TokenValidator",
]
