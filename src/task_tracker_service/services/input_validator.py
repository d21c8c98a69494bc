"""
Field checks run before any task or account mutation.

Each function returns the ordered list of violation messages; an empty
list means the input is valid. Callers reject any non-empty list with 400.
"""

from __future__ import annotations

from collections.abc import Sized
from typing import Any

MIN_TITLE_LENGTH = 3
MIN_PASSWORD_LENGTH = 3

TITLE_TOO_SHORT = "title too short"
INVALID_TITLE = "invalid title value"
PASSWORD_TOO_SHORT = "password too short"
INVALID_PASSWORD = "invalid password value"
INVALID_DONE = "invalid done value"


def _is_too_short(value: Any, minimum: int) -> bool:
    # Values without a length (numbers, booleans) are reported as invalid, not short.
    if not value:
        return True
    if isinstance(value, Sized):
        return len(value) < minimum
    return False


def _check_text_field(
    value: Any,
    minimum: int,
    too_short_message: str,
    invalid_message: str,
) -> list[str]:
    errors: list[str] = []
    if _is_too_short(value, minimum):
        errors.append(too_short_message)
    if value and not isinstance(value, str):
        errors.append(invalid_message)
    return errors


def validate_task(task: dict[str, Any]) -> list[str]:
    """Check that the task title is a string of at least three characters."""
    return _check_text_field(task.get("title"), MIN_TITLE_LENGTH, TITLE_TOO_SHORT, INVALID_TITLE)


def validate_user(user: dict[str, Any]) -> list[str]:
    """Check that the password is a string of at least three characters."""
    return _check_text_field(
        user.get("password"),
        MIN_PASSWORD_LENGTH,
        PASSWORD_TOO_SHORT,
        INVALID_PASSWORD,
    )


def validate_task_status(task: dict[str, Any]) -> list[str]:
    """Check that ``done``, when supplied, is a boolean."""
    if "done" in task and not isinstance(task["done"], bool):
        return [INVALID_DONE]
    return []
