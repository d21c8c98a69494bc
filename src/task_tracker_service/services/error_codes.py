"""Translation of identity authority error codes into HTTP status codes."""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

# Several authority codes may share one status.
AUTHORITY_ERROR_STATUS: Mapping[int, frozenset[str]] = MappingProxyType(
    {
        400: frozenset({"auth/wrong-password", "auth/invalid-email"}),
        401: frozenset({"auth/invalid-credential"}),
        404: frozenset({"auth/user-not-found"}),
        409: frozenset({"auth/email-already-in-use"}),
        429: frozenset({"auth/too-many-requests"}),
    }
)

UNREGISTERED_CODE_STATUS = 500


def lookup_status(code: str | None) -> int | None:
    """Return the status registered for an authority code, or None."""
    if code is None:
        return None
    for status_code, codes in AUTHORITY_ERROR_STATUS.items():
        if code in codes:
            return status_code
    return None


def get_http_status_code(code: str | None, fallback: int = UNREGISTERED_CODE_STATUS) -> int:
    """Translate an authority code to an HTTP status, using fallback when unregistered."""
    status_code = lookup_status(code)
    if status_code is None:
        return fallback
    return status_code
