"""Unit tests for authority error code translation."""

from __future__ import annotations

import pytest

from task_tracker_service.services.error_codes import (
    AUTHORITY_ERROR_STATUS,
    UNREGISTERED_CODE_STATUS,
    get_http_status_code,
    lookup_status,
)


@pytest.mark.unit
@pytest.mark.parametrize(
    ("code", "status_code"),
    [
        ("auth/wrong-password", 400),
        ("auth/invalid-email", 400),
        ("auth/invalid-credential", 401),
        ("auth/user-not-found", 404),
        ("auth/email-already-in-use", 409),
        ("auth/too-many-requests", 429),
    ],
)
def test_registered_codes(code, status_code):
    """Each registered code maps to its status."""
    assert get_http_status_code(code) == status_code


@pytest.mark.unit
def test_unregistered_code_uses_fallback():
    """Unknown codes fall back to 500 unless told otherwise."""
    assert get_http_status_code("auth/operation-not-allowed") == UNREGISTERED_CODE_STATUS == 500
    assert get_http_status_code("auth/operation-not-allowed", fallback=502) == 502


@pytest.mark.unit
def test_lookup_status_none():
    """None and unknown codes have no registered status."""
    assert lookup_status(None) is None
    assert lookup_status("auth/unknown") is None


@pytest.mark.unit
def test_each_code_registered_once():
    """No code belongs to two statuses."""
    all_codes = [code for codes in AUTHORITY_ERROR_STATUS.values() for code in codes]
    assert len(all_codes) == len(set(all_codes))


@pytest.mark.unit
def test_table_is_read_only():
    """The translation table cannot be mutated at runtime."""
    with pytest.raises(TypeError):
        AUTHORITY_ERROR_STATUS[418] = frozenset({"auth/teapot"})  # type: ignore[index]
