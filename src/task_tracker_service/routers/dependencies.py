"""Request dependencies shared by protected routes."""

from __future__ import annotations

from fastapi import Header

from task_tracker_service.core.state import get_app_state
from task_tracker_service.services.token_validator import CallerIdentity  # noqa: TC001


async def require_caller(authorization: str | None = Header(default=None)) -> CallerIdentity:
    """
    Verify the bearer credential and return the caller identity.

    Used as ``caller: CallerIdentity = Depends(require_caller)``. Raises
    UNAUTHORIZED (401) before the route body runs when the credential is
    missing, invalid or revoked.
    """
    state = get_app_state()
    if state.token_validator is None:
        msg = "TokenValidator not initialized"
        raise RuntimeError(msg)

    return await state.token_validator.verify(authorization)
