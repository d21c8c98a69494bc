"""Account endpoints: login, registration, password recovery, logout."""

from __future__ import annotations

from fastapi import APIRouter, Header, Request
from fastapi.responses import JSONResponse

from task_tracker_service.core.state import get_app_state
from task_tracker_service.routers.validation import parse_json_body
from task_tracker_service.services.credential_manager import CredentialManager

router = APIRouter(prefix="/users")


def _credential_manager() -> CredentialManager:
    state = get_app_state()
    if state.credential_manager is None:
        msg = "CredentialManager not initialized"
        raise RuntimeError(msg)
    return state.credential_manager


@router.post("/login")
async def login(request: Request) -> JSONResponse:
    """Sign in and return an access/refresh token pair."""
    data = parse_json_body(await request.body())
    result = await _credential_manager().login(data)
    return JSONResponse(status_code=200, content=result)


@router.post("/register", status_code=201)
async def register(request: Request) -> JSONResponse:
    """Create an account and return its first token pair."""
    data = parse_json_body(await request.body())
    result = await _credential_manager().register(data)
    return JSONResponse(status_code=201, content=result)


@router.post("/recover", status_code=201)
async def recover(request: Request) -> JSONResponse:
    """Send a password reset email."""
    data = parse_json_body(await request.body())
    result = await _credential_manager().recover(data)
    return JSONResponse(status_code=201, content=result)


@router.post("/logout")
async def logout(authorization: str | None = Header(default=None)) -> JSONResponse:
    """Revoke the caller's refresh tokens."""
    result = await _credential_manager().logout(authorization)
    return JSONResponse(status_code=200, content=result)
