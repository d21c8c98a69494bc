"""Application lifecycle management."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from task_tracker_service.clients.identity_client import IdentityClient
from task_tracker_service.config import get_settings
from task_tracker_service.core.state import init_app_state
from task_tracker_service.logging import get_logger, setup_logging
from task_tracker_service.services.credential_manager import CredentialManager
from task_tracker_service.services.task_manager import TaskManager
from task_tracker_service.services.task_store import TaskStore
from task_tracker_service.services.token_validator import TokenValidator

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle."""
    # === STARTUP ===
    settings = get_settings()

    setup_logging(settings.logging.level, settings.service.name, settings.logging.directory)
    logger = get_logger(__name__)

    state = init_app_state()

    identity_client = IdentityClient(
        base_url=settings.identity.base_url,
        verify_token_path=settings.identity.verify_token_path,
        user_path=settings.identity.user_path,
        sign_in_path=settings.identity.sign_in_path,
        sign_up_path=settings.identity.sign_up_path,
        password_reset_path=settings.identity.password_reset_path,
        revoke_path=settings.identity.revoke_path,
        timeout_seconds=settings.identity.timeout_seconds,
    )
    state.identity_client = identity_client

    token_validator = TokenValidator(identity_client=identity_client)
    state.token_validator = token_validator

    state.credential_manager = CredentialManager(
        identity_client=identity_client,
        token_validator=token_validator,
    )

    task_manager = TaskManager(store=TaskStore(db_path=settings.database.path))
    state.task_manager = task_manager

    logger.info(
        "Service starting",
        extra={
            "service": settings.service.name,
            "version": settings.service.version,
            "port": settings.server.port,
            "db_path": settings.database.path,
            "identity_base_url": settings.identity.base_url,
        },
    )

    yield  # Application runs here

    # === SHUTDOWN ===
    logger.info("Service shutting down", extra={"uptime_seconds": state.uptime_seconds})

    task_manager.close()
    await identity_client.close()
