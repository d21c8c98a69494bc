"""Router test fixtures with an in-memory identity authority."""

from __future__ import annotations

import os
import uuid
from typing import TYPE_CHECKING, Any

import pytest
from httpx import ASGITransport, AsyncClient

from task_tracker_service.app import create_app
from task_tracker_service.config import clear_settings_cache
from task_tracker_service.core.lifespan import lifespan
from task_tracker_service.core.state import get_app_state, reset_app_state
from tests.helpers import FakeIdentityAuthority, bearer

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from pathlib import Path

DEFAULT_PASSWORD = "26598677"


# ---------------------------------------------------------------------------
# ID generators
# ---------------------------------------------------------------------------
def make_email() -> str:
    """Generate a unique email address."""
    return f"user_{uuid.uuid4().hex[:8]}@test.com"


def make_task_id() -> str:
    """Generate a well-formed task ID that does not exist."""
    return f"t-{uuid.uuid4()}"


# ---------------------------------------------------------------------------
# App + client fixtures
# ---------------------------------------------------------------------------
@pytest.fixture
def authority() -> FakeIdentityAuthority:
    """In-memory identity authority shared by the app and the test."""
    return FakeIdentityAuthority()


@pytest.fixture
async def app(tmp_path: Path, authority: FakeIdentityAuthority) -> AsyncIterator[Any]:
    """Create a test app with temp database and the fake identity authority."""
    db_path = tmp_path / "test.db"
    log_dir = tmp_path / "logs"
    config_content = f"""\
service:
  name: "task-tracker"
  version: "0.1.0"
server:
  host: "0.0.0.0"
  port: 3000
  log_level: "info"
logging:
  level: "WARNING"
  directory: "{log_dir}"
database:
  path: "{db_path}"
identity:
  base_url: "http://localhost:9099"
  verify_token_path: "/tokens/verify"
  user_path: "/users"
  sign_in_path: "/accounts/sign-in"
  sign_up_path: "/accounts/sign-up"
  password_reset_path: "/accounts/password-reset"
  revoke_path: "/tokens/revoke"
  timeout_seconds: 10
request:
  max_body_size: 4096
cors:
  allow_origins:
    - "http://localhost:5173"
"""
    config_path = tmp_path / "config.yaml"
    config_path.write_text(config_content)

    old_config = os.environ.get("CONFIG_PATH")
    os.environ["CONFIG_PATH"] = str(config_path)

    clear_settings_cache()
    reset_app_state()

    test_app = create_app()
    async with lifespan(test_app):
        # AppState propagates the replacement to the validator and credential manager
        state = get_app_state()
        state.identity_client = authority

        yield test_app

    reset_app_state()
    clear_settings_cache()
    if old_config is None:
        os.environ.pop("CONFIG_PATH", None)
    else:
        os.environ["CONFIG_PATH"] = old_config


@pytest.fixture
async def client(app: Any) -> AsyncIterator[AsyncClient]:
    """Create an async HTTP client for the test app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------
async def register_user(
    client: AsyncClient,
    email: str | None = None,
    password: str = DEFAULT_PASSWORD,
) -> str:
    """Register an account and return its access token."""
    response = await client.post(
        "/users/register",
        json={"email": email or make_email(), "password": password},
    )
    assert response.status_code == 201, response.text
    return response.json()["accessToken"]


async def create_task(client: AsyncClient, token: str, title: str = "Task A") -> dict[str, Any]:
    """Create a task for the token's owner and return the response body."""
    response = await client.post("/tasks", json={"title": title}, headers=bearer(token))
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
async def alice_token(client: AsyncClient) -> str:
    """Access token of a freshly registered account."""
    return await register_user(client, "alice@test.com")


@pytest.fixture
async def bob_token(client: AsyncClient) -> str:
    """Access token of a second, unrelated account."""
    return await register_user(client, "bob@test.com")
