"""Unit tests for the application factory and entry point."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest

from task_tracker_service import __main__ as entry_point
from task_tracker_service.app import create_app
from task_tracker_service.config import clear_settings_cache
from tests.unit.test_config import VALID_CONFIG


@pytest.fixture
def bundled_like_config(tmp_path):
    """A valid config file selected through CONFIG_PATH."""
    config_path = tmp_path / "config.yaml"
    config_path.write_text(VALID_CONFIG)
    old_config = os.environ.get("CONFIG_PATH")
    os.environ["CONFIG_PATH"] = str(config_path)
    clear_settings_cache()
    yield config_path
    clear_settings_cache()
    if old_config is None:
        os.environ.pop("CONFIG_PATH", None)
    else:
        os.environ["CONFIG_PATH"] = old_config


@pytest.mark.unit
def test_create_app_registers_routes(bundled_like_config):
    """Every public route is mounted."""
    app = create_app()
    routes = {
        (method.upper(), path)
        for path, operations in app.openapi()["paths"].items()
        for method in operations
    }

    assert ("GET", "/health") in routes
    assert ("POST", "/tasks") in routes
    assert ("GET", "/tasks") in routes
    assert ("PATCH", "/tasks/{task_id}") in routes
    assert ("PATCH", "/tasks/done/{task_id}") in routes
    assert ("DELETE", "/tasks/{task_id}") in routes
    for action in ("login", "register", "recover", "logout"):
        assert ("POST", f"/users/{action}") in routes


@pytest.mark.unit
def test_create_app_uses_service_metadata(bundled_like_config):
    """Title and version come from the service section."""
    app = create_app()

    assert app.title == "task-tracker Service"
    assert app.version == "0.1.0"


@pytest.mark.unit
def test_main_runs_uvicorn_with_server_settings(bundled_like_config):
    """The entry point binds host and port from configuration."""
    with patch.object(entry_point.uvicorn, "run") as run:
        entry_point.main()

    run.assert_called_once()
    assert run.call_args.kwargs == {"host": "0.0.0.0", "port": 3000, "log_level": "info"}
