"""Entry point for the task tracker service.

Usage::

    python -m task_tracker_service
"""

from __future__ import annotations

import uvicorn

from task_tracker_service.app import create_app
from task_tracker_service.config import get_settings


def main() -> None:
    """Run the service with the host and port from config.yaml."""
    settings = get_settings()
    uvicorn.run(
        create_app(),
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.server.log_level,
    )


if __name__ == "__main__":
    main()
