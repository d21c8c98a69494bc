"""Shared request validation helpers for routers."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from task_tracker_service.config import get_settings
from task_tracker_service.core.exceptions import ServiceError

if TYPE_CHECKING:
    from fastapi import Request


def parse_json_body(raw_body: bytes) -> dict[str, Any]:
    """Parse a JSON object body; an empty body is an empty object."""
    if raw_body == b"":
        return {}

    try:
        data = json.loads(raw_body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ServiceError(
            "INVALID_JSON",
            "Request body is not valid JSON",
            400,
            {},
        ) from exc

    if not isinstance(data, dict):
        raise ServiceError(
            "INVALID_JSON",
            "Request body must be a JSON object",
            400,
            {},
        )

    return data


async def read_json_body(request: Request) -> dict[str, Any]:
    """
    Check media type and size, then parse the body of a protected route.

    Called from the route body, so it runs after the credential check: an
    unauthenticated request is 401 whatever body it carries. A request
    without Content-Type is accepted.

    Raises:
        ServiceError: UNSUPPORTED_MEDIA_TYPE (415), PAYLOAD_TOO_LARGE (413)
            or INVALID_JSON (400)
    """
    content_type = request.headers.get("content-type", "").lower()
    if content_type != "" and not content_type.startswith("application/json"):
        raise ServiceError(
            "UNSUPPORTED_MEDIA_TYPE",
            "Content-Type must be application/json",
            415,
            {},
        )

    max_body_size = get_settings().request.max_body_size
    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > max_body_size:
            raise ServiceError(
                "PAYLOAD_TOO_LARGE",
                "Request body exceeds maximum allowed size",
                413,
                {},
            )

    return parse_json_body(bytes(body))
