"""Async HTTP client for the identity authority."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from typing import Any

import httpx

from task_tracker_service.logging import get_logger

NETWORK_REQUEST_FAILED = "auth/network-request-failed"
INTERNAL_ERROR = "auth/internal-error"


class IdentityAuthorityError(Exception):
    """
    Raised when the identity authority rejects a call or cannot be reached.

    ``code`` is the authority's own error identifier (``auth/...``), passed
    through unchanged so callers can translate it to an HTTP status.
    """

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


def _parse_timestamp(value: Any) -> datetime:
    """Parse epoch seconds, an ISO 8601 string or an HTTP-date into an aware datetime."""
    if isinstance(value, bool):
        raise ValueError("timestamp must not be a boolean")
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=UTC)
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            # HTTP-date form, e.g. "Tue, 14 Nov 2023 22:13:20 GMT"
            try:
                parsed = parsedate_to_datetime(value)
            except (TypeError, ValueError) as exc:
                raise ValueError(f"unsupported timestamp value: {value!r}") from exc
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=UTC)
        return parsed
    raise ValueError(f"unsupported timestamp value: {value!r}")


class IdentityClient:
    """
    Client for the external identity authority.

    The authority owns credentials end to end: it mints tokens on sign-in and
    sign-up, decodes and validates tokens (signature and expiry), records the
    per-subject "tokens valid since" time and revokes refresh tokens. This
    service never touches signing keys.
    """

    def __init__(
        self,
        base_url: str,
        verify_token_path: str,
        user_path: str,
        sign_in_path: str,
        sign_up_path: str,
        password_reset_path: str,
        revoke_path: str,
        timeout_seconds: int,
    ) -> None:
        self._base_url = base_url
        self._verify_token_path = verify_token_path
        self._user_path = user_path.rstrip("/")
        self._sign_in_path = sign_in_path
        self._sign_up_path = sign_up_path
        self._password_reset_path = password_reset_path
        self._revoke_path = revoke_path
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout_seconds),
        )

    async def _request(
        self,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Send one request and return the decoded JSON object.

        Raises:
            IdentityAuthorityError: with the authority's code on a non-2xx
                response, NETWORK_REQUEST_FAILED on transport errors, and
                INTERNAL_ERROR on a malformed response body.
        """
        logger = get_logger(__name__)

        try:
            response = await self._client.request(method, path, json=payload)
        except httpx.HTTPError as exc:
            logger.warning(
                "Identity authority request failed",
                extra={"error": str(exc), "base_url": self._base_url, "path": path},
            )
            raise IdentityAuthorityError(
                NETWORK_REQUEST_FAILED,
                "Cannot reach identity authority",
            ) from exc

        body: Any
        if response.content:
            try:
                body = response.json()
            except (json.JSONDecodeError, ValueError) as exc:
                raise IdentityAuthorityError(
                    INTERNAL_ERROR,
                    f"Identity authority returned unexpected response (status {response.status_code})",
                ) from exc
        else:
            body = {}

        if not isinstance(body, dict):
            raise IdentityAuthorityError(
                INTERNAL_ERROR,
                f"Identity authority returned unexpected response (status {response.status_code})",
            )

        if response.is_success:
            return body

        code = body.get("error")
        if not isinstance(code, str) or not code:
            code = INTERNAL_ERROR
        message = body.get("message")
        if not isinstance(message, str):
            message = "Identity authority rejected the request"
        logger.info(
            "Identity authority rejected request",
            extra={"status_code": response.status_code, "error_code": code, "path": path},
        )
        raise IdentityAuthorityError(code, message)

    @staticmethod
    def _token_pair(body: dict[str, Any]) -> dict[str, str]:
        access_token = body.get("access_token")
        refresh_token = body.get("refresh_token")
        if not isinstance(access_token, str) or not isinstance(refresh_token, str):
            raise IdentityAuthorityError(
                INTERNAL_ERROR,
                "Identity authority returned incomplete token response",
            )
        return {"access_token": access_token, "refresh_token": refresh_token}

    async def verify_token(self, token: str) -> dict[str, Any]:
        """
        Decode a bearer token and validate its signature and expiry.

        Returns:
            The decoded claim set (includes ``uid`` and ``iat``)
        """
        body = await self._request("POST", self._verify_token_path, {"token": token})
        claims = body.get("claims")
        if not isinstance(claims, dict):
            raise IdentityAuthorityError(
                INTERNAL_ERROR,
                "Identity authority returned incomplete verification response",
            )
        return claims

    async def get_tokens_valid_since(self, uid: str) -> datetime | None:
        """
        Fetch the subject's current "tokens valid since" time.

        Returns None when the subject has never had its tokens revoked.
        """
        body = await self._request("GET", f"{self._user_path}/{uid}")
        value = body.get("tokens_valid_after_time")
        if value is None:
            return None
        try:
            return _parse_timestamp(value)
        except ValueError as exc:
            raise IdentityAuthorityError(
                INTERNAL_ERROR,
                "Identity authority returned an invalid tokens_valid_after_time",
            ) from exc

    async def sign_in(self, email: Any, password: Any) -> dict[str, str]:
        """Exchange email and password for an access/refresh token pair."""
        body = await self._request(
            "POST",
            self._sign_in_path,
            {"email": email, "password": password},
        )
        return self._token_pair(body)

    async def sign_up(self, email: Any, password: Any) -> dict[str, str]:
        """Create an account and return its first access/refresh token pair."""
        body = await self._request(
            "POST",
            self._sign_up_path,
            {"email": email, "password": password},
        )
        return self._token_pair(body)

    async def send_password_reset(self, email: Any) -> None:
        """Ask the authority to email a password reset link."""
        await self._request("POST", self._password_reset_path, {"email": email})

    async def revoke_refresh_tokens(self, uid: str) -> None:
        """Revoke every refresh token of the subject, effective now."""
        await self._request("POST", self._revoke_path, {"uid": uid})

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
