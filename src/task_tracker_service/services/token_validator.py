"""Bearer credential verification with revocation checks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from task_tracker_service.core.exceptions import ServiceError
from task_tracker_service.logging import get_logger

if TYPE_CHECKING:
    from task_tracker_service.clients.identity_client import IdentityClient

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class CallerIdentity:
    """Verified subject of the current request."""

    uid: str
    issued_at: int
    claims: dict[str, Any] = field(default_factory=dict)


def _unauthorized(message: str) -> ServiceError:
    return ServiceError("UNAUTHORIZED", message, 401, {})


def extract_bearer_token(authorization: str | None) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if authorization is None or not authorization.startswith(BEARER_PREFIX):
        raise _unauthorized("Missing or malformed Authorization header")

    token = authorization[len(BEARER_PREFIX) :]
    if not token:
        raise _unauthorized("Bearer token must not be empty")
    return token


class TokenValidator:
    """
    Verifies bearer credentials against the identity authority.

    Every failure, including the authority being unreachable, is reported
    as UNAUTHORIZED (401); authentication never surfaces as a 5xx.
    """

    def __init__(self, identity_client: IdentityClient) -> None:
        self._identity_client = identity_client
        self._logger = get_logger(__name__)

    async def decode(self, token: str) -> CallerIdentity:
        """
        Decode a token through the identity authority without the revocation check.

        Raises:
            ServiceError: UNAUTHORIZED if the authority rejects the token or
                the claims lack a subject id or issued-at time
        """
        try:
            claims = await self._identity_client.verify_token(token)
        except Exception as exc:
            self._logger.info("Token rejected by identity authority", extra={"reason": str(exc)})
            raise _unauthorized("Invalid token") from exc

        if not isinstance(claims, dict):
            raise _unauthorized("Invalid token")

        uid = claims.get("uid", claims.get("sub"))
        if not isinstance(uid, str) or not uid:
            raise _unauthorized("Token is missing a subject")

        issued_at = claims.get("iat")
        if isinstance(issued_at, bool) or not isinstance(issued_at, int):
            raise _unauthorized("Token is missing an issued-at time")

        return CallerIdentity(uid=uid, issued_at=issued_at, claims=claims)

    async def verify(self, authorization: str | None) -> CallerIdentity:
        """
        Verify an Authorization header value and return the caller identity.

        The subject's "tokens valid since" time is read from the authority on
        every call, so a logout takes effect on the very next request.

        Raises:
            ServiceError: UNAUTHORIZED if the header is missing or malformed,
                the token is invalid, or the token was issued before the
                subject's tokens were last revoked
        """
        token = extract_bearer_token(authorization)
        caller = await self.decode(token)

        try:
            valid_since = await self._identity_client.get_tokens_valid_since(caller.uid)
        except Exception as exc:
            self._logger.info(
                "Revocation lookup failed",
                extra={"uid": caller.uid, "reason": str(exc)},
            )
            raise _unauthorized("Invalid token") from exc

        if valid_since is not None and caller.issued_at < int(valid_since.timestamp()):
            self._logger.info("Revoked token presented", extra={"uid": caller.uid})
            raise _unauthorized("Token revoked")

        return caller
