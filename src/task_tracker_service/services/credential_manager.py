"""Account and session operations delegated to the identity authority."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from task_tracker_service.clients.identity_client import IdentityAuthorityError
from task_tracker_service.core.exceptions import ServiceError
from task_tracker_service.logging import get_logger
from task_tracker_service.services.error_codes import get_http_status_code
from task_tracker_service.services.input_validator import validate_user
from task_tracker_service.services.token_validator import extract_bearer_token

if TYPE_CHECKING:
    from task_tracker_service.clients.identity_client import IdentityClient
    from task_tracker_service.services.token_validator import TokenValidator


def _authority_error(exc: IdentityAuthorityError) -> ServiceError:
    """Render an authority failure with its raw code and translated status."""
    return ServiceError(exc.code, exc.message, get_http_status_code(exc.code), {})


class CredentialManager:
    """
    Login, registration, password recovery and logout.

    Authority failures keep the authority's error code in the ``error``
    field; the HTTP status comes from the error code table, with
    unregistered codes reported as 500.
    """

    def __init__(self, identity_client: IdentityClient, token_validator: TokenValidator) -> None:
        self._identity_client = identity_client
        self._token_validator = token_validator
        self._logger = get_logger(__name__)

    async def login(self, data: dict[str, Any]) -> dict[str, Any]:
        """Sign in with email and password."""
        try:
            tokens = await self._identity_client.sign_in(data.get("email"), data.get("password"))
        except IdentityAuthorityError as exc:
            self._logger.info("Login rejected", extra={"error_code": exc.code})
            raise _authority_error(exc) from exc

        return {
            "message": "Login successful",
            "accessToken": tokens["access_token"],
            "refreshToken": tokens["refresh_token"],
        }

    async def register(self, data: dict[str, Any]) -> dict[str, Any]:
        """Create an account after checking the password locally."""
        violations = validate_user(data)
        if violations:
            raise ServiceError(
                "VALIDATION_ERROR",
                "; ".join(violations),
                400,
                {"violations": violations},
            )

        try:
            tokens = await self._identity_client.sign_up(data.get("email"), data.get("password"))
        except IdentityAuthorityError as exc:
            self._logger.info("Registration rejected", extra={"error_code": exc.code})
            raise _authority_error(exc) from exc

        return {
            "message": "User created",
            "accessToken": tokens["access_token"],
            "refreshToken": tokens["refresh_token"],
        }

    async def recover(self, data: dict[str, Any]) -> dict[str, Any]:
        """Send a password reset email."""
        try:
            await self._identity_client.send_password_reset(data.get("email"))
        except IdentityAuthorityError as exc:
            self._logger.info("Password recovery rejected", extra={"error_code": exc.code})
            raise _authority_error(exc) from exc

        return {"message": "Email sent"}

    async def logout(self, authorization: str | None) -> dict[str, Any]:
        """
        Revoke every refresh token of the token's subject.

        Already-issued tokens stop working once their issued-at time falls
        before the new revocation time; nothing is revoked retroactively.
        """
        token = extract_bearer_token(authorization)
        caller = await self._token_validator.decode(token)

        try:
            await self._identity_client.revoke_refresh_tokens(caller.uid)
        except IdentityAuthorityError as exc:
            self._logger.warning(
                "Token revocation failed",
                extra={"uid": caller.uid, "error_code": exc.code},
            )
            raise _authority_error(exc) from exc

        self._logger.info("Tokens revoked", extra={"uid": caller.uid})
        return {"message": "Successful logout"}
