"""Shared test helpers: an in-memory identity authority and token utilities."""

from __future__ import annotations

import secrets
import uuid
from datetime import UTC, datetime
from typing import Any

from task_tracker_service.clients.identity_client import IdentityAuthorityError

START_EPOCH_SECONDS = 1_700_000_000


class FakeIdentityAuthority:
    """
    In-memory stand-in for the identity authority.

    Implements the same coroutine interface as IdentityClient. Time is a
    plain integer clock so issued-at and revocation ordering is exact.
    """

    def __init__(self) -> None:
        self.now = START_EPOCH_SECONDS
        self.accounts: dict[str, dict[str, str]] = {}
        self.tokens: dict[str, dict[str, Any]] = {}
        self.valid_since: dict[str, datetime] = {}
        self.password_resets: list[str] = []
        self.closed = False

    def issue_token(self, uid: str, issued_at: int | None = None) -> str:
        """Mint an access token for uid."""
        token = f"tok-{secrets.token_hex(16)}"
        self.tokens[token] = {"uid": uid, "iat": self.now if issued_at is None else issued_at}
        return token

    def _token_pair(self, uid: str) -> dict[str, str]:
        return {
            "access_token": self.issue_token(uid),
            "refresh_token": f"ref-{secrets.token_hex(16)}",
        }

    def uid_for(self, email: str) -> str:
        """Return the uid of a registered account."""
        return self.accounts[email]["uid"]

    async def verify_token(self, token: str) -> dict[str, Any]:
        claims = self.tokens.get(token)
        if claims is None:
            raise IdentityAuthorityError("auth/argument-error", "Decoding token failed")
        return dict(claims)

    async def get_tokens_valid_since(self, uid: str) -> datetime | None:
        return self.valid_since.get(uid)

    async def sign_in(self, email: Any, password: Any) -> dict[str, str]:
        account = self.accounts.get(email)
        if account is None or account["password"] != password:
            raise IdentityAuthorityError("auth/invalid-credential", "Invalid login credentials")
        return self._token_pair(account["uid"])

    async def sign_up(self, email: Any, password: Any) -> dict[str, str]:
        if not isinstance(email, str) or "@" not in email:
            raise IdentityAuthorityError("auth/invalid-email", "The email address is badly formatted")
        if email in self.accounts:
            raise IdentityAuthorityError(
                "auth/email-already-in-use",
                "The email address is already in use",
            )
        uid = uuid.uuid4().hex
        self.accounts[email] = {"uid": uid, "password": password}
        return self._token_pair(uid)

    async def send_password_reset(self, email: Any) -> None:
        if email not in self.accounts:
            raise IdentityAuthorityError("auth/user-not-found", "No account for this email")
        self.password_resets.append(email)

    async def revoke_refresh_tokens(self, uid: str) -> None:
        # Tokens minted from here on carry an iat equal to the new valid-since time.
        self.now += 1
        self.valid_since[uid] = datetime.fromtimestamp(self.now, tz=UTC)

    async def close(self) -> None:
        self.closed = True


def bearer(token: str) -> dict[str, str]:
    """Build an Authorization header for token."""
    return {"Authorization": f"Bearer {token}"}
