"""HTTP clients for external service communication."""

from task_tracker_service.clients.identity_client import IdentityAuthorityError, IdentityClient

__all__ = ["IdentityAuthorityError", "IdentityClient"]
