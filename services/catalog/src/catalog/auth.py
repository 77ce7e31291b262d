# services/catalog/src/catalog/auth.py
"""
Session lookup for the favorites endpoints.

Credential verification lives outside this service. Deployments install a
SessionVerifierInterface implementation on ``app.state.session_verifier``;
this module only turns the session cookie into a user id through it.
"""

from abc import ABC, abstractmethod
from typing import Optional

from fastapi import Request
from libs.catalog_shared.context import AppContext
from libs.catalog_shared.logging import get_logger

from .config import config

logger = get_logger(__name__)


class InvalidSessionError(Exception):
    """The session credential was rejected by the verifier."""


class SessionVerifierInterface(ABC):
    @abstractmethod
    def verify(self, credential: str) -> str:
        """
        Return the stable user id for ``credential``.

        Raises:
            InvalidSessionError: if the credential is expired, revoked or malformed
        """
        pass


def resolve_user_id(
    credential: Optional[str], verifier: Optional[SessionVerifierInterface]
) -> Optional[str]:
    """User id for the credential, or None for anonymous / invalid sessions."""
    if not credential or verifier is None:
        return None

    try:
        return verifier.verify(credential)
    except InvalidSessionError as e:
        logger.warning(f"Invalid session cookie: {e}")
        return None


def get_app_context(request: Request) -> AppContext:
    """FastAPI dependency: request context with the authenticated user, if any."""
    verifier = getattr(request.app.state, "session_verifier", None)
    credential = request.cookies.get(config.session_cookie_name)

    context = AppContext(
        user_id=resolve_user_id(credential, verifier),
        correlation_id=getattr(request.state, "correlation_id", None),
    )
    logger.debug("Resolved request context", extra=context.to_dict())
    return context
