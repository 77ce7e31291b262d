# libs/catalog_shared/context.py
"""
Request context carried from the HTTP layer into services and logs.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class AppContext:
    """
    Request-level information shared across the application stack.

    ``user_id`` is only set once a session verifier has resolved the
    caller; anonymous requests leave it as None.
    """

    user_id: Optional[str] = None
    correlation_id: Optional[str] = None
    request_id: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    def to_dict(self) -> dict:
        """Convert context to dictionary for logging/serialization."""
        return {
            "user_id": self.user_id,
            "correlation_id": self.correlation_id,
            "request_id": self.request_id,
        }
