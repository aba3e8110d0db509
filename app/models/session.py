"""
Session Cookie Models

This module defines the payload carried in the signed session cookie and
the per-request view of that cookie. The server keeps no session table:
the cookie holds only the provider-issued session token, which is
revalidated against the identity provider on every request.
"""

from typing import Optional

from pydantic import BaseModel


class SessionData(BaseModel):
    """Signed cookie payload. A missing or empty token means no session."""
    token: Optional[str] = None

    @property
    def has_token(self) -> bool:
        return bool(self.token)


class CookieSession(BaseModel):
    """Session cookie state for a single request."""
    data: SessionData
    max_age: int
    is_new: bool = True

    def set_token(self, token: str) -> None:
        self.data.token = token

    def clear_token(self) -> None:
        self.data.token = None

    def expire(self) -> None:
        """Mark the cookie for immediate removal by the client."""
        self.max_age = -1
