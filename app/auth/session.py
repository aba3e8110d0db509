"""
Session Cookie Store

This module keeps the provider-issued session token in a signed cookie on
the client. There is no server-side session table: the cookie is the only
session state, and it is trusted only after the identity provider has
revalidated the token it carries.

Features:
- Fixed cookie name shared by every handler
- itsdangerous signature bound to an injected secret
- Typed payload, so "no token" is a value and not a decode failure
- Expiry by re-saving the cookie with a negative max age
"""

import logging
from typing import Optional

from fastapi import Request, Response
from itsdangerous import BadSignature, URLSafeTimedSerializer
from pydantic import ValidationError

from app.models.session import CookieSession, SessionData

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "stytch_session"
SESSION_COOKIE_MAX_AGE = 30 * 24 * 60 * 60  # 30 days in seconds


class SessionDecodeError(Exception):
    """Raised when a session cookie is present but cannot be trusted or parsed."""


class CookieSessionStore:
    """Reads and writes the signed session cookie."""

    def __init__(
        self,
        secret_key: str,
        cookie_name: str = SESSION_COOKIE_NAME,
        max_age: int = SESSION_COOKIE_MAX_AGE,
        secure: bool = False,
        salt: str = "hello-socks-session",
    ):
        self.cookie_name = cookie_name
        self.max_age = max_age
        self.secure = secure
        self._serializer = URLSafeTimedSerializer(secret_key=secret_key, salt=salt)

    def get(self, request: Request) -> CookieSession:
        """
        Load the session for this request.

        Returns a fresh empty session when no cookie is present. Raises
        SessionDecodeError when a cookie is present but its signature is
        invalid or expired, or its payload is malformed.
        """
        raw = request.cookies.get(self.cookie_name)
        if not raw:
            return self.new()

        return CookieSession(data=self.decode(raw), max_age=self.max_age, is_new=False)

    def decode(self, value: str) -> SessionData:
        """Verify and parse a raw cookie value."""
        try:
            payload = self._serializer.loads(value, max_age=self.max_age)
            return SessionData.model_validate(payload)
        except BadSignature as e:
            raise SessionDecodeError(f"session cookie signature rejected: {e}") from e
        except ValidationError as e:
            raise SessionDecodeError(f"session cookie payload malformed: {e}") from e

    def encode(self, data: SessionData) -> str:
        return self._serializer.dumps(data.model_dump())

    def get_or_new(self, request: Request) -> CookieSession:
        """Like get(), but an unreadable cookie yields an empty session."""
        try:
            return self.get(request)
        except SessionDecodeError as e:
            logger.warning("Ignoring unreadable session cookie: %s", e)
            return self.new()

    def new(self) -> CookieSession:
        return CookieSession(data=SessionData(), max_age=self.max_age, is_new=True)

    def save(self, response: Response, session: CookieSession) -> None:
        """Write the session cookie onto the response."""
        if session.max_age < 0:
            value = ""
        else:
            value = self.encode(session.data)

        response.set_cookie(
            key=self.cookie_name,
            value=value,
            max_age=session.max_age,
            path="/",
            httponly=True,
            secure=self.secure,
            samesite="lax",
        )

    def set_token(self, response: Response, session: CookieSession, token: str) -> None:
        """Store a session token and persist the cookie."""
        session.set_token(token)
        self.save(response, session)

    def expire(self, response: Response, session: Optional[CookieSession] = None) -> None:
        """Instruct the client to discard the session cookie immediately."""
        session = session or self.new()
        session.expire()
        self.save(response, session)


def token_preview(token: Optional[str]) -> str:
    """Shorten a token for log output."""
    if not token:
        return "<none>"
    return token[:8] + "..."
