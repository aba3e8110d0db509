"""
Magic Link Authentication Service

This module provides the passwordless login flow on top of the identity
provider. Stytch generates, emails and verifies the tokens; this service
decides who may ask for a link and turns a redeemed link into a session
cookie.

Flow:
- request_login: allow-list check, then login-or-create with Stytch
- complete: redeem the token for a provider session and store its token
"""

import logging
from typing import Optional, Protocol

from fastapi import Request, Response

from app.auth.registration import RegistrationGate
from app.auth.session import CookieSessionStore, token_preview
from app.core.identity import IdentityProvider, IdentityProviderError
from app.models.identity import Identity
from app.models.magic_link import LoginOutcome

logger = logging.getLogger(__name__)

DEFAULT_SESSION_DURATION_MINUTES = 60


class TokenSource(Protocol):
    """Resolves the magic link token for an incoming request."""

    def resolve(self, request: Request) -> Optional[str]:
        ...


class QueryTokenSource:
    """Reads the token from the link's query string."""

    def __init__(self, param: str = "token"):
        self.param = param

    def resolve(self, request: Request) -> Optional[str]:
        token = request.query_params.get(self.param)
        return token or None


class FixedTokenSource:
    """Always returns the same token. Only wired up when explicitly configured."""

    def __init__(self, token: str):
        self.token = token

    def resolve(self, request: Request) -> Optional[str]:
        return self.token


class MagicLinkService:
    """Service class for magic link authentication operations."""

    def __init__(
        self,
        identity: IdentityProvider,
        registration: RegistrationGate,
        store: CookieSessionStore,
        session_duration_minutes: int = DEFAULT_SESSION_DURATION_MINUTES,
        magic_link_url: Optional[str] = None,
    ):
        self.identity = identity
        self.registration = registration
        self.store = store
        self.session_duration_minutes = session_duration_minutes
        self.magic_link_url = magic_link_url

    async def request_login(self, email: str) -> LoginOutcome:
        """
        Ask the provider to email a magic link.

        New users are registered and existing users are logged in through
        the same call. No session is created until the link is followed.
        """
        email = email.strip()
        if not email:
            raise MissingEmailError()

        if not await self.registration.is_allowed(email):
            logger.info("Could not find allow-listed user %s", email)
            return LoginOutcome.FORBIDDEN

        try:
            await self.identity.login_or_create(
                email,
                login_magic_link_url=self.magic_link_url,
                signup_magic_link_url=self.magic_link_url,
            )
        except IdentityProviderError as e:
            logger.error("Something went wrong sending magic link to %s: %s", email, e)
            return LoginOutcome.ERROR

        logger.info("Magic link sent to %s", email)
        return LoginOutcome.EMAIL_SENT

    async def complete(self, token: Optional[str], request: Request, response: Response) -> Identity:
        """
        Redeem a magic link token and store the resulting session token.

        Raises MagicLinkError without touching the cookie when the token is
        missing or the provider rejects it.
        """
        if not token:
            raise MissingTokenError()

        try:
            auth = await self.identity.authenticate_magic_link(
                token, session_duration_minutes=self.session_duration_minutes
            )
        except IdentityProviderError as e:
            logger.error(
                "Something went wrong authenticating magic link %s: %s",
                token_preview(token),
                e,
            )
            raise InvalidTokenError() from e

        session = self.store.get_or_new(request)
        self.store.set_token(response, session, auth.session_token)

        logger.info(
            "Magic link redeemed for user %s, session %s",
            auth.user.user_id,
            token_preview(auth.session_token),
        )
        return auth.user


# Exception classes for better error handling
class MagicLinkError(Exception):
    """Base exception for magic link errors."""

    status_code = 400
    message = "Something went wrong with your sign-in link."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class MissingEmailError(MagicLinkError):
    """Raised when a login request carries no email address."""

    message = "Please enter an email address."


class MissingTokenError(MagicLinkError):
    """Raised when the authenticate request carries no token."""

    message = "The sign-in link is missing its token."


class InvalidTokenError(MagicLinkError):
    """Raised when a magic link token is invalid, expired or already used."""

    status_code = 401
    message = "The sign-in link is invalid, expired, or has already been used."
