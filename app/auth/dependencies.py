"""
Authentication Dependencies for Cookie Sessions

This module wires the authentication components together as FastAPI
dependencies and provides the gate that resolves the current user:

- get_identity_provider: Stytch client built from settings
- get_session_store: signed cookie store built from the session secret
- get_registration_gate / get_token_source / get_magic_link_service
- optional_user: current identity if the session is valid, None otherwise

Everything is built from injected settings, so tests can swap any piece
through app.dependency_overrides without touching process-wide state.
"""

import logging
from typing import Optional

from fastapi import Depends, Request, Response

from app.auth.magic_link import FixedTokenSource, MagicLinkService, QueryTokenSource, TokenSource
from app.auth.registration import RegistrationGate
from app.auth.session import CookieSessionStore, SessionDecodeError, token_preview
from app.core.config import Settings, get_settings
from app.core.identity import IdentityProvider, IdentityProviderError, StytchClient
from app.models.identity import Identity

logger = logging.getLogger(__name__)


class AuthGate:
    """
    Resolves the authenticated identity for a request.

    Every call with a stored token round-trips to the identity provider.
    A successful check rotates the stored token; a failed one clears it,
    so a stale cookie heals itself without an explicit logout.
    """

    def __init__(self, store: CookieSessionStore, identity: IdentityProvider):
        self.store = store
        self.identity = identity

    async def get_authenticated_user(
        self, request: Request, response: Response
    ) -> Optional[Identity]:
        try:
            session = self.store.get(request)
        except SessionDecodeError as e:
            logger.debug("No usable session cookie: %s", e)
            return None

        if not session.data.has_token:
            return None

        try:
            auth = await self.identity.authenticate_session(session.data.token)
        except IdentityProviderError as e:
            logger.info(
                "Session %s rejected by identity provider: %s",
                token_preview(session.data.token),
                e,
            )
            session.clear_token()
            self.store.save(response, session)
            return None

        self.store.set_token(response, session, auth.session_token)
        return auth.user


def get_identity_provider(settings: Settings = Depends(get_settings)) -> IdentityProvider:
    """Provide the identity provider client."""
    return StytchClient.from_settings(settings)


def get_session_store(settings: Settings = Depends(get_settings)) -> CookieSessionStore:
    """Provide the signed cookie store."""
    return CookieSessionStore(
        secret_key=settings.session_secret.get_secret_value(),
        max_age=settings.session_cookie_max_age,
        secure=settings.is_production,
    )


def get_auth_gate(
    store: CookieSessionStore = Depends(get_session_store),
    identity: IdentityProvider = Depends(get_identity_provider),
) -> AuthGate:
    return AuthGate(store, identity)


def get_registration_gate(
    settings: Settings = Depends(get_settings),
    identity: IdentityProvider = Depends(get_identity_provider),
) -> RegistrationGate:
    return RegistrationGate(identity, enabled=settings.use_whitelist)


def get_token_source(settings: Settings = Depends(get_settings)) -> TokenSource:
    """Query string token, unless a fixed test token is configured."""
    if settings.magic_link_token_override is not None:
        return FixedTokenSource(settings.magic_link_token_override.get_secret_value())
    return QueryTokenSource()


def get_magic_link_service(
    settings: Settings = Depends(get_settings),
    identity: IdentityProvider = Depends(get_identity_provider),
    registration: RegistrationGate = Depends(get_registration_gate),
    store: CookieSessionStore = Depends(get_session_store),
) -> MagicLinkService:
    return MagicLinkService(
        identity=identity,
        registration=registration,
        store=store,
        session_duration_minutes=settings.session_duration_minutes,
        magic_link_url=settings.magic_link_url,
    )


async def optional_user(
    request: Request,
    response: Response,
    gate: AuthGate = Depends(get_auth_gate),
) -> Optional[Identity]:
    """
    Get the current identity if authenticated, None otherwise.

    Never raises for anonymous or stale sessions. Cookie updates are
    written to the response FastAPI merges into the returned page.
    """
    return await gate.get_authenticated_user(request, response)
