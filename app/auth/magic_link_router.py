"""
Magic Link Authentication Endpoints

This module provides the storefront's HTML endpoints:
- GET / - homepage, logged-in view or login form
- POST /login_or_create_user - request a magic link via email
- GET /authenticate - redeem a magic link token and create the session cookie
- GET /logout - discard the session cookie

Handlers return page markup and write cookie changes to the injected
Response, which FastAPI merges into the HTML response.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request, Response, status
from fastapi.responses import HTMLResponse

from app import pages
from app.auth.dependencies import (
    get_magic_link_service,
    get_session_store,
    get_token_source,
    optional_user,
)
from app.auth.magic_link import MagicLinkError, MagicLinkService, TokenSource
from app.auth.session import CookieSessionStore, SessionDecodeError
from app.core.config import Settings, get_settings
from app.models.identity import Identity
from app.models.magic_link import LoginOutcome

router = APIRouter(default_response_class=HTMLResponse)
logger = logging.getLogger(__name__)


def render_homepage(user: Optional[Identity], settings: Settings) -> str:
    if user is not None:
        return pages.logged_in(
            email=user.primary_email,
            logout_path=f"{settings.full_address}/logout",
        )
    return pages.login_or_sign_up(login_path=f"{settings.full_address}/login_or_create_user")


@router.get("/")
async def homepage(
    user: Optional[Identity] = Depends(optional_user),
    settings: Settings = Depends(get_settings),
) -> str:
    """Render the logged-in view for a valid session, the login form otherwise."""
    return render_homepage(user, settings)


@router.post("/login_or_create_user")
async def login_or_create_user(
    response: Response,
    email: str = Form(""),
    service: MagicLinkService = Depends(get_magic_link_service),
) -> str:
    """
    Send a magic link to the submitted email address.

    In allow-list mode unknown emails get the forbidden page, which is a
    normal 200 response rather than an error.
    """
    try:
        outcome = await service.request_login(email)
    except MagicLinkError as e:
        response.status_code = e.status_code
        return pages.error(e.message)

    if outcome == LoginOutcome.FORBIDDEN:
        return pages.forbidden()

    if outcome == LoginOutcome.ERROR:
        response.status_code = status.HTTP_502_BAD_GATEWAY
        return pages.error("We could not send your sign-in link. Please try again.")

    return pages.email_sent()


@router.get("/authenticate")
async def authenticate(
    request: Request,
    response: Response,
    service: MagicLinkService = Depends(get_magic_link_service),
    token_source: TokenSource = Depends(get_token_source),
    settings: Settings = Depends(get_settings),
) -> str:
    """
    Redeem the magic link token from the emailed URL.

    Any failure stops here with an error page; the session cookie is only
    written once the provider has accepted the token.
    """
    try:
        user = await service.complete(token_source.resolve(request), request, response)
    except MagicLinkError as e:
        response.status_code = e.status_code
        return pages.error(e.message)

    return render_homepage(user, settings)


@router.get("/logout")
async def logout(
    request: Request,
    response: Response,
    store: CookieSessionStore = Depends(get_session_store),
) -> str:
    """Expire the session cookie. Succeeds whether or not a session existed."""
    try:
        session = store.get(request)
    except SessionDecodeError as e:
        logger.info("Error reading session cookie on logout: %s", e)
        session = store.new()

    store.expire(response, session)
    return pages.logged_out()
