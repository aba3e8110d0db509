"""
Authentication System

This package assembles passwordless authentication for Hello Socks. Stytch
issues and verifies magic links and session tokens; the session token is
kept in a signed cookie and revalidated with Stytch on every request.

The pieces are built per request from injected settings (see
dependencies.py), so there is no process-wide session store or test flag.
"""

from app.auth.dependencies import AuthGate, optional_user
from app.auth.magic_link import FixedTokenSource, MagicLinkService, QueryTokenSource
from app.auth.registration import RegistrationGate
from app.auth.session import SESSION_COOKIE_NAME, CookieSessionStore

__all__ = [
    "AuthGate",
    "CookieSessionStore",
    "FixedTokenSource",
    "MagicLinkService",
    "QueryTokenSource",
    "RegistrationGate",
    "SESSION_COOKIE_NAME",
    "optional_user",
]
