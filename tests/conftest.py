import os

# Set test environment
os.environ["STYTCH_PROJECT_ID"] = "project-test-11111111-2222-3333-4444-555555555555"
os.environ["STYTCH_SECRET"] = "secret-test-abcdefghijklmnopqrstuvwxyz"
os.environ["SESSION_SECRET"] = "test-session-secret-0123456789abcdef0123"
os.environ.pop("USEWHITELIST", None)
os.environ.pop("USE_WHITELIST", None)
os.environ.pop("MAGIC_LINK_TOKEN_OVERRIDE", None)

from collections.abc import AsyncGenerator
from typing import Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.auth.dependencies import get_identity_provider
from app.auth.session import CookieSessionStore
from app.core.config import Settings, get_settings
from app.core.identity import IdentityProviderError
from app.main import app
from app.models.identity import Identity, SessionAuthentication, UserEmail, UserSearchResult

TEST_SESSION_SECRET = os.environ["SESSION_SECRET"]


class FakeIdentityProvider:
    """In-memory stand-in for Stytch implementing the four consumed operations."""

    def __init__(self):
        self.users: dict[str, Identity] = {}
        self.magic_tokens: dict[str, str] = {}
        self.sessions: dict[str, str] = {}
        self.failures: dict[str, IdentityProviderError] = {}
        self.rotate_sessions = False
        self.calls: list[tuple[str, tuple]] = []
        self._counter = 0

    def add_user(self, email: str) -> Identity:
        user = self.users.get(email)
        if user is None:
            user = Identity(
                user_id=f"user-test-{len(self.users) + 1}",
                emails=[UserEmail(email_id=f"email-test-{len(self.users) + 1}", email=email, verified=True)],
                status="active",
            )
            self.users[email] = user
        return user

    def issue_magic_token(self, email: str, token: str) -> None:
        self.add_user(email)
        self.magic_tokens[token] = email

    def start_session(self, email: str, session_token: str) -> None:
        self.add_user(email)
        self.sessions[session_token] = email

    def fail(self, operation: str, error: Optional[IdentityProviderError] = None) -> None:
        self.failures[operation] = error or IdentityProviderError(
            "Internal server error", status_code=500, error_type="internal_server_error"
        )

    def calls_to(self, operation: str) -> list[tuple]:
        return [args for name, args in self.calls if name == operation]

    def _record(self, operation: str, *args) -> None:
        self.calls.append((operation, args))
        if operation in self.failures:
            raise self.failures[operation]

    def _new_session_token(self) -> str:
        self._counter += 1
        return f"session-token-{self._counter}"

    async def login_or_create(
        self,
        email: str,
        login_magic_link_url: Optional[str] = None,
        signup_magic_link_url: Optional[str] = None,
    ) -> None:
        self._record("login_or_create", email, login_magic_link_url, signup_magic_link_url)
        self.add_user(email)

    async def authenticate_magic_link(
        self, token: str, session_duration_minutes: int
    ) -> SessionAuthentication:
        self._record("authenticate_magic_link", token, session_duration_minutes)
        email = self.magic_tokens.pop(token, None)
        if email is None:
            raise IdentityProviderError(
                "Magic link could not be authenticated",
                status_code=404,
                error_type="unable_to_auth_magic_link",
            )
        session_token = self._new_session_token()
        self.sessions[session_token] = email
        return SessionAuthentication(session_token=session_token, user=self.users[email])

    async def authenticate_session(self, session_token: str) -> SessionAuthentication:
        self._record("authenticate_session", session_token)
        email = self.sessions.get(session_token)
        if email is None:
            raise IdentityProviderError(
                "Session could not be found", status_code=404, error_type="session_not_found"
            )
        if self.rotate_sessions:
            del self.sessions[session_token]
            session_token = self._new_session_token()
            self.sessions[session_token] = email
        return SessionAuthentication(session_token=session_token, user=self.users[email])

    async def search_users_by_email(self, email: str, limit: int = 1) -> UserSearchResult:
        self._record("search_users_by_email", email, limit)
        user = self.users.get(email)
        return UserSearchResult(results=[user] if user else [])


def make_settings(**overrides) -> Settings:
    values = {
        "stytch_project_id": os.environ["STYTCH_PROJECT_ID"],
        "stytch_secret": os.environ["STYTCH_SECRET"],
        "session_secret": TEST_SESSION_SECRET,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def identity() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def session_store() -> CookieSessionStore:
    """Store sharing the app's test secret, for reading and forging cookies."""
    return CookieSessionStore(secret_key=TEST_SESSION_SECRET)


@pytest_asyncio.fixture(scope="function")
async def client(
    identity: FakeIdentityProvider, settings: Settings
) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client with the identity provider and settings overridden."""
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_identity_provider] = lambda: identity

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
