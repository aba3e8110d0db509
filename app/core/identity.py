"""
Identity Provider Client

This module wraps the external identity provider. The rest of the
application depends only on the IdentityProvider protocol, which names the
four operations the storefront consumes:

- login_or_create: send a magic link, creating the user if needed
- authenticate_magic_link: redeem a magic link token for a session
- authenticate_session: validate (and rotate) an existing session token
- search_users_by_email: exact-match user lookup for the allow-list

StytchClient implements the protocol against the Stytch consumer REST API.
Any provider exposing the same four operations can be substituted.
"""

import logging
from typing import Any, Dict, Optional, Protocol, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from app.core.config import Settings
from app.models.identity import SessionAuthentication, UserSearchResult

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

STYTCH_TEST_API_URL = "https://test.stytch.com/v1/"
STYTCH_LIVE_API_URL = "https://api.stytch.com/v1/"


class IdentityProviderError(Exception):
    """Raised when the identity provider rejects a call or cannot be reached."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_type: Optional[str] = None,
        request_id: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_type = error_type
        self.request_id = request_id

    def __str__(self) -> str:
        if self.error_type:
            return f"{self.error_type}: {self.message}"
        return self.message


class IdentityProvider(Protocol):
    """Capability interface for the identity provider."""

    async def login_or_create(
        self,
        email: str,
        login_magic_link_url: Optional[str] = None,
        signup_magic_link_url: Optional[str] = None,
    ) -> None:
        ...

    async def authenticate_magic_link(
        self, token: str, session_duration_minutes: int
    ) -> SessionAuthentication:
        ...

    async def authenticate_session(self, session_token: str) -> SessionAuthentication:
        ...

    async def search_users_by_email(self, email: str, limit: int = 1) -> UserSearchResult:
        ...


def default_api_url(project_id: str) -> str:
    """Pick the Stytch environment from the project id prefix."""
    if project_id.startswith("project-live-"):
        return STYTCH_LIVE_API_URL
    return STYTCH_TEST_API_URL


class StytchClient:
    """IdentityProvider backed by the Stytch consumer API."""

    def __init__(
        self,
        project_id: str,
        secret: str,
        api_url: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.project_id = project_id
        self._secret = secret
        self.api_url = (api_url or default_api_url(project_id)).rstrip("/") + "/"
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "StytchClient":
        return cls(
            project_id=settings.stytch_project_id,
            secret=settings.stytch_secret.get_secret_value(),
            api_url=settings.stytch_api_url,
            timeout=settings.stytch_timeout,
            transport=transport,
        )

    async def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST a JSON payload and return the decoded body, raising on any failure."""
        try:
            async with httpx.AsyncClient(
                base_url=self.api_url,
                auth=(self.project_id, self._secret),
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                resp = await client.post(path, json=payload)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error("Failed to reach Stytch at %s: %s", path, e)
            raise IdentityProviderError(f"Failed to contact identity provider: {e}") from e

        try:
            body = resp.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if resp.is_error:
            raise IdentityProviderError(
                body.get("error_message") or f"Identity provider returned HTTP {resp.status_code}",
                status_code=body.get("status_code", resp.status_code),
                error_type=body.get("error_type"),
                request_id=body.get("request_id"),
            )

        return body

    async def login_or_create(
        self,
        email: str,
        login_magic_link_url: Optional[str] = None,
        signup_magic_link_url: Optional[str] = None,
    ) -> None:
        payload: Dict[str, Any] = {"email": email}
        if login_magic_link_url:
            payload["login_magic_link_url"] = login_magic_link_url
        if signup_magic_link_url:
            payload["signup_magic_link_url"] = signup_magic_link_url

        await self._post("magic_links/email/login_or_create", payload)

    async def authenticate_magic_link(
        self, token: str, session_duration_minutes: int
    ) -> SessionAuthentication:
        body = await self._post(
            "magic_links/authenticate",
            {"token": token, "session_duration_minutes": session_duration_minutes},
        )
        return self._parse(SessionAuthentication, body)

    async def authenticate_session(self, session_token: str) -> SessionAuthentication:
        body = await self._post("sessions/authenticate", {"session_token": session_token})
        return self._parse(SessionAuthentication, body)

    async def search_users_by_email(self, email: str, limit: int = 1) -> UserSearchResult:
        body = await self._post(
            "users/search",
            {
                "limit": limit,
                "query": {
                    "operator": "AND",
                    "operands": [
                        {"filter_name": "email_address", "filter_value": [email]},
                    ],
                },
            },
        )
        return self._parse(UserSearchResult, body)

    @staticmethod
    def _parse(model: Type[ModelT], body: Dict[str, Any]) -> ModelT:
        try:
            return model.model_validate(body)
        except ValidationError as e:
            raise IdentityProviderError(f"Unexpected identity provider response: {e}") from e
