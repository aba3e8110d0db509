"""
Identity Provider Models

This module defines the user and session shapes returned by the identity
provider. Identities are never stored locally: every authentication check
fetches a fresh copy from the provider, so these are plain Pydantic schemas
rather than database tables.

Unknown fields in provider responses are ignored, which keeps the models
stable when the provider adds attributes.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class UserEmail(BaseModel):
    """An email address attached to a provider user."""
    email_id: Optional[str] = None
    email: str
    verified: bool = False


class Identity(BaseModel):
    """A user record as known to the identity provider."""
    user_id: str
    emails: List[UserEmail] = Field(default_factory=list)
    status: Optional[str] = None

    @property
    def primary_email(self) -> Optional[str]:
        """The first email address, used for display."""
        if not self.emails:
            return None
        return self.emails[0].email


class SessionAuthentication(BaseModel):
    """Result of authenticating a magic link or an existing session."""
    session_token: str = Field(..., min_length=1)
    user: Identity
    request_id: Optional[str] = None


class UserSearchResult(BaseModel):
    """Result page of a user search."""
    results: List[Identity] = Field(default_factory=list)
    request_id: Optional[str] = None
