"""
Magic Link Models

Magic link tokens are opaque to this service: Stytch issues them, emails
them, and enforces that each one is redeemed at most once. The only local
state is the outcome of a login request, which decides the page shown.
"""

import enum


class LoginOutcome(str, enum.Enum):
    """Result of asking for a magic link."""
    EMAIL_SENT = "email_sent"
    FORBIDDEN = "forbidden"
    ERROR = "error"
