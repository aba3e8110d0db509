"""
Registration Allow-List

When allow-list mode is on, only people who already exist as users in the
identity provider may request a magic link. The lookup is not cached, so
adding or removing a user in the provider takes effect on the next request.

Lookups fail closed: if the provider cannot answer, the email is treated
as unknown and the request is denied.
"""

import logging

from app.core.identity import IdentityProvider, IdentityProviderError

logger = logging.getLogger(__name__)


class RegistrationGate:
    """Decides whether an email may request a magic link."""

    def __init__(self, identity: IdentityProvider, enabled: bool = False):
        self.identity = identity
        self.enabled = enabled

    async def is_allowed(self, email: str) -> bool:
        if not self.enabled:
            return True
        return await self.find_user(email)

    async def find_user(self, email: str) -> bool:
        """Return True if the provider has a user with this email address."""
        try:
            result = await self.identity.search_users_by_email(email, limit=1)
        except IdentityProviderError as e:
            logger.error("Something went wrong searching for user %s: %s", email, e)
            return False

        if not result.results:
            logger.info("Found 0 users for email %s", email)
            return False

        logger.info("Found %d users for email %s", len(result.results), email)
        return True
