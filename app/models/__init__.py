from .identity import Identity, SessionAuthentication, UserEmail, UserSearchResult  # noqa: F401
from .magic_link import LoginOutcome  # noqa: F401
from .session import CookieSession, SessionData  # noqa: F401
