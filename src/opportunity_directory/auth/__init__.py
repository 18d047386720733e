"""Identity resolution and role checks."""

from .context import AuthorizationContext
from .session import HttpSessionProvider, Identity, LocalSessionProvider, SessionProvider

__all__ = [
    "AuthorizationContext",
    "HttpSessionProvider",
    "Identity",
    "LocalSessionProvider",
    "SessionProvider",
]
