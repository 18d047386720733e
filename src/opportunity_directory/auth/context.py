"""Authorization context: who is calling, and with which role."""

import logging
from dataclasses import dataclass
from typing import Optional

from opportunity_directory.errors import Forbidden, Unauthenticated
from opportunity_directory.models.profile import Profile, Role
from opportunity_directory.store.profiles import ProfileRepository

from .session import Identity, SessionProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthorizationContext:
    """
    Resolved caller. Passed explicitly into every operation; anonymous viewers
    carry neither identity nor profile.
    """

    identity: Optional[Identity] = None
    profile: Optional[Profile] = None

    @classmethod
    def anonymous(cls) -> "AuthorizationContext":
        return cls()

    @classmethod
    def resolve(
        cls,
        token: Optional[str],
        provider: SessionProvider,
        profiles: ProfileRepository,
    ) -> "AuthorizationContext":
        """
        Resolve a session token to identity + profile. The profile is created
        on first sign-in with the student role.
        """
        if not token:
            raise Unauthenticated()
        identity = provider.resolve(token)
        profile = profiles.ensure(identity.user_id, full_name=identity.full_name, email=identity.email)
        return cls(identity=identity, profile=profile)

    @classmethod
    def for_profile(cls, profile: Profile) -> "AuthorizationContext":
        identity = Identity(user_id=profile.user_id, email=profile.email, full_name=profile.full_name)
        return cls(identity=identity, profile=profile)

    @property
    def role(self) -> Optional[Role]:
        return self.profile.role if self.profile else None

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None

    def is_admin(self) -> bool:
        return self.profile is not None and self.profile.is_admin

    def current_user_id(self) -> Optional[str]:
        return self.identity.user_id if self.identity else None

    def require_authenticated(self) -> str:
        """Return the user id or raise Unauthenticated."""
        user_id = self.current_user_id()
        if user_id is None:
            raise Unauthenticated()
        return user_id

    def require_admin(self) -> str:
        """Return the admin's user id; Unauthenticated/Forbidden otherwise."""
        user_id = self.require_authenticated()
        if not self.is_admin():
            logger.warning("Denied admin action for %s", user_id)
            raise Forbidden()
        return user_id
