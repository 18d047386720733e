"""Session providers: turn a session token into an authenticated identity."""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx
from pydantic import BaseModel

from opportunity_directory.errors import Transient, Unauthenticated
from opportunity_directory.store.profiles import ProfileRepository

logger = logging.getLogger(__name__)


class Identity(BaseModel):
    """Authenticated identity as reported by the session provider."""

    user_id: str
    email: str = ""
    full_name: str = ""


class SessionProvider(ABC):
    """
    Standard interface for identity sources.
    Implementations raise Unauthenticated for bad tokens and Transient when
    the provider cannot be reached.
    """

    @abstractmethod
    def resolve(self, token: str) -> Identity:
        """Return the identity behind a session token."""
        pass


class LocalSessionProvider(SessionProvider):
    """
    Provider for local use and tests: the token is the user id.
    When ``known_identities`` is given, only those tokens are accepted;
    otherwise any token naming an existing profile is.
    """

    def __init__(
        self,
        profiles: Optional[ProfileRepository] = None,
        known_identities: Optional[dict[str, Identity]] = None,
    ):
        self._profiles = profiles
        self._known = dict(known_identities or {})

    def register(self, token: str, identity: Identity) -> None:
        self._known[token] = identity

    def resolve(self, token: str) -> Identity:
        token = (token or "").strip()
        if not token:
            raise Unauthenticated()
        if token in self._known:
            return self._known[token]
        if self._profiles is not None:
            profile = self._profiles.get(token)
            if profile is not None:
                return Identity(user_id=profile.user_id, email=profile.email, full_name=profile.full_name)
        raise Unauthenticated()


class HttpSessionProvider(SessionProvider):
    """
    Resolves tokens against a hosted auth service (``GET {base_url}/user`` with a
    bearer token), the flow used by Supabase-style auth APIs.
    """

    USER_PATH = "/user"

    def __init__(
        self,
        base_url: str,
        *,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self._client = client or httpx.Client(timeout=timeout)

    def _headers(self, token: str) -> dict[str, str]:
        headers = {"Authorization": f"Bearer {token}", "Accept": "application/json"}
        if self.api_key:
            headers["apikey"] = self.api_key
        return headers

    def resolve(self, token: str) -> Identity:
        token = (token or "").strip()
        if not token:
            raise Unauthenticated()
        try:
            resp = self._client.get(f"{self.base_url}{self.USER_PATH}", headers=self._headers(token))
        except httpx.TimeoutException as e:
            logger.warning("Auth provider timed out: %s", e)
            raise Transient() from e
        except httpx.RequestError as e:
            logger.warning("Auth provider unreachable: %s", e)
            raise Transient() from e

        if resp.status_code in (401, 403):
            raise Unauthenticated()
        if resp.status_code >= 500:
            logger.warning("Auth provider returned HTTP %s", resp.status_code)
            raise Transient()
        if resp.status_code != 200:
            logger.warning("Auth provider rejected token lookup: HTTP %s", resp.status_code)
            raise Unauthenticated()

        try:
            payload = resp.json()
        except ValueError as e:
            raise Transient() from e
        if not isinstance(payload, dict):
            logger.warning("Auth provider returned a non-object user payload")
            raise Transient()
        return _identity_from_payload(payload)


def _identity_from_payload(payload: dict) -> Identity:
    """Map an auth user payload (``id``, ``email``, ``user_metadata``) to Identity."""
    user_id = str(payload.get("id") or "").strip()
    if not user_id:
        raise Unauthenticated()
    metadata = payload.get("user_metadata")
    if not isinstance(metadata, dict):
        metadata = {}
    return Identity(
        user_id=user_id,
        email=str(payload.get("email") or ""),
        full_name=str(metadata.get("full_name") or metadata.get("name") or ""),
    )
