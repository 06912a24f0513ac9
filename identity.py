"""Bearer-token identity resolution against the external identity provider."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import requests

from course_settings import IDENTITY_PROVIDER_KEY, IDENTITY_PROVIDER_URL, IDENTITY_TIMEOUT_S

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """An authenticated caller as reported by the identity provider."""

    id: str
    email: Optional[str] = None


def bearer_token(header: Optional[str]) -> Optional[str]:
    if not header:
        return None
    scheme, _, token = header.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = token.strip()
    return token or None


class ProviderIdentityResolver:
    """Ask the provider's ``/auth/v1/user`` endpoint who owns a token."""

    def __init__(self, base_url: str, api_key: str = "", timeout: float = 5.0):
        self.base_url = (base_url or "").rstrip("/")
        self.api_key = api_key
        self.timeout = timeout

    @classmethod
    def from_env(cls) -> "ProviderIdentityResolver":
        return cls(IDENTITY_PROVIDER_URL, IDENTITY_PROVIDER_KEY, IDENTITY_TIMEOUT_S)

    def resolve(self, token: Optional[str]) -> Optional[Identity]:
        if not token:
            return None
        if not self.base_url:
            log.warning("IDENTITY_PROVIDER_URL is not set; rejecting bearer token")
            return None

        headers = {"Authorization": f"Bearer {token}"}
        if self.api_key:
            headers["apikey"] = self.api_key
        resp = requests.get(f"{self.base_url}/auth/v1/user", headers=headers, timeout=self.timeout)
        if resp.status_code in (400, 401, 403):
            return None
        resp.raise_for_status()

        data = resp.json() or {}
        user_id = data.get("id")
        if not user_id:
            log.warning("Identity provider returned no user id")
            return None
        return Identity(id=str(user_id), email=data.get("email"))
