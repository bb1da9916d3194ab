"""Invision Community endpoint URLs derived from the installation's base URL."""

from __future__ import annotations

from dataclasses import dataclass

from invision_auth.config import ProviderConfig

AUTHORIZE_PATH = "/oauth/authorize"
# Some installations reject the token request unless the trailing slash is present.
TOKEN_PATH = "/oauth/token/"
PROFILE_PATH = "/api/core/me"


@dataclass(frozen=True)
class InvisionEndpoints:
    base_url: str

    @classmethod
    def from_config(cls, config: ProviderConfig) -> InvisionEndpoints:
        """Build endpoints, raising ``ConfigurationError`` if no base URL is set."""
        return cls(base_url=config.require_base_url())

    @property
    def authorize_url(self) -> str:
        return f"{self.base_url}{AUTHORIZE_PATH}"

    @property
    def token_url(self) -> str:
        return f"{self.base_url}{TOKEN_PATH}"

    @property
    def profile_url(self) -> str:
        return f"{self.base_url}{PROFILE_PATH}"
