"""Contracts and shared types for the Invision Community OAuth adapter."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from invision_auth.models import AuthBaseModel

PROVIDER_NAME = "invision"


class ProviderError(Exception):
    """Standardized provider error with HTTP-style status information."""

    def __init__(
        self, error: str, description: str | None = None, status_code: int | None = 400
    ):
        super().__init__(description or error)
        self.error = error
        self.description = description
        self.status_code = status_code


class ConfigurationError(ProviderError):
    """The provider is missing configuration it needs (e.g. the base URL)."""

    def __init__(self, description: str):
        super().__init__("configuration_error", description, status_code=500)


class TokenExchangeError(ProviderError):
    """Exchanging an authorization code for an access token failed.

    ``status_code`` and ``body`` hold the token endpoint's response verbatim
    when one was received. For transport faults ``status_code`` is ``None``
    and the original exception is available as ``__cause__``.
    """

    def __init__(
        self,
        description: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
    ):
        super().__init__("token_exchange_failed", description, status_code=status_code)
        self.body = body


class ProfileFetchError(ProviderError):
    """Fetching or decoding the authenticated member's profile failed.

    ``error`` tells the failure kinds apart:

    - ``parse``: the body was not a JSON object
    - ``api``: the provider embedded an ``errorCode`` in the response
    - ``http``: non-200 status without an embedded error object
    - ``transport``: the request never produced a response
    - ``invalid``: the profile carries no member identifier
    """

    def __init__(
        self,
        kind: str,
        code: str | None = None,
        message: str | None = None,
        *,
        status_code: int | None = None,
    ):
        if kind == "api":
            description = f"Invision Community API error: {code}"
            if message is not None:
                description = f"{description} - {message}"
        else:
            description = message or f"Invision Community profile request failed ({kind})"
        super().__init__(kind, description, status_code=status_code)
        self.kind = kind
        self.code = code
        self.message = message


class CanonicalUser(AuthBaseModel):
    """Normalized member profile, independent of upstream field names."""

    id: str
    nickname: str | None = None
    display_name: str | None = None
    email: str | None = None
    avatar_url: str | None = None
    raw: dict[str, Any]

    @property
    def member_id(self) -> str:
        return self.id

    @property
    def full_name(self) -> str | None:
        return self.display_name


class LoginResult(AuthBaseModel):
    """Outcome of the full code -> token -> profile flow."""

    token: dict[str, Any]
    user: CanonicalUser

    @property
    def access_token(self) -> str:
        return str(self.token["access_token"])


@runtime_checkable
class TokenExchanger(Protocol):
    """Exchanges an authorization code for the provider's token response."""

    def exchange_code(self, code: str, *, code_verifier: str | None = None) -> dict[str, Any]:
        """Return the decoded token endpoint response."""


@runtime_checkable
class ProfileFetcher(Protocol):
    """Retrieves the raw profile belonging to an access token."""

    def fetch_profile(self, access_token: str) -> dict[str, Any]:
        """Return the decoded profile payload."""


@runtime_checkable
class ProfileMapper(Protocol):
    """Maps a raw provider profile onto a :class:`CanonicalUser`."""

    def map_profile(self, raw: dict[str, Any]) -> CanonicalUser: ...


__all__ = [
    "PROVIDER_NAME",
    "CanonicalUser",
    "ConfigurationError",
    "LoginResult",
    "ProfileFetchError",
    "ProfileFetcher",
    "ProfileMapper",
    "ProviderError",
    "TokenExchangeError",
    "TokenExchanger",
]
