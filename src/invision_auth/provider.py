"""Invision Community OAuth2 provider.

:class:`InvisionProvider` is a thin orchestrator over three capabilities:

- :class:`~invision_auth.contracts.TokenExchanger` turns an authorization code
  into a token response,
- :class:`~invision_auth.contracts.ProfileFetcher` retrieves the raw member
  profile for an access token,
- :class:`~invision_auth.contracts.ProfileMapper` normalizes that profile.

The provider does not generate or verify ``state``, persist sessions, refresh
or revoke tokens, or retry failed requests. Those belong to the host.

Example:
    >>> from invision_auth.config import resolve_provider_config
    >>> config = resolve_provider_config(
    ...     client_id="cid",
    ...     client_secret="secret",
    ...     redirect_uri="https://app.example.com/callback",
    ...     base_url="https://community.example.com/",
    ... )
    >>> with InvisionProvider.from_config(config) as provider:
    ...     url = provider.build_authorization_url(state="xyz")
    >>> url.startswith("https://community.example.com/oauth/authorize?")
    True
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import TracebackType
from typing import Any
from urllib.parse import urlencode

import httpx

from invision_auth.config import ProviderConfig
from invision_auth.contracts import (
    PROVIDER_NAME,
    CanonicalUser,
    LoginResult,
    ProfileFetcher,
    ProfileMapper,
    TokenExchangeError,
    TokenExchanger,
)
from invision_auth.endpoints import InvisionEndpoints
from invision_auth.http import create_http_client
from invision_auth.profile import InvisionProfileFetcher, InvisionProfileMapper
from invision_auth.token import InvisionTokenExchanger

logger = logging.getLogger(__name__)

__all__ = ["InvisionProvider"]


class InvisionProvider:
    """OAuth2 Authorization Code flow against an Invision Community installation."""

    provider_name = PROVIDER_NAME

    def __init__(
        self,
        config: ProviderConfig,
        exchanger: TokenExchanger,
        fetcher: ProfileFetcher,
        mapper: ProfileMapper,
        *,
        owned_client: httpx.Client | None = None,
    ):
        self.config = config
        self.exchanger = exchanger
        self.fetcher = fetcher
        self.mapper = mapper
        # Closed by close(); only set when the provider created the client.
        self._owned_client = owned_client

    @classmethod
    def from_config(
        cls, config: ProviderConfig, http_client: httpx.Client | None = None
    ) -> InvisionProvider:
        """Compose the default Invision capabilities around one HTTP client.

        When ``http_client`` is omitted a client is created with
        :func:`~invision_auth.http.create_http_client` and closed by
        :meth:`close`.
        """
        owned = None
        if http_client is None:
            http_client = owned = create_http_client()
        return cls(
            config,
            InvisionTokenExchanger(config, http_client),
            InvisionProfileFetcher(config, http_client),
            InvisionProfileMapper(),
            owned_client=owned,
        )

    @property
    def endpoints(self) -> InvisionEndpoints:
        return InvisionEndpoints.from_config(self.config)

    def code_fields(self, state: str) -> dict[str, str]:
        return {
            "client_id": self.config.client_id,
            "redirect_uri": self.config.redirect_uri,
            "response_type": "code",
            "state": state,
            "scope": " ".join(self.config.scopes),
        }

    def build_authorization_url(
        self, state: str, extra_params: Mapping[str, str] | None = None
    ) -> str:
        """Return the consent screen URL the user should be redirected to."""
        authorize_url = self.endpoints.authorize_url
        params = self.code_fields(state)
        if extra_params:
            params.update(extra_params)
        return f"{authorize_url}?{urlencode(params)}"

    def exchange_code(self, code: str, *, code_verifier: str | None = None) -> dict[str, Any]:
        return self.exchanger.exchange_code(code, code_verifier=code_verifier)

    def fetch_user(self, access_token: str) -> CanonicalUser:
        """Fetch and normalize the member owning ``access_token``."""
        return self.mapper.map_profile(self.fetcher.fetch_profile(access_token))

    def user_from_code(self, code: str, *, code_verifier: str | None = None) -> LoginResult:
        """Run the callback half of the flow: exchange the code, then fetch the user."""
        token = self.exchange_code(code, code_verifier=code_verifier)
        access_token = token.get("access_token")
        if not access_token:
            logger.warning(
                "Invision token response has no access_token",
                extra={"provider": self.provider_name, "endpoint": "token"},
            )
            raise TokenExchangeError("No access_token in response", status_code=200)

        user = self.fetch_user(str(access_token))
        logger.debug("Authenticated Invision member %s", user.id)
        return LoginResult(token=token, user=user)

    def close(self) -> None:
        if self._owned_client is not None:
            self._owned_client.close()

    def __enter__(self) -> InvisionProvider:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
