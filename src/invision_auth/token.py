"""Authorization code exchange against the Invision Community token endpoint."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from invision_auth.config import ProviderConfig
from invision_auth.contracts import PROVIDER_NAME, TokenExchangeError, TokenExchanger
from invision_auth.endpoints import InvisionEndpoints
from invision_auth.http import TRANSPORT_ERRORS

logger = logging.getLogger(__name__)


class InvisionTokenExchanger(TokenExchanger):
    """Exchanges authorization codes for access tokens over HTTP."""

    def __init__(self, config: ProviderConfig, http_client: httpx.Client):
        self.config = config
        self._client = http_client

    def token_fields(self, code: str, code_verifier: str | None = None) -> dict[str, str]:
        fields = {
            "grant_type": "authorization_code",
            "code": code,
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
            "redirect_uri": self.config.redirect_uri,
        }
        if code_verifier:
            fields["code_verifier"] = code_verifier
        return fields

    def exchange_code(self, code: str, *, code_verifier: str | None = None) -> dict[str, Any]:
        """Exchange ``code`` for the token endpoint's decoded response.

        The response map is returned unchanged. Only an HTTP 200 with a JSON
        object body is accepted; redirects are treated as failures.

        Raises:
            ConfigurationError: If the base URL is not configured.
            TokenExchangeError: On non-200 status, unparsable body, or
                transport failure.
        """
        token_url = InvisionEndpoints.from_config(self.config).token_url

        try:
            resp = self._client.post(
                token_url,
                data=self.token_fields(code, code_verifier),
                headers={
                    "Content-Type": "application/x-www-form-urlencoded",
                    "Accept": "application/json",
                },
                follow_redirects=False,
            )
        except TRANSPORT_ERRORS as exc:
            logger.warning(
                "Invision token endpoint request failed",
                extra={
                    "provider": PROVIDER_NAME,
                    "endpoint": "token",
                    "error_type": exc.__class__.__name__,
                },
            )
            raise TokenExchangeError(f"Invision OAuth token request failed: {exc}") from exc

        return self._parse_token_response(resp)

    def _parse_token_response(self, resp: httpx.Response) -> dict[str, Any]:
        body = resp.text

        if resp.status_code != 200:
            logger.warning(
                "Invision token endpoint returned non-200",
                extra={
                    "provider": PROVIDER_NAME,
                    "endpoint": "token",
                    "status_code": resp.status_code,
                },
            )
            raise TokenExchangeError(
                f"Invision OAuth token request failed with status {resp.status_code}: {body}",
                status_code=resp.status_code,
                body=body,
            )

        try:
            data = resp.json()
        except ValueError as exc:
            logger.warning(
                "Invision token endpoint returned invalid JSON",
                extra={
                    "provider": PROVIDER_NAME,
                    "endpoint": "token",
                    "status_code": resp.status_code,
                },
            )
            raise TokenExchangeError(
                "Invision OAuth token response was not valid JSON",
                status_code=resp.status_code,
                body=body,
            ) from exc

        if not isinstance(data, dict):
            logger.warning(
                "Invision token endpoint returned non-object JSON",
                extra={
                    "provider": PROVIDER_NAME,
                    "endpoint": "token",
                    "status_code": resp.status_code,
                },
            )
            raise TokenExchangeError(
                "Invision OAuth token response was not a JSON object",
                status_code=resp.status_code,
                body=body,
            )

        return data
