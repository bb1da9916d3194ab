"""Profile retrieval from ``/api/core/me`` and normalization to CanonicalUser.

Invision Community reports some failures as HTTP 200 with an embedded error
object (``{"errorCode": ..., "errorMessage": ...}``), so every decoded payload
is checked for ``errorCode`` regardless of the status code.
"""

from __future__ import annotations

import copy
import logging
from typing import Any

import httpx

from invision_auth.config import ProviderConfig
from invision_auth.contracts import (
    PROVIDER_NAME,
    CanonicalUser,
    ProfileFetchError,
    ProfileFetcher,
    ProfileMapper,
)
from invision_auth.endpoints import InvisionEndpoints
from invision_auth.http import TRANSPORT_ERRORS

logger = logging.getLogger(__name__)


def _first_not_none(raw: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


class InvisionProfileMapper(ProfileMapper):
    """Maps Invision member fields onto :class:`CanonicalUser`."""

    def map_profile(self, raw: dict[str, Any]) -> CanonicalUser:
        member_id = _first_not_none(raw, "id", "member_id")
        if member_id is None:
            raise ProfileFetchError("invalid", message="Invision Community profile missing id")

        return CanonicalUser(
            id=str(member_id),
            nickname=_optional_str(raw.get("name")),
            display_name=_optional_str(_first_not_none(raw, "full_name", "name")),
            email=_optional_str(raw.get("email")),
            avatar_url=_optional_str(raw.get("photo_url")),
            raw=copy.deepcopy(raw),
        )


class InvisionProfileFetcher(ProfileFetcher):
    """Fetches the authenticated member's raw profile."""

    def __init__(self, config: ProviderConfig, http_client: httpx.Client):
        self.config = config
        self._client = http_client

    def fetch_profile(self, access_token: str) -> dict[str, Any]:
        profile_url = InvisionEndpoints.from_config(self.config).profile_url

        try:
            resp = self._client.get(
                profile_url,
                headers={
                    "Accept": "application/json",
                    "Authorization": f"Bearer {access_token}",
                },
                follow_redirects=False,
            )
        except TRANSPORT_ERRORS as exc:
            logger.warning(
                "Invision profile endpoint request failed",
                extra={
                    "provider": PROVIDER_NAME,
                    "endpoint": "me",
                    "error_type": exc.__class__.__name__,
                },
            )
            raise ProfileFetchError(
                "transport", message=f"Invision Community profile request failed: {exc}"
            ) from exc

        try:
            payload = resp.json()
        except ValueError as exc:
            if resp.status_code != 200:
                raise self._status_error(resp) from exc
            logger.warning(
                "Invision profile endpoint returned invalid JSON",
                extra={
                    "provider": PROVIDER_NAME,
                    "endpoint": "me",
                    "status_code": resp.status_code,
                },
            )
            raise ProfileFetchError(
                "parse",
                message="Unable to parse user data from Invision Community API.",
                status_code=resp.status_code,
            ) from exc

        if isinstance(payload, dict) and payload.get("errorCode") is not None:
            logger.warning(
                "Invision profile endpoint returned an API error",
                extra={
                    "provider": PROVIDER_NAME,
                    "endpoint": "me",
                    "status_code": resp.status_code,
                    "provider_error": payload.get("errorCode"),
                },
            )
            raise ProfileFetchError(
                "api",
                _optional_str(payload.get("errorCode")),
                _optional_str(payload.get("errorMessage")),
                status_code=resp.status_code,
            )

        if resp.status_code != 200:
            raise self._status_error(resp)

        if not isinstance(payload, dict):
            logger.warning(
                "Invision profile endpoint returned non-object JSON",
                extra={
                    "provider": PROVIDER_NAME,
                    "endpoint": "me",
                    "status_code": resp.status_code,
                },
            )
            raise ProfileFetchError(
                "parse",
                message="Invision Community profile response was not a JSON object",
                status_code=resp.status_code,
            )

        return payload

    def _status_error(self, resp: httpx.Response) -> ProfileFetchError:
        logger.warning(
            "Invision profile endpoint returned non-200",
            extra={
                "provider": PROVIDER_NAME,
                "endpoint": "me",
                "status_code": resp.status_code,
            },
        )
        return ProfileFetchError(
            "http",
            message=f"Invision Community profile request failed with status {resp.status_code}",
            status_code=resp.status_code,
        )
