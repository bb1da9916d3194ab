"""Provider configuration and settings resolution.

Values for the Invision provider come from three places, highest precedence
first:

1. Explicit keyword arguments (values the caller already holds).
2. A structured config mapping passed at setup, shaped like the host's
   ``services.invision`` section.
3. An injected settings lookup, called with dotted keys such as
   ``services.invision.base_url``.

Scopes fall back to ``["profile", "email"]`` when none are supplied anywhere.
A missing base URL is not an error here; it is reported by
:meth:`ProviderConfig.require_base_url` when the first URL is built.

Settings files are YAML and support ``${ENV_VAR}`` interpolation in string
values::

    services:
      invision:
        client_id: ${INVISION_CLIENT_ID}
        client_secret: ${INVISION_CLIENT_SECRET}
        redirect: https://app.example.com/auth/invision/callback
        base_url: https://community.example.com/
        scopes: [profile, email]
"""

import logging
import os
import re
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Any

import yaml
from pydantic import AliasChoices, Field, ValidationError, field_validator

from invision_auth.contracts import ConfigurationError
from invision_auth.models import AuthBaseModel

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_SCOPES",
    "ProviderConfig",
    "ServicesSettings",
    "SettingsLookup",
    "default_services_settings",
    "load_services_settings",
    "resolve_provider_config",
]

DEFAULT_SCOPES = ("profile", "email")
CONFIG_ENV_VAR = "INVISION_AUTH_CONFIG"
ENV_VAR_PATTERN = re.compile(r"\${([A-Za-z0-9_]+)}")

SettingsLookup = Callable[[str], Any]


def _split_scopes(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return value.split()
    return [str(scope) for scope in value]


class ProviderConfig(AuthBaseModel):
    """Resolved configuration for one Invision Community installation."""

    client_id: str
    client_secret: str
    redirect_uri: str = Field(validation_alias=AliasChoices("redirect_uri", "redirect"))
    base_url: str | None = None
    scopes: list[str] = Field(default_factory=lambda: list(DEFAULT_SCOPES))

    @field_validator("client_id", "client_secret", "redirect_uri", mode="before")
    @classmethod
    def _coerce_scalar(cls, value: Any) -> Any:
        # YAML reads unquoted numeric ids as int
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("base_url", mode="before")
    @classmethod
    def _strip_base_url(cls, value: Any) -> Any:
        if value is None:
            return None
        stripped = str(value).rstrip("/")
        return stripped or None

    @field_validator("scopes", mode="before")
    @classmethod
    def _normalize_scopes(cls, value: Any) -> list[str]:
        return _split_scopes(value) or list(DEFAULT_SCOPES)

    def require_base_url(self) -> str:
        """Return the base URL or raise :class:`ConfigurationError` if unset."""
        if not self.base_url:
            raise ConfigurationError(
                "Base URL is not configured. Please set base_url in your services configuration."
            )
        return self.base_url


class ServicesSettings:
    """Dotted-key view over a nested settings mapping.

    Instances are callable and can be passed wherever a
    :data:`SettingsLookup` is expected.
    """

    def __init__(self, data: Mapping[str, Any] | None = None):
        self._data: Mapping[str, Any] = data or {}

    def get(self, key: str, default: Any = None) -> Any:
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, Mapping) or part not in node:
                return default
            node = node[part]
        return node

    def __call__(self, key: str) -> Any:
        return self.get(key)

    def section(self, provider: str = "invision") -> dict[str, Any]:
        value = self.get(f"services.{provider}")
        return dict(value) if isinstance(value, Mapping) else {}


def _resolve_env_var(value: str) -> str:
    result = value
    for env_var in ENV_VAR_PATTERN.findall(value):
        if env_var not in os.environ:
            raise ConfigurationError(f"Environment variable {env_var} is not set")
        result = result.replace(f"${{{env_var}}}", os.environ[env_var])
    return result


def _interpolate(value: Any) -> Any:
    if isinstance(value, str):
        return _resolve_env_var(value)
    if isinstance(value, dict):
        return {k: _interpolate(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate(item) for item in value]
    return value


def default_services_settings() -> ServicesSettings:
    """Settings built from ``INVISION_*`` environment variables."""
    return ServicesSettings(
        {
            "services": {
                "invision": {
                    "client_id": os.environ.get("INVISION_CLIENT_ID"),
                    "client_secret": os.environ.get("INVISION_CLIENT_SECRET"),
                    "redirect": os.environ.get("INVISION_REDIRECT_URI"),
                    "base_url": os.environ.get("INVISION_BASE_URL"),
                    "scopes": list(DEFAULT_SCOPES),
                }
            }
        }
    )


def load_services_settings(path: str | Path | None = None) -> ServicesSettings:
    """Load services settings from a YAML file.

    The file is taken from ``path`` or the ``INVISION_AUTH_CONFIG`` environment
    variable. When neither is given, settings come from the ``INVISION_*``
    environment variables instead.

    Raises:
        ConfigurationError: If the file is missing or malformed, or references
            an unset environment variable.
    """
    if path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if not env_path:
            logger.debug("No settings file configured, using INVISION_* environment variables")
            return default_services_settings()
        path = env_path

    path = Path(path)
    logger.debug(f"Loading services settings from: {path}")
    if not path.exists():
        raise ConfigurationError(f"Settings file not found at {path}")

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid settings file {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Invalid settings file {path}: expected a mapping at the top level")

    return ServicesSettings(_interpolate(data))


def _first_present(*values: Any) -> Any:
    for value in values:
        if value is not None and value != "" and value != []:
            return value
    return None


def resolve_provider_config(
    *,
    base_url: str | None = None,
    scopes: Sequence[str] | str | None = None,
    client_id: str | None = None,
    client_secret: str | None = None,
    redirect_uri: str | None = None,
    config: Mapping[str, Any] | None = None,
    settings: SettingsLookup | None = None,
    provider: str = "invision",
) -> ProviderConfig:
    """Resolve a :class:`ProviderConfig` from arguments, config and settings.

    Raises:
        ConfigurationError: If client credentials or the redirect URI cannot be
            resolved. A missing base URL is deferred to first use.
    """
    config = config or {}

    def lookup(key: str) -> Any:
        return settings(f"services.{provider}.{key}") if settings is not None else None

    values = {
        "client_id": _first_present(client_id, config.get("client_id"), lookup("client_id")),
        "client_secret": _first_present(
            client_secret, config.get("client_secret"), lookup("client_secret")
        ),
        "redirect_uri": _first_present(
            redirect_uri,
            config.get("redirect_uri"),
            config.get("redirect"),
            lookup("redirect_uri"),
            lookup("redirect"),
        ),
        "base_url": _first_present(base_url, config.get("base_url"), lookup("base_url")),
        "scopes": _first_present(scopes, config.get("scopes"), lookup("scopes")),
    }

    if values["base_url"] is None:
        logger.debug("No base_url resolved for provider %s", provider)

    try:
        return ProviderConfig.model_validate({k: v for k, v in values.items() if v is not None})
    except ValidationError as e:
        missing = ", ".join(str(err["loc"][0]) for err in e.errors() if err["loc"])
        raise ConfigurationError(
            f"Invalid {provider} provider configuration ({missing or 'unknown field'})"
        ) from e
