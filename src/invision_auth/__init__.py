"""Invision Community OAuth2 provider adapter.

Implements the Authorization Code flow against an Invision Community (IPS)
installation: building the consent screen URL, exchanging the authorization
code for an access token, and normalizing the ``/api/core/me`` profile.
"""

from invision_auth.config import (
    DEFAULT_SCOPES,
    ProviderConfig,
    ServicesSettings,
    default_services_settings,
    load_services_settings,
    resolve_provider_config,
)
from invision_auth.contracts import (
    CanonicalUser,
    ConfigurationError,
    LoginResult,
    ProfileFetchError,
    ProfileFetcher,
    ProfileMapper,
    ProviderError,
    TokenExchangeError,
    TokenExchanger,
)
from invision_auth.endpoints import InvisionEndpoints
from invision_auth.http import create_http_client
from invision_auth.profile import InvisionProfileFetcher, InvisionProfileMapper
from invision_auth.provider import InvisionProvider
from invision_auth.token import InvisionTokenExchanger

__all__ = [
    "DEFAULT_SCOPES",
    "CanonicalUser",
    "ConfigurationError",
    "InvisionEndpoints",
    "InvisionProfileFetcher",
    "InvisionProfileMapper",
    "InvisionProvider",
    "InvisionTokenExchanger",
    "LoginResult",
    "ProfileFetchError",
    "ProfileFetcher",
    "ProfileMapper",
    "ProviderConfig",
    "ProviderError",
    "ServicesSettings",
    "TokenExchangeError",
    "TokenExchanger",
    "create_http_client",
    "default_services_settings",
    "load_services_settings",
    "resolve_provider_config",
]
