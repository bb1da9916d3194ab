import pytest

from invision_auth.contracts import ConfigurationError
from invision_auth.endpoints import InvisionEndpoints
from tests.auth.provider_testkit import make_config


def test_endpoints_derive_from_base_url() -> None:
    endpoints = InvisionEndpoints.from_config(make_config(base_url="https://community.example.com/"))
    assert endpoints.authorize_url == "https://community.example.com/oauth/authorize"
    assert endpoints.profile_url == "https://community.example.com/api/core/me"


def test_token_url_keeps_trailing_slash() -> None:
    endpoints = InvisionEndpoints.from_config(make_config())
    assert endpoints.token_url == "https://community.example.com/oauth/token/"


def test_base_url_with_path_prefix() -> None:
    endpoints = InvisionEndpoints.from_config(make_config(base_url="https://example.com/forum/"))
    assert endpoints.authorize_url == "https://example.com/forum/oauth/authorize"
    assert endpoints.token_url == "https://example.com/forum/oauth/token/"


def test_missing_base_url_raises_configuration_error() -> None:
    with pytest.raises(ConfigurationError, match="Base URL is not configured"):
        InvisionEndpoints.from_config(make_config(base_url=None))
