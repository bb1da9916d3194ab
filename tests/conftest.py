"""
Global pytest configuration and fixtures.
"""

import pytest

_ENV_VARS = (
    "INVISION_AUTH_CONFIG",
    "INVISION_AUTH_DEBUG",
    "INVISION_CLIENT_ID",
    "INVISION_CLIENT_SECRET",
    "INVISION_REDIRECT_URI",
    "INVISION_BASE_URL",
)


@pytest.fixture(autouse=True)
def isolate_invision_env(monkeypatch):
    """Keep settings from the developer's environment out of every test."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield
