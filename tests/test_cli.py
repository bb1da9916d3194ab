import json
from urllib.parse import parse_qs, urlsplit

import pytest
from click.testing import CliRunner

from invision_auth.__main__ import cli
from tests.auth.provider_testkit import PROFILE_URL, TOKEN_URL, FakeInvision, json_response

SERVICES_YML = """
services:
  invision:
    client_id: clientId
    client_secret: ${TEST_CLI_SECRET}
    redirect: https://app/callback
    base_url: https://community.example.com/
"""

PROFILE = {
    "id": 123,
    "name": "jdoe",
    "full_name": "John Doe",
    "email": "john@example.com",
    "photo_url": "https://x/a.jpg",
}


@pytest.fixture
def services_file(tmp_path, monkeypatch):
    monkeypatch.setenv("TEST_CLI_SECRET", "secret")
    path = tmp_path / "services.yml"
    path.write_text(SERVICES_YML)
    return str(path)


@pytest.fixture
def fake_invision(monkeypatch):
    fake = FakeInvision(
        {
            TOKEN_URL: json_response(200, {"access_token": "tok123", "token_type": "Bearer"}),
            PROFILE_URL: json_response(200, PROFILE),
        }
    )
    monkeypatch.setattr("invision_auth.provider.create_http_client", fake.client)
    return fake


def test_no_subcommand_shows_help():
    result = CliRunner().invoke(cli, [])
    assert result.exit_code == 0
    assert "authorize-url" in result.output


def test_authorize_url(services_file):
    result = CliRunner().invoke(
        cli, ["authorize-url", "--config", services_file, "--state", "abc"]
    )

    assert result.exit_code == 0, result.output
    url = result.output.strip()
    assert url.startswith("https://community.example.com/oauth/authorize?")
    query = parse_qs(urlsplit(url).query)
    assert query["state"] == ["abc"]
    assert query["scope"] == ["profile email"]


def test_authorize_url_generates_state(services_file):
    result = CliRunner().invoke(
        cli, ["authorize-url", "--config", services_file, "--json-output"]
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)["result"]
    assert payload["state"]
    assert parse_qs(urlsplit(payload["url"]).query)["state"] == [payload["state"]]


def test_base_url_option_overrides_settings(services_file):
    result = CliRunner().invoke(
        cli,
        [
            "authorize-url",
            "--config",
            services_file,
            "--state",
            "s",
            "--base-url",
            "https://other.example.com/",
        ],
    )

    assert result.exit_code == 0, result.output
    assert result.output.startswith("https://other.example.com/oauth/authorize?")


def test_missing_base_url_is_reported(tmp_path, monkeypatch):
    monkeypatch.setenv("INVISION_CLIENT_ID", "cid")
    monkeypatch.setenv("INVISION_CLIENT_SECRET", "secret")
    monkeypatch.setenv("INVISION_REDIRECT_URI", "https://app/callback")

    result = CliRunner().invoke(cli, ["authorize-url", "--state", "s"])

    assert result.exit_code != 0
    assert "Base URL is not configured" in result.output


def test_exchange(services_file, fake_invision):
    result = CliRunner().invoke(
        cli, ["exchange", "the-code", "--config", services_file, "--json-output"]
    )

    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == {
        "status": "ok",
        "result": {"access_token": "tok123", "token_type": "Bearer"},
    }
    assert parse_qs(fake_invision.requests[0].content.decode())["client_secret"] == ["secret"]


def test_exchange_failure(services_file, fake_invision):
    fake_invision.routes[TOKEN_URL] = json_response(401, {"error": "invalid_client"})

    result = CliRunner().invoke(
        cli, ["exchange", "the-code", "--config", services_file, "--json-output"]
    )

    assert result.exit_code != 0
    assert '"status": "error"' in result.output
    assert '"status_code": 401' in result.output


def test_whoami(services_file, fake_invision):
    result = CliRunner().invoke(cli, ["whoami", "tok123", "--config", services_file])

    assert result.exit_code == 0, result.output
    assert "id: 123" in result.output
    assert "display_name: John Doe" in result.output
    assert fake_invision.requests[0].headers["Authorization"] == "Bearer tok123"


def test_login(services_file, fake_invision):
    result = CliRunner().invoke(
        cli, ["login", "the-code", "--config", services_file, "--json-output"]
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)["result"]
    assert payload["token"]["access_token"] == "tok123"
    assert payload["user"]["email"] == "john@example.com"
    assert payload["user"]["raw"] == PROFILE
