import secrets
from typing import Any, Callable, Optional

import click

from invision_auth.cli.utils import configure_logging, output_error, output_result
from invision_auth.config import load_services_settings, resolve_provider_config
from invision_auth.contracts import ProviderError
from invision_auth.provider import InvisionProvider


PROVIDER_OPTIONS = [
    click.option(
        "--config",
        "config_path",
        type=click.Path(dir_okay=False),
        help="Services settings YAML file (defaults to $INVISION_AUTH_CONFIG)",
    ),
    click.option("--base-url", help="Base URL of the Invision Community installation"),
    click.option("--json-output", is_flag=True, help="Output in JSON format"),
    click.option("--debug", is_flag=True, help="Show detailed debug information"),
]


def provider_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by every command that talks to an installation."""
    for option in reversed(PROVIDER_OPTIONS):
        func = option(func)
    return func


def _build_provider(config_path: Optional[str], base_url: Optional[str]) -> InvisionProvider:
    settings = load_services_settings(config_path)
    config = resolve_provider_config(base_url=base_url, settings=settings)
    return InvisionProvider.from_config(config)


@click.command(name="authorize-url")
@click.option("--state", help="State value to embed (random when omitted)")
@provider_options
def authorize_url(
    state: Optional[str],
    config_path: Optional[str],
    base_url: Optional[str],
    json_output: bool,
    debug: bool,
) -> None:
    """Print the URL that sends a user to the consent screen.

    Examples:
        invision-auth authorize-url
        invision-auth authorize-url --state abc123 --json-output
    """
    configure_logging(debug)
    state = state or secrets.token_urlsafe(32)

    try:
        with _build_provider(config_path, base_url) as provider:
            url = provider.build_authorization_url(state)
    except ProviderError as e:
        output_error(e, json_output, debug)
        return

    if json_output:
        output_result({"url": url, "state": state}, json_output)
    else:
        click.echo(url)


@click.command(name="exchange")
@click.argument("code")
@provider_options
def exchange(
    code: str,
    config_path: Optional[str],
    base_url: Optional[str],
    json_output: bool,
    debug: bool,
) -> None:
    """Exchange an authorization CODE for an access token."""
    configure_logging(debug)

    try:
        with _build_provider(config_path, base_url) as provider:
            token = provider.exchange_code(code)
    except ProviderError as e:
        output_error(e, json_output, debug)
        return

    output_result(token, json_output)


@click.command(name="whoami")
@click.argument("access_token")
@provider_options
def whoami(
    access_token: str,
    config_path: Optional[str],
    base_url: Optional[str],
    json_output: bool,
    debug: bool,
) -> None:
    """Show the member that owns ACCESS_TOKEN."""
    configure_logging(debug)

    try:
        with _build_provider(config_path, base_url) as provider:
            user = provider.fetch_user(access_token)
    except ProviderError as e:
        output_error(e, json_output, debug)
        return

    if json_output:
        output_result(user.model_dump(), json_output)
    else:
        output_result(user.model_dump(exclude={"raw"}))


@click.command(name="login")
@click.argument("code")
@provider_options
def login(
    code: str,
    config_path: Optional[str],
    base_url: Optional[str],
    json_output: bool,
    debug: bool,
) -> None:
    """Exchange CODE and show the member it belongs to."""
    configure_logging(debug)

    try:
        with _build_provider(config_path, base_url) as provider:
            result = provider.user_from_code(code)
    except ProviderError as e:
        output_error(e, json_output, debug)
        return

    if json_output:
        output_result(result.model_dump(), json_output)
    else:
        output_result(result.user.model_dump(exclude={"raw"}))
