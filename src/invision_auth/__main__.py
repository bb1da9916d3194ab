import click

from invision_auth.cli.commands import authorize_url, exchange, login, whoami


@click.group(invoke_without_command=True)
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Invision Community OAuth2 helper"""
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


cli.add_command(authorize_url)
cli.add_command(exchange)
cli.add_command(whoami)
cli.add_command(login)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
