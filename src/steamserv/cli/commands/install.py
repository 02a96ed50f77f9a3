import click

from steamserv.cli.commands.init import require_setup
from steamserv.cli.ensure import exit_on_error
from steamserv.core.context import SteamservContext
from steamserv.core.installer import ServerInstaller


@click.command("install")
@click.option(
    "-a",
    "--app-id",
    type=click.IntRange(min=0, max=2**32 - 1),
    help="Steam App ID of the game server.",
)
@click.option("-s", "--server-name", help="Name of the server (also its directory name).")
@click.option(
    "-u",
    "--username",
    help='Steam account to log in with. Use "anonymous" for servers that need no account.',
)
@click.option(
    "--auto-update/--no-auto-update",
    default=False,
    help="Mark the server for automatic updates.",
)
@click.option("--port", type=click.IntRange(1, 65535), help="Port the server listens on.")
@click.pass_obj
def install_cmd(
    ctx: SteamservContext,
    app_id: int | None,
    server_name: str | None,
    username: str | None,
    auto_update: bool,
    port: int | None,
) -> None:
    """Install a game server.

    Anything not given as an option is asked for interactively.
    """
    with exit_on_error():
        require_setup(ctx)
        ctx.feedback.info("Welcome to your installation guide")
        ServerInstaller(ctx).install(
            app_id,
            server_name,
            username,
            auto_update=auto_update,
            port=port,
        )
