import click

from steamserv.cli.commands.init import require_setup
from steamserv.cli.ensure import exit_on_error
from steamserv.core.context import SteamservContext
from steamserv.core.installer import ServerInstaller


@click.command("update")
@click.option("-s", "--server-name", help="Name of the installed server to update.")
@click.pass_obj
def update_cmd(ctx: SteamservContext, server_name: str | None) -> None:
    """Update an installed game server."""
    with exit_on_error():
        require_setup(ctx)
        ServerInstaller(ctx).update(server_name)
