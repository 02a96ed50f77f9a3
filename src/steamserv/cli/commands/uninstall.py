import click

from steamserv.cli.commands.init import require_setup
from steamserv.cli.ensure import exit_on_error
from steamserv.core.context import SteamservContext
from steamserv.core.installer import ServerInstaller


@click.command("uninstall")
@click.option("-s", "--server-name", help="Name of the installed server to remove.")
@click.pass_obj
def uninstall_cmd(ctx: SteamservContext, server_name: str | None) -> None:
    """Uninstall a game server and delete its files."""
    with exit_on_error():
        require_setup(ctx)
        ServerInstaller(ctx).uninstall(server_name)
