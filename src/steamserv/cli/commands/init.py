import click

from steamserv.cli.ensure import exit_on_error
from steamserv.core.bootstrap import run_first_time_setup
from steamserv.core.context import SteamservContext


def require_setup(ctx: SteamservContext) -> bool:
    """Run first-time setup unless the registry is already initialized.

    Returns:
        True if setup ran (and built a fresh catalog), False otherwise
    """
    if ctx.registry_store.load().initialized:
        return False
    run_first_time_setup(ctx)
    return True


@click.command("init")
@click.pass_obj
def init_cmd(ctx: SteamservContext) -> None:
    """Configure SteamCMD and the server install directory.

    Safe to re-run: installed servers are kept.
    """
    with exit_on_error():
        run_first_time_setup(ctx)
