import click

from steamserv.cli.commands.init import require_setup
from steamserv.cli.ensure import exit_on_error
from steamserv.core.bootstrap import update_cache
from steamserv.core.context import SteamservContext


@click.group("cache")
def cache_group() -> None:
    """Manage the cached list of dedicated servers."""


@cache_group.command("refresh")
@click.pass_obj
def refresh_cmd(ctx: SteamservContext) -> None:
    """Download the Steam app list and rebuild the server cache."""
    with exit_on_error():
        if require_setup(ctx):
            # Setup just built the cache
            return
        catalog = update_cache(ctx)
        ctx.feedback.success(f"Server cache updated: {len(catalog.servers)} servers.")
