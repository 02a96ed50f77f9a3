import logging
import os

import click

from steamserv.cli.commands.cache import cache_group
from steamserv.cli.commands.config import config_group
from steamserv.cli.commands.init import init_cmd
from steamserv.cli.commands.install import install_cmd
from steamserv.cli.commands.list_cmd import list_cmd
from steamserv.cli.commands.uninstall import uninstall_cmd
from steamserv.cli.commands.update import update_cmd
from steamserv.core.context import create_context

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="steamserv")
@click.option("-q", "--quiet", is_flag=True, help="Only print errors.")
@click.pass_context
def cli(ctx: click.Context, quiet: bool) -> None:
    """Install, update and uninstall dedicated game servers with SteamCMD."""
    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        ctx.obj = create_context(quiet=quiet)


cli.add_command(cache_group)
cli.add_command(config_group)
cli.add_command(init_cmd)
cli.add_command(install_cmd)
cli.add_command(list_cmd)
cli.add_command(uninstall_cmd)
cli.add_command(update_cmd)


def main() -> None:
    """CLI entry point used by the `steamserv` console script."""
    # Enable debug logging if STEAMSERV_DEBUG environment variable is set
    if os.getenv("STEAMSERV_DEBUG"):
        logging.basicConfig(level=logging.DEBUG, format="[DEBUG %(name)s:%(lineno)d] %(message)s")
    cli()
