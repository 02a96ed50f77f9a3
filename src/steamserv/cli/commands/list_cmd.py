import click
from rich.markup import escape
from rich.table import Table

from steamserv.cli.commands.init import require_setup
from steamserv.cli.ensure import exit_on_error
from steamserv.cli.output import user_output
from steamserv.core.context import SteamservContext


def _list_catalog(ctx: SteamservContext, name_filter: str | None) -> None:
    catalog = ctx.catalog_store.load()
    if not catalog.servers:
        user_output("The server cache is empty. Run 'steamserv cache refresh' to build it.")
        return

    servers = catalog.filter_by_name(name_filter)
    if not servers:
        user_output(f"No servers match '{name_filter}'.")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("app id", style="cyan", no_wrap=True, justify="right")
    table.add_column("name", no_wrap=True)
    for server in servers:
        table.add_row(str(server.app_id), escape(server.name))
    ctx.console.print(table)

    if catalog.last_update is not None:
        updated = catalog.last_update.strftime("%Y-%m-%d %H:%M UTC")
        user_output(click.style(f"{len(servers)} servers, cache updated {updated}", dim=True))


def _list_installed(ctx: SteamservContext, name_filter: str | None) -> None:
    registry = ctx.registry_store.load()
    needle = (name_filter or "").lower()
    servers = [s for s in registry.installed_servers if needle in s.name.lower()]
    if not servers:
        user_output("No installed servers found.")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("name", style="cyan", no_wrap=True)
    table.add_column("app id", no_wrap=True, justify="right")
    table.add_column("login", no_wrap=True)
    table.add_column("last updated", no_wrap=True)
    table.add_column("path", no_wrap=True)
    for server in servers:
        table.add_row(
            escape(server.name),
            str(server.app_id),
            server.login_type.value,
            server.last_updated.strftime("%Y-%m-%d %H:%M"),
            escape(str(server.install_path)),
        )
    ctx.console.print(table)


@click.command("list")
@click.option(
    "-i", "--installed", is_flag=True, help="List installed servers instead of the catalog."
)
@click.option(
    "-f", "--filter", "name_filter", help="Only show servers whose name contains this text."
)
@click.pass_obj
def list_cmd(ctx: SteamservContext, installed: bool, name_filter: str | None) -> None:
    """List available dedicated servers, or the ones you have installed."""
    with exit_on_error():
        require_setup(ctx)
        if installed:
            _list_installed(ctx, name_filter)
        else:
            _list_catalog(ctx, name_filter)
