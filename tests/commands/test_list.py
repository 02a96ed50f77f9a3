"""Tests for the list command."""

from datetime import UTC, datetime
from pathlib import Path

from click.testing import CliRunner

from steamserv.cli.cli import cli
from steamserv.core.catalog import Catalog, InMemoryCatalogStore, ServerInfo
from steamserv.core.context import SteamservContext
from steamserv.core.registry import InMemoryRegistryStore, InstalledServer, LoginType, Registry
from tests.fakes.catalog_source import FakeCatalogSource
from tests.fakes.prompter import FakePrompter

CATALOG = Catalog(
    servers=(
        ServerInfo(2394010, "Palworld Dedicated Server"),
        ServerInfo(896660, "Valheim Dedicated Server"),
    ),
    last_update=datetime(2024, 1, 15, 12, 0, tzinfo=UTC),
)


def _initialized(*servers: InstalledServer) -> InMemoryRegistryStore:
    return InMemoryRegistryStore(
        Registry(
            tool_path=Path("/opt/steamcmd/steamcmd.sh"),
            install_root=Path("/srv/games"),
            installed_servers=servers,
            initialized=True,
        )
    )


def _console_text(ctx: SteamservContext) -> str:
    return ctx.console.file.getvalue()


def test_list_catalog_filtered() -> None:
    ctx = SteamservContext.for_test(
        registry_store=_initialized(), catalog_store=InMemoryCatalogStore(CATALOG)
    )

    result = CliRunner().invoke(cli, ["list", "-f", "valheim"], obj=ctx)

    assert result.exit_code == 0, result.output
    table = _console_text(ctx)
    assert "896660" in table
    assert "Valheim Dedicated Server" in table
    assert "Palworld" not in table
    assert "1 servers, cache updated 2024-01-15 12:00 UTC" in result.output


def test_list_catalog_empty_cache_hints_refresh() -> None:
    ctx = SteamservContext.for_test(registry_store=_initialized())

    result = CliRunner().invoke(cli, ["list"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert "steamserv cache refresh" in result.output


def test_list_installed() -> None:
    installed = datetime(2024, 1, 10, 8, 30, tzinfo=UTC)
    server = InstalledServer(
        app_id=2394010,
        name="PalServer",
        install_path=Path("/srv/games/PalServer"),
        install_date=installed,
        last_updated=installed,
        auto_update=False,
        login_type=LoginType.ANONYMOUS,
    )
    ctx = SteamservContext.for_test(registry_store=_initialized(server))

    result = CliRunner().invoke(cli, ["list", "--installed"], obj=ctx)

    assert result.exit_code == 0, result.output
    table = _console_text(ctx)
    assert "PalServer" in table
    assert "2024-01-10 08:30" in table
    assert "/srv/games/PalServer" in table


def test_list_installed_when_nothing_installed() -> None:
    ctx = SteamservContext.for_test(registry_store=_initialized())

    result = CliRunner().invoke(cli, ["list", "-i"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert "No installed servers found." in result.output


def test_list_runs_first_time_setup_when_uninitialized() -> None:
    registry_store = InMemoryRegistryStore()
    ctx = SteamservContext.for_test(
        registry_store=registry_store,
        catalog_source=FakeCatalogSource(entries=list(CATALOG.servers)),
        prompter=FakePrompter(confirms=[True], texts=["/opt/steamcmd.sh", "/srv/games"]),
    )

    result = CliRunner().invoke(cli, ["list"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert registry_store.load().initialized is True
    assert "Palworld Dedicated Server" in _console_text(ctx)
