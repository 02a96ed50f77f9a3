"""Tests for catalog filtering, caching and refresh."""

import io
import json
from datetime import UTC, datetime
from pathlib import Path

import httpx
import pytest
from rich.console import Console

from steamserv.core.catalog import (
    Catalog,
    FilesystemCatalogStore,
    HttpCatalogSource,
    InMemoryCatalogStore,
    ServerInfo,
    build_catalog,
    is_server_entry,
    parse_app_list,
    refresh_catalog,
)
from steamserv.core.errors import CatalogIOError, FetchError
from tests.fakes.catalog_source import FakeCatalogSource

NOW = datetime(2024, 1, 15, 12, 0, tzinfo=UTC)
APPS_URL = "https://steam.test/apps"


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("PalServer", True),
        ("Palworld Dedicated Server", True),
        ("Masterserver", True),
        ("Source SDK Base Server Tool", True),
        ("Server Browser", False),
        ("Dedicated Server Emulator", False),
        ("Random Tool", False),
        ("Counter-Strike 2", False),
        ("サーバー", False),
    ],
)
def test_is_server_entry(name: str, expected: bool) -> None:
    assert is_server_entry(name) is expected


def test_build_catalog_filters_and_dedupes_by_app_id() -> None:
    entries = [
        ServerInfo(2394010, "Palworld Dedicated Server"),
        ServerInfo(2394010, "Palworld Dedicated Server (duplicate)"),
        ServerInfo(730, "Counter-Strike 2"),
        ServerInfo(896660, "Valheim Dedicated Server"),
    ]

    catalog = build_catalog(entries, NOW)

    assert catalog.servers == (
        ServerInfo(2394010, "Palworld Dedicated Server"),
        ServerInfo(896660, "Valheim Dedicated Server"),
    )
    assert catalog.last_update == NOW


def test_filter_by_name_is_case_insensitive() -> None:
    catalog = Catalog(
        servers=(ServerInfo(1, "Palworld Dedicated Server"), ServerInfo(2, "Valheim Server"))
    )

    assert catalog.filter_by_name("PALWORLD") == [ServerInfo(1, "Palworld Dedicated Server")]
    assert catalog.filter_by_name(None) == list(catalog.servers)


def test_refresh_replaces_instead_of_merging() -> None:
    store = InMemoryCatalogStore(
        Catalog(servers=(ServerInfo(1, "Old Dedicated Server"),), last_update=None)
    )
    source = FakeCatalogSource(entries=[ServerInfo(2, "New Dedicated Server")])

    catalog = refresh_catalog(source, store, NOW)

    assert catalog.servers == (ServerInfo(2, "New Dedicated Server"),)
    assert store.load() == catalog


def test_refresh_failure_keeps_previous_cache() -> None:
    previous = Catalog(servers=(ServerInfo(1, "Old Dedicated Server"),), last_update=NOW)
    store = InMemoryCatalogStore(previous)
    source = FakeCatalogSource(error=FetchError("offline"))

    with pytest.raises(FetchError):
        refresh_catalog(source, store, NOW)

    assert store.load() == previous
    assert store.save_count == 0


def test_filesystem_store_round_trip(tmp_path: Path) -> None:
    store = FilesystemCatalogStore(tmp_path / "cache" / "server_cache.json")
    catalog = Catalog(servers=(ServerInfo(2394010, "Palworld Dedicated Server"),), last_update=NOW)

    store.save(catalog)

    assert store.load() == catalog


def test_filesystem_store_missing_file_is_empty(tmp_path: Path) -> None:
    assert FilesystemCatalogStore(tmp_path / "none.json").load() == Catalog()


def test_filesystem_store_malformed_file_raises(tmp_path: Path) -> None:
    path = tmp_path / "server_cache.json"
    path.write_text('{"servers": "nope"}', encoding="utf-8")

    with pytest.raises(CatalogIOError, match="cache refresh"):
        FilesystemCatalogStore(path).load()


def test_parse_app_list_rejects_unexpected_shape() -> None:
    with pytest.raises(FetchError):
        parse_app_list(b'{"apps": []}')


def test_http_source_fetches_and_parses_app_list() -> None:
    body = json.dumps(
        {"applist": {"apps": [{"appid": 2394010, "name": "Palworld Dedicated Server"}]}}
    ).encode()
    client = httpx.Client(
        transport=httpx.MockTransport(lambda request: httpx.Response(200, content=body))
    )
    source = HttpCatalogSource(client, Console(file=io.StringIO()), url=APPS_URL)

    assert source.fetch() == [ServerInfo(2394010, "Palworld Dedicated Server")]


def test_http_source_maps_server_error_to_fetch_error() -> None:
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(503)))
    source = HttpCatalogSource(client, Console(file=io.StringIO()), url=APPS_URL)

    with pytest.raises(FetchError, match="HTTP 503"):
        source.fetch()
