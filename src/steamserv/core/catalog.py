"""Catalog of installable dedicated-server apps.

The catalog is refreshed wholesale from the Steam Web API app list. Only
entries that look like server installs survive the refresh; see
is_server_entry() for the heuristic.

Architecture:
- ServerInfo / Catalog: frozen data
- is_server_entry / refresh_catalog: pure filtering and the refresh workflow
- CatalogStore: persistence of the cached catalog (JSON)
- CatalogSource: where a fresh listing comes from (HTTP in production)
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import httpx
from pydantic import BaseModel, Field, ValidationError
from rich.console import Console

from steamserv.core.download import fetch_bytes
from steamserv.core.errors import CatalogIOError, FetchError
from steamserv.core.paths import catalog_path

logger = logging.getLogger(__name__)

STEAM_APP_LIST_URL = "https://api.steampowered.com/ISteamApps/GetAppList/v2/"

_REJECT_MARKERS = ("browser", "emulator")
_ACCEPT_MARKERS = ("dedicated server", "server tool")


@dataclass(frozen=True)
class ServerInfo:
    """An installable app: Steam app id and display name."""

    app_id: int
    name: str


@dataclass(frozen=True)
class Catalog:
    """Cached list of installable server apps, unique by app id."""

    servers: tuple[ServerInfo, ...] = field(default_factory=tuple)
    last_update: datetime | None = None

    def find(self, app_id: int) -> ServerInfo | None:
        for server in self.servers:
            if server.app_id == app_id:
                return server
        return None

    def filter_by_name(self, text: str | None) -> list[ServerInfo]:
        """Return servers whose name contains text, ignoring case."""
        if not text:
            return list(self.servers)
        needle = text.lower()
        return [s for s in self.servers if needle in s.name.lower()]


def is_server_entry(name: str) -> bool:
    """Decide whether a catalog name denotes a server install.

    Rejects anything mentioning a browser or emulator, then accepts names that
    contain "dedicated server" or "server tool", or end with "server".
    Matching is literal and case-insensitive.

    Example:
        >>> is_server_entry("PalServer")
        True
        >>> is_server_entry("Server Browser")
        False
    """
    lowered = name.lower()
    if any(marker in lowered for marker in _REJECT_MARKERS):
        return False
    return any(marker in lowered for marker in _ACCEPT_MARKERS) or lowered.endswith("server")


def build_catalog(entries: Iterable[ServerInfo], now: datetime) -> Catalog:
    """Build a catalog from raw entries, keeping server entries with unique app ids.

    The first entry seen for an app id wins.
    """
    seen: set[int] = set()
    kept: list[ServerInfo] = []
    for entry in entries:
        if entry.app_id in seen or not is_server_entry(entry.name):
            continue
        seen.add(entry.app_id)
        kept.append(entry)
    return Catalog(servers=tuple(kept), last_update=now)


# ============================================================================
# Persistence
# ============================================================================


class _CachedServer(BaseModel):
    app_id: int
    name: str


class _CatalogFile(BaseModel):
    servers: list[_CachedServer] = Field(default_factory=list)
    last_update: datetime | None = None


class CatalogStore(ABC):
    """Abstract interface for loading and saving the catalog cache."""

    @abstractmethod
    def load(self) -> Catalog:
        """Load the cached catalog, or an empty Catalog if none is cached.

        Raises:
            CatalogIOError: If the cache exists but cannot be read or parsed
        """
        ...

    @abstractmethod
    def save(self, catalog: Catalog) -> None:
        """Overwrite the cached catalog.

        Raises:
            CatalogIOError: If the cache cannot be written
        """
        ...


class FilesystemCatalogStore(CatalogStore):
    """Production implementation storing the catalog as JSON in the app directory."""

    def __init__(self, cache_path: Path | None = None) -> None:
        self._path = cache_path if cache_path is not None else catalog_path()

    def load(self) -> Catalog:
        if not self._path.exists():
            return Catalog()
        try:
            parsed = _CatalogFile.model_validate_json(self._path.read_bytes())
        except OSError as e:
            raise CatalogIOError(f"Cannot read catalog cache {self._path}: {e}") from e
        except ValidationError as e:
            raise CatalogIOError(
                f"Catalog cache {self._path} is malformed. "
                "Run 'steamserv cache refresh' to rebuild it."
            ) from e
        return Catalog(
            servers=tuple(ServerInfo(app_id=s.app_id, name=s.name) for s in parsed.servers),
            last_update=parsed.last_update,
        )

    def save(self, catalog: Catalog) -> None:
        payload = _CatalogFile(
            servers=[_CachedServer(app_id=s.app_id, name=s.name) for s in catalog.servers],
            last_update=catalog.last_update,
        )
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(payload.model_dump_json(), encoding="utf-8")
        except OSError as e:
            raise CatalogIOError(f"Cannot write catalog cache {self._path}: {e}") from e


class InMemoryCatalogStore(CatalogStore):
    """Test implementation that keeps the catalog in memory."""

    def __init__(self, catalog: Catalog | None = None) -> None:
        self._catalog = catalog if catalog is not None else Catalog()
        self._save_count = 0

    @property
    def save_count(self) -> int:
        return self._save_count

    def load(self) -> Catalog:
        return self._catalog

    def save(self, catalog: Catalog) -> None:
        self._catalog = catalog
        self._save_count += 1


# ============================================================================
# Remote listing
# ============================================================================


class _App(BaseModel):
    appid: int
    name: str


class _AppList(BaseModel):
    apps: list[_App] = Field(default_factory=list)


class _AppListResponse(BaseModel):
    applist: _AppList


def parse_app_list(payload: bytes) -> list[ServerInfo]:
    """Parse a GetAppList response body into unfiltered ServerInfo records.

    Raises:
        FetchError: If the body is not a valid app list
    """
    try:
        parsed = _AppListResponse.model_validate_json(payload)
    except ValidationError as e:
        raise FetchError(f"Unexpected app list response: {e.error_count()} error(s)") from e
    return [ServerInfo(app_id=app.appid, name=app.name) for app in parsed.applist.apps]


class CatalogSource(ABC):
    """Abstract source of a fresh, unfiltered app listing."""

    @abstractmethod
    def fetch(self) -> list[ServerInfo]:
        """Fetch every listed app.

        Raises:
            FetchError: On network failure or an unparseable response
        """
        ...


class HttpCatalogSource(CatalogSource):
    """Production implementation downloading the Steam app list with httpx."""

    def __init__(
        self,
        client: httpx.Client,
        console: Console,
        url: str = STEAM_APP_LIST_URL,
    ) -> None:
        self._client = client
        self._console = console
        self._url = url

    def fetch(self) -> list[ServerInfo]:
        payload = fetch_bytes(
            self._client, self._url, label="Downloading app list", console=self._console
        )
        entries = parse_app_list(payload)
        logger.debug("Fetched %d app(s) from %s", len(entries), self._url)
        return entries


def refresh_catalog(source: CatalogSource, store: CatalogStore, now: datetime) -> Catalog:
    """Replace the cached catalog with a freshly fetched one.

    The new catalog supersedes the old one entirely. If fetching fails, the
    FetchError propagates and the existing cache is left untouched.
    """
    entries = source.fetch()
    catalog = build_catalog(entries, now)
    logger.debug("Catalog refresh kept %d of %d app(s)", len(catalog.servers), len(entries))
    store.save(catalog)
    return catalog
