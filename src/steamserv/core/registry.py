"""Local registry of installed servers and global settings.

The registry is an immutable value: operations load it once, derive a new
Registry with the pure mutation helpers below, and hand the result to a
RegistryStore which overwrites the whole file.

Architecture:
- Registry / InstalledServer: frozen data
- add_server / remove_server_by_name / touch_server: pure transformations
- RegistryStore: abstract persistence interface
- FilesystemRegistryStore: TOML file under the app directory
- InMemoryRegistryStore: test implementation that never touches disk
"""

import logging
import tomllib
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any

import tomlkit

from steamserv.core.errors import InvalidInputError, NotFoundError, RegistryIOError
from steamserv.core.paths import registry_path

logger = logging.getLogger(__name__)


class LoginType(Enum):
    """How SteamCMD logs in for a server. Fixed when the server is installed."""

    ANONYMOUS = "anonymous"
    CREDENTIALED = "credentialed"


@dataclass(frozen=True)
class InstalledServer:
    """A dedicated server installed by steamserv."""

    app_id: int
    name: str
    install_path: Path
    install_date: datetime
    last_updated: datetime
    auto_update: bool
    login_type: LoginType
    port: int | None = None


@dataclass(frozen=True)
class Registry:
    """Immutable snapshot of the persisted registry.

    The default value is what a first run sees before setup completes.
    """

    tool_path: Path = Path("")
    install_root: Path = Path("")
    last_cache_update: datetime | None = None
    installed_servers: tuple[InstalledServer, ...] = field(default_factory=tuple)
    initialized: bool = False

    @property
    def server_names(self) -> list[str]:
        return [server.name for server in self.installed_servers]


def validate_server_name(name: str) -> str:
    """Return the stripped name if it can be used as an install directory.

    Raises:
        InvalidInputError: If the name is empty or not a single path component
    """
    stripped = name.strip()
    if not stripped:
        raise InvalidInputError("Server name must not be empty.")
    if stripped in (".", "..") or "/" in stripped or "\\" in stripped or "\0" in stripped:
        raise InvalidInputError(
            f"Server name '{stripped}' is not a valid directory name. "
            "Use a single folder name without path separators."
        )
    return stripped


def find_server(registry: Registry, name: str) -> InstalledServer | None:
    for server in registry.installed_servers:
        if server.name == name:
            return server
    return None


def add_server(registry: Registry, server: InstalledServer) -> Registry:
    """Return a registry with server appended.

    Raises:
        InvalidInputError: If the name is invalid or already registered
    """
    validate_server_name(server.name)
    if find_server(registry, server.name) is not None:
        raise InvalidInputError(f"A server named '{server.name}' is already installed.")
    return replace(registry, installed_servers=(*registry.installed_servers, server))


def remove_server_by_name(registry: Registry, name: str) -> Registry:
    """Return a registry without the server called name.

    Raises:
        NotFoundError: If no server has that name
    """
    if find_server(registry, name) is None:
        raise NotFoundError(f"No installed server named '{name}'.")
    remaining = tuple(s for s in registry.installed_servers if s.name != name)
    return replace(registry, installed_servers=remaining)


def touch_server(registry: Registry, name: str, now: datetime) -> Registry:
    """Return a registry where the named server's last_updated is now.

    Raises:
        NotFoundError: If no server has that name
    """
    if find_server(registry, name) is None:
        raise NotFoundError(f"No installed server named '{name}'.")
    servers = tuple(
        replace(s, last_updated=now) if s.name == name else s for s in registry.installed_servers
    )
    return replace(registry, installed_servers=servers)


# ============================================================================
# Persistence
# ============================================================================


class RegistryStore(ABC):
    """Abstract interface for loading and saving the registry.

    Provides dependency injection for registry access, enabling in-memory
    implementations for tests without touching the filesystem.
    """

    @abstractmethod
    def exists(self) -> bool:
        """Check if a persisted registry exists."""
        ...

    @abstractmethod
    def load(self) -> Registry:
        """Load the registry.

        Returns:
            The persisted Registry, or a default Registry if none exists yet

        Raises:
            RegistryIOError: If the registry cannot be read or parsed
        """
        ...

    @abstractmethod
    def save(self, registry: Registry) -> None:
        """Overwrite the persisted registry.

        Raises:
            RegistryIOError: If the registry cannot be written
        """
        ...

    @abstractmethod
    def path(self) -> Path:
        """Get the path of the registry file (for messages and debugging)."""
        ...


def _as_utc(value: Any, key: str) -> datetime:
    if not isinstance(value, datetime):
        raise ValueError(f"'{key}' must be a datetime, got {value!r}")
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _server_from_toml(data: dict[str, Any]) -> InstalledServer:
    port = data.get("port")
    return InstalledServer(
        app_id=int(data["app_id"]),
        name=str(data["name"]),
        install_path=Path(data["install_path"]),
        install_date=_as_utc(data["install_date"], "install_date"),
        last_updated=_as_utc(data["last_updated"], "last_updated"),
        auto_update=bool(data.get("auto_update", False)),
        login_type=LoginType(data.get("login_type", LoginType.ANONYMOUS.value)),
        port=int(port) if port is not None else None,
    )


def _server_to_toml(server: InstalledServer) -> Any:
    table = tomlkit.table()
    table["app_id"] = server.app_id
    table["name"] = server.name
    table["install_path"] = str(server.install_path)
    table["install_date"] = server.install_date
    table["last_updated"] = server.last_updated
    table["auto_update"] = server.auto_update
    table["login_type"] = server.login_type.value
    if server.port is not None:
        table["port"] = server.port
    return table


def registry_from_toml(content: str) -> Registry:
    """Parse registry TOML text.

    Raises:
        tomllib.TOMLDecodeError, KeyError, ValueError, TypeError: On malformed content
    """
    data = tomllib.loads(content)
    entries = data.get("installed_servers", [])
    if not isinstance(entries, list) or not all(isinstance(e, dict) for e in entries):
        raise ValueError("'installed_servers' must be an array of tables ([[installed_servers]])")
    last_cache_update = data.get("last_cache_update")
    return Registry(
        tool_path=Path(data.get("tool_path", "")),
        install_root=Path(data.get("install_root", "")),
        last_cache_update=(
            _as_utc(last_cache_update, "last_cache_update")
            if last_cache_update is not None
            else None
        ),
        installed_servers=tuple(_server_from_toml(entry) for entry in entries),
        initialized=bool(data.get("initialized", False)),
    )


def registry_to_toml(registry: Registry) -> str:
    doc = tomlkit.document()
    doc.add(tomlkit.comment("steamserv configuration and installed servers"))
    doc["tool_path"] = str(registry.tool_path)
    doc["install_root"] = str(registry.install_root)
    doc["initialized"] = registry.initialized
    if registry.last_cache_update is not None:
        doc["last_cache_update"] = registry.last_cache_update
    if registry.installed_servers:
        servers = tomlkit.aot()
        for server in registry.installed_servers:
            servers.append(_server_to_toml(server))
        doc["installed_servers"] = servers
    return tomlkit.dumps(doc)


class FilesystemRegistryStore(RegistryStore):
    """Production implementation that reads/writes config.toml in the app directory."""

    def __init__(self, config_path: Path | None = None) -> None:
        self._path = config_path if config_path is not None else registry_path()

    def exists(self) -> bool:
        return self._path.exists()

    def load(self) -> Registry:
        if not self._path.exists():
            logger.debug("No registry at %s, using defaults", self._path)
            return Registry()

        try:
            content = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise RegistryIOError(f"Cannot read registry {self._path}: {e}") from e

        try:
            return registry_from_toml(content)
        except (tomllib.TOMLDecodeError, KeyError, ValueError, TypeError) as e:
            raise RegistryIOError(
                f"Registry file {self._path} is malformed: {e}\n"
                "Fix or delete the file and run 'steamserv init' again."
            ) from e

    def save(self, registry: Registry) -> None:
        content = registry_to_toml(registry)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise RegistryIOError(f"Cannot write registry {self._path}: {e}") from e
        logger.debug("Saved registry with %d server(s)", len(registry.installed_servers))

    def path(self) -> Path:
        return self._path


class InMemoryRegistryStore(RegistryStore):
    """Test implementation that keeps the registry in memory."""

    def __init__(self, registry: Registry | None = None) -> None:
        """Initialize in-memory store.

        Args:
            registry: Initial persisted state (None = nothing persisted yet)
        """
        self._registry = registry
        self._saved: list[Registry] = []

    @property
    def saved(self) -> list[Registry]:
        """Registries passed to save(), oldest first. For test assertions."""
        return self._saved

    def exists(self) -> bool:
        return self._registry is not None

    def load(self) -> Registry:
        if self._registry is None:
            return Registry()
        return self._registry

    def save(self, registry: Registry) -> None:
        self._registry = registry
        self._saved.append(registry)

    def path(self) -> Path:
        return Path("/fake/steamserv/config.toml")
