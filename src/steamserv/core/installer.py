"""Install, update and uninstall workflows for dedicated servers.

Each workflow is linear: load the registry once, resolve whatever the caller
did not supply by asking the prompter, run one SteamCMD invocation, and only
after it succeeds derive the new registry and save it. Any error propagates
to the caller with the registry left as it was.
"""

import logging
import re
from dataclasses import replace
from pathlib import Path

from steamserv.core.context import SteamservContext
from steamserv.core.errors import (
    FilesystemError,
    InvalidInputError,
    NotFoundError,
    PlatformUnsupportedError,
)
from steamserv.core.registry import (
    InstalledServer,
    LoginType,
    Registry,
    add_server,
    find_server,
    remove_server_by_name,
    touch_server,
    validate_server_name,
)
from steamserv.core.steamcmd import ANONYMOUS_USERNAME, Platform, SteamCmd, SteamLogin

logger = logging.getLogger(__name__)

LOGIN_CHOICE_ANONYMOUS = "anonymous"
LOGIN_CHOICE_ACCOUNT = "steam account"
NAME_PLACEHOLDER = "e.g. TestServer"

_MAX_APP_ID = 2**32 - 1
_APP_ID_PATTERN = re.compile(r"[0-9]+")


def parse_app_id(raw: str) -> int:
    """Parse a user-typed Steam app id.

    Raises:
        InvalidInputError: If raw is not an unsigned 32-bit integer
    """
    text = raw.strip()
    if not _APP_ID_PATTERN.fullmatch(text) or int(text) > _MAX_APP_ID:
        raise InvalidInputError(f"'{raw}' is not a valid Steam App ID (expected a number).")
    return int(text)


class ServerInstaller:
    """Orchestrates SteamCMD, the registry, the catalog and the prompter."""

    def __init__(self, ctx: SteamservContext) -> None:
        self._ctx = ctx

    # ------------------------------------------------------------------
    # Public workflows
    # ------------------------------------------------------------------

    def install(
        self,
        app_id_hint: int | None = None,
        name_hint: str | None = None,
        username_hint: str | None = None,
        *,
        auto_update: bool = False,
        port: int | None = None,
    ) -> InstalledServer:
        """Install a new server and record it in the registry.

        Args:
            app_id_hint: Steam app id to confirm against the catalog
            name_hint: Proposed server (directory) name to confirm
            username_hint: Steam username; "anonymous" skips the password prompt
            auto_update: Stored as advisory metadata
            port: Stored as advisory metadata

        Returns:
            The InstalledServer that was added

        Raises:
            InvalidInputError: Bad name, duplicate name, or unparseable app id
            PlatformUnsupportedError: SteamCMD serves the app on no platform
            SubprocessSpawnError, SubprocessNonZeroExitError: SteamCMD failed
            RegistryIOError: The registry could not be loaded or saved
        """
        feedback = self._ctx.feedback
        registry = self._ctx.registry_store.load()

        name = self._resolve_new_name(registry, name_hint)
        install_path = (registry.install_root / name).expanduser().absolute()
        login = self._resolve_login(username_hint)
        app_id = self._resolve_app_id(app_id_hint)

        steamcmd = SteamCmd(self._ctx.process_runner, registry.tool_path)
        platforms = self._probe_platforms(steamcmd, login, app_id)
        feedback.info("Supported platforms: " + ", ".join(p.value for p in platforms))

        feedback.info(f"Installing app {app_id} into {install_path}")
        steamcmd.install_app(install_path, login, app_id)

        now = self._ctx.time.now()
        server = InstalledServer(
            app_id=app_id,
            name=name,
            install_path=install_path,
            install_date=now,
            last_updated=now,
            auto_update=auto_update,
            login_type=login.login_type,
            port=port,
        )
        self._ctx.registry_store.save(add_server(registry, server))
        logger.debug("Registered %s (app %d, %s)", name, app_id, server.login_type.value)

        feedback.success(f"Server {name} installed successfully.")
        return server

    def update(self, name_hint: str | None = None) -> InstalledServer:
        """Re-run SteamCMD for an installed server and bump its last_updated.

        Raises:
            NotFoundError: The server name does not match an installed server
            SubprocessSpawnError, SubprocessNonZeroExitError: SteamCMD failed
            RegistryIOError: The registry could not be loaded or saved
        """
        registry = self._ctx.registry_store.load()
        server = self._resolve_installed(registry, name_hint, verb="update")
        login = self._login_for(server)

        steamcmd = SteamCmd(self._ctx.process_runner, registry.tool_path)
        self._ctx.feedback.info(f"Updating {server.name} (app {server.app_id})")
        steamcmd.install_app(server.install_path, login, server.app_id)

        now = self._ctx.time.now()
        self._ctx.registry_store.save(touch_server(registry, server.name, now))

        self._ctx.feedback.success(f"Server {server.name} updated successfully.")
        return replace(server, last_updated=now)

    def uninstall(self, name_hint: str | None = None) -> bool:
        """Delete an installed server's directory and forget it.

        Returns:
            True if the server was removed, False if the user declined

        Raises:
            NotFoundError: The server name does not match an installed server
            FilesystemError: The directory could not be removed (entry is kept)
            RegistryIOError: The registry could not be loaded or saved
        """
        registry = self._ctx.registry_store.load()
        server = self._resolve_installed(registry, name_hint, verb="uninstall")

        confirmed = self._ctx.prompter.confirm(
            f"Are you sure you want to uninstall {server.name}? "
            f"This deletes {server.install_path}."
        )
        if not confirmed:
            self._ctx.feedback.info("Uninstall cancelled.")
            return False

        _check_removable(server)
        try:
            self._ctx.filesystem.remove_tree(server.install_path)
        except FilesystemError:
            self._ctx.feedback.error(
                f"Server {server.name} is still registered. "
                "Retry once its directory can be removed."
            )
            raise
        self._ctx.registry_store.save(remove_server_by_name(registry, server.name))

        self._ctx.feedback.success(f"Server {server.name} uninstalled.")
        return True

    # ------------------------------------------------------------------
    # Resolution steps
    # ------------------------------------------------------------------

    def _resolve_new_name(self, registry: Registry, name_hint: str | None) -> str:
        prompter = self._ctx.prompter
        if name_hint is not None and prompter.confirm(
            f"Would you like to install the server with this name {name_hint}?"
        ):
            raw = name_hint
        else:
            raw = prompter.ask_text(
                "Please enter the name of the game server:", placeholder=NAME_PLACEHOLDER
            )

        name = validate_server_name(raw)
        if find_server(registry, name) is not None:
            raise InvalidInputError(
                f"A server named '{name}' is already installed. "
                f"Use 'steamserv update -s {name}' or choose another name."
            )
        return name

    def _resolve_login(self, username_hint: str | None) -> SteamLogin:
        prompter = self._ctx.prompter
        if username_hint is not None:
            if username_hint == ANONYMOUS_USERNAME:
                return SteamLogin.anonymous()
            password = prompter.ask_secret("Please enter your password for your steam account.")
            return SteamLogin(username=username_hint, password=password)

        choice = prompter.select(
            "Please select your login", [LOGIN_CHOICE_ANONYMOUS, LOGIN_CHOICE_ACCOUNT]
        )
        if choice == LOGIN_CHOICE_ANONYMOUS:
            return SteamLogin.anonymous()
        return self._ask_credentials()

    def _ask_credentials(self) -> SteamLogin:
        prompter = self._ctx.prompter
        username = prompter.ask_text("Please enter your steam username:")
        password = prompter.ask_secret("Please enter your password for your steam account.")
        return SteamLogin(username=username.strip(), password=password)

    def _resolve_app_id(self, app_id_hint: int | None) -> int:
        prompter = self._ctx.prompter
        if app_id_hint is not None:
            entry = self._ctx.catalog_store.load().find(app_id_hint)
            if entry is None:
                self._ctx.feedback.info(f"App {app_id_hint} is not in the server catalog.")
            elif prompter.confirm(f"Would you like to install the server for {entry.name}?"):
                return app_id_hint

        raw = prompter.ask_text("Please enter the Steam App ID of the game server.")
        return parse_app_id(raw)

    def _probe_platforms(
        self, steamcmd: SteamCmd, login: SteamLogin, app_id: int
    ) -> list[Platform]:
        with self._ctx.console.status(f"Checking platforms for app {app_id}...", spinner="dots"):
            platforms = steamcmd.supported_platforms(login, app_id)
        if not platforms:
            raise PlatformUnsupportedError(
                f"SteamCMD cannot install app {app_id} for linux or windows. "
                "Check the app id and that your account owns the app."
            )
        return platforms

    def _resolve_installed(
        self, registry: Registry, name_hint: str | None, *, verb: str
    ) -> InstalledServer:
        prompter = self._ctx.prompter
        if name_hint is not None:
            server = find_server(registry, name_hint)
            if server is not None:
                return server
            typed = prompter.ask_text(
                "Please enter the name of the game server:", placeholder=NAME_PLACEHOLDER
            ).strip()
            server = find_server(registry, typed)
            if server is None:
                raise NotFoundError(
                    f"No installed server named '{typed}'. "
                    "Run 'steamserv list --installed' to see installed servers."
                )
            return server

        if not registry.installed_servers:
            raise NotFoundError("No servers are installed. Run 'steamserv install' first.")
        chosen = prompter.select(
            f"Please select the game server to {verb}", registry.server_names
        )
        server = find_server(registry, chosen)
        if server is None:
            raise NotFoundError(f"No installed server named '{chosen}'.")
        return server

    def _login_for(self, server: InstalledServer) -> SteamLogin:
        if server.login_type is LoginType.ANONYMOUS:
            return SteamLogin.anonymous()
        return self._ask_credentials()


def _check_removable(server: InstalledServer) -> None:
    """Refuse to delete a path that is not the server's own install directory."""
    path: Path = server.install_path
    if not path.is_absolute() or path.name != server.name:
        raise FilesystemError(
            f"Refusing to delete {path}: it is not the install directory of '{server.name}'."
        )
