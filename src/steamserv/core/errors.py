"""Exception hierarchy for steamserv.

All exceptions inherit from SteamservError so the CLI has a single catch point.
Messages are written for the terminal user: what failed and what to try next.
"""

from collections.abc import Sequence


class SteamservError(Exception):
    """Base exception for all steamserv errors."""


class RegistryIOError(SteamservError):
    """The registry file could not be read, parsed or written."""


class CatalogIOError(SteamservError):
    """The catalog cache file could not be read, parsed or written."""


class FetchError(SteamservError):
    """A network download (catalog refresh or SteamCMD archive) failed."""


class NotFoundError(SteamservError):
    """A referenced app id or installed server does not exist."""


class InvalidInputError(SteamservError):
    """A user-supplied value is malformed (app id, server name)."""


class SubprocessSpawnError(SteamservError):
    """The external executable is missing or cannot be started."""


class SubprocessNonZeroExitError(SteamservError):
    """The external tool exited with a failure status."""

    def __init__(self, command: Sequence[str], returncode: int) -> None:
        self.command = list(command)
        self.returncode = returncode
        super().__init__(f"{self.command[0]} failed with exit code {returncode}")


class PlatformUnsupportedError(SteamservError):
    """The platform probe found no platform the app can be installed for."""


class FilesystemError(SteamservError):
    """A filesystem operation on an install directory failed."""
