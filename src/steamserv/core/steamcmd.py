"""SteamCMD invocation grammar.

SteamCMD takes a sequence of "+command arg..." tokens and executes them in
order, so the argument vectors built here are order-sensitive.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from steamserv.core.process_runner import ProcessRunner
from steamserv.core.registry import LoginType

logger = logging.getLogger(__name__)

ANONYMOUS_USERNAME = "anonymous"

# Substrings in app_status output meaning the forced platform cannot be served
UNSUPPORTED_PLATFORM_MARKERS: tuple[str, ...] = ("Invalid Platform", "unknown")


class Platform(Enum):
    LINUX = "linux"
    WINDOWS = "windows"


PROBE_PLATFORMS: tuple[Platform, ...] = (Platform.LINUX, Platform.WINDOWS)


@dataclass(frozen=True)
class SteamLogin:
    """Credentials for one SteamCMD invocation. Never persisted."""

    username: str
    password: str = field(default="", repr=False)

    @staticmethod
    def anonymous() -> "SteamLogin":
        return SteamLogin(username=ANONYMOUS_USERNAME)

    @property
    def is_anonymous(self) -> bool:
        return self.username == ANONYMOUS_USERNAME

    @property
    def login_type(self) -> LoginType:
        return LoginType.ANONYMOUS if self.is_anonymous else LoginType.CREDENTIALED

    def as_args(self) -> list[str]:
        args = ["+login", self.username]
        if not self.is_anonymous:
            args.append(self.password)
        return args


def build_install_args(
    tool_path: Path, install_dir: Path, login: SteamLogin, app_id: int
) -> list[str]:
    """Build the argument vector that installs or updates an app.

    The same invocation serves install and update; "validate" makes SteamCMD
    verify existing files instead of trusting them.
    """
    return [
        str(tool_path),
        "+force_install_dir",
        str(install_dir),
        *login.as_args(),
        "+app_update",
        str(app_id),
        "validate",
        "+quit",
    ]


def build_probe_args(
    tool_path: Path, platform: Platform, login: SteamLogin, app_id: int
) -> list[str]:
    """Build the argument vector that asks for an app's status on a forced platform."""
    return [
        str(tool_path),
        "+sSteamCmdForcePlatformType",
        platform.value,
        *login.as_args(),
        "+app_status",
        str(app_id),
        "+quit",
    ]


def is_platform_supported(output: str) -> bool:
    return not any(marker in output for marker in UNSUPPORTED_PLATFORM_MARKERS)


class SteamCmd:
    """SteamCMD bound to an executable path and a process runner."""

    def __init__(self, runner: ProcessRunner, tool_path: Path) -> None:
        self._runner = runner
        self._tool_path = tool_path

    @property
    def tool_path(self) -> Path:
        return self._tool_path

    def install_app(self, install_dir: Path, login: SteamLogin, app_id: int) -> None:
        """Install or update app_id into install_dir, streaming filtered output.

        Raises:
            SubprocessSpawnError: If SteamCMD cannot be started
            SubprocessNonZeroExitError: If SteamCMD reports failure
        """
        args = build_install_args(self._tool_path, install_dir, login, app_id)
        self._runner.stream_filtered(args)

    def supported_platforms(self, login: SteamLogin, app_id: int) -> list[Platform]:
        """Probe each platform with app_status and return those SteamCMD can serve."""
        supported: list[Platform] = []
        for platform in PROBE_PLATFORMS:
            result = self._runner.capture(
                build_probe_args(self._tool_path, platform, login, app_id)
            )
            ok = is_platform_supported(result.output)
            logger.debug(
                "Probe %s for app %d: exit=%d supported=%s",
                platform.value,
                app_id,
                result.returncode,
                ok,
            )
            if ok:
                supported.append(platform)
        return supported

    def self_update(self) -> None:
        """Let SteamCMD bootstrap and update itself, showing a spinner."""
        self._runner.stream_as_progress(
            [str(self._tool_path), "+quit"], "Initializing SteamCMD (this may take a while)"
        )
