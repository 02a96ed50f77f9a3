"""CLI error handling utilities with styled output.

Errors use a red "Error:" prefix and exit with status 1, whether they come
from an Ensure assertion or from a SteamservError raised by the core.
"""

from collections.abc import Iterator
from contextlib import contextmanager

import click

from steamserv.cli.output import user_output
from steamserv.core.errors import SteamservError


def _fail(error_message: str) -> None:
    user_output(click.style("Error: ", fg="red") + error_message)
    raise SystemExit(1)


class Ensure:
    """Helper class for asserting invariants with consistent error handling."""

    @staticmethod
    def invariant(condition: bool, error_message: str) -> None:
        """Ensure condition is true, otherwise output styled error and exit.

        Raises:
            SystemExit: If condition is false (with exit code 1)
        """
        if not condition:
            _fail(error_message)

    @staticmethod
    def one_of(value: str, allowed: list[str], what: str) -> str:
        """Ensure value is one of allowed, otherwise list the choices and exit.

        Raises:
            SystemExit: If value is not allowed (with exit code 1)
        """
        if value not in allowed:
            _fail(f"Unknown {what} '{value}'. Valid values: {', '.join(allowed)}")
        return value


@contextmanager
def exit_on_error() -> Iterator[None]:
    """Turn a SteamservError raised inside the block into a styled error and exit 1.

    Example:
        >>> with exit_on_error():
        ...     ServerInstaller(ctx).update(server_name)
    """
    try:
        yield
    except SteamservError as e:
        _fail(str(e))
