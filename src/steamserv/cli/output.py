"""Output utilities for CLI commands with clear intent.

user_output() is for messages meant for a human (stderr), machine_output() for
data a caller may pipe (stdout).
"""

from typing import Any

import click


def user_output(message: Any = "", nl: bool = True) -> None:
    """Write a user-facing message to stderr."""
    click.echo(message, nl=nl, err=True)


def machine_output(message: Any = "", nl: bool = True) -> None:
    """Write structured or pipeable output to stdout."""
    click.echo(message, nl=nl)
