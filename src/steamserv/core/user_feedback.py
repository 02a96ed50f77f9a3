"""User-facing diagnostic output with mode awareness."""

from abc import ABC, abstractmethod

import click

from steamserv.cli.output import user_output


class UserFeedback(ABC):
    """Provides user-facing diagnostic output that's mode-aware.

    Functions call ctx.feedback methods instead of threading a 'quiet' boolean
    through their signatures.

    Mode behavior:
        Interactive mode:
            - info() → outputs to stderr
            - success() → outputs to stderr with green styling
            - error() → outputs to stderr with red styling

        Quiet mode (--quiet):
            - info() → suppressed
            - success() → suppressed
            - error() → still outputs to stderr with red styling
    """

    @abstractmethod
    def info(self, message: str) -> None:
        """Show informational message (suppressed in quiet mode)."""

    @abstractmethod
    def success(self, message: str) -> None:
        """Show success message (suppressed in quiet mode)."""

    @abstractmethod
    def error(self, message: str) -> None:
        """Show error message (always shown)."""


class InteractiveFeedback(UserFeedback):
    """Feedback shown in interactive mode (all messages)."""

    def info(self, message: str) -> None:
        user_output(message)

    def success(self, message: str) -> None:
        user_output(click.style(message, fg="green"))

    def error(self, message: str) -> None:
        user_output(click.style(message, fg="red"))


class SuppressedFeedback(UserFeedback):
    """Feedback for --quiet: only errors are shown."""

    def info(self, message: str) -> None:
        pass

    def success(self, message: str) -> None:
        pass

    def error(self, message: str) -> None:
        user_output(click.style(message, fg="red"))
