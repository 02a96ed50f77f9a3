"""Interactive decisions as an injectable dependency.

The installer asks the user to confirm names, pick a login, or type an app id.
Those questions go through a Prompter so workflows can be driven by a scripted
fake in tests instead of a live terminal.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

import click


class Prompter(ABC):
    """Abstract interface for asking the user to decide something."""

    @abstractmethod
    def confirm(self, prompt: str) -> bool:
        """Ask a yes/no question."""
        ...

    @abstractmethod
    def ask_text(self, prompt: str, placeholder: str | None = None) -> str:
        """Ask for free text.

        Args:
            prompt: Question shown to the user
            placeholder: Example value shown as a hint, never used as an answer
        """
        ...

    @abstractmethod
    def ask_secret(self, prompt: str) -> str:
        """Ask for a value that must not be echoed (passwords)."""
        ...

    @abstractmethod
    def select(self, prompt: str, options: Sequence[str]) -> str:
        """Ask the user to pick one of options. Returns the chosen option."""
        ...


class ClickPrompter(Prompter):
    """Production implementation prompting on the terminal with click."""

    def confirm(self, prompt: str) -> bool:
        return click.confirm(prompt, default=False, err=True)

    def ask_text(self, prompt: str, placeholder: str | None = None) -> str:
        if placeholder is not None:
            prompt = f"{prompt} ({placeholder})"
        return click.prompt(prompt, type=str, err=True)

    def ask_secret(self, prompt: str) -> str:
        return click.prompt(prompt, type=str, hide_input=True, err=True)

    def select(self, prompt: str, options: Sequence[str]) -> str:
        for index, option in enumerate(options, start=1):
            click.echo(f"  {index}) {option}", err=True)
        choice = click.prompt(
            prompt,
            type=click.IntRange(1, len(options)),
            err=True,
        )
        return options[choice - 1]
