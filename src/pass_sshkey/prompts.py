"""Talking to the human at the terminal: notices, passphrases, yes/no."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

import click
from rich.console import Console


class Prompter(ABC):
    """Asks the human in front of the terminal."""

    @abstractmethod
    def notify(self, message: str) -> None:
        """Show a progress message before an interactive step."""

    @abstractmethod
    def passphrase(self, name: str) -> str:
        """Read a passphrase for ``name`` without echoing it."""

    @abstractmethod
    def confirm(self, message: str) -> bool:
        """Ask a yes/no question. Defaults to no."""


class ConsolePrompter(Prompter):
    """Prompter backed by a rich console and click's prompts."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(soft_wrap=True)

    def notify(self, message: str) -> None:
        self.console.print(message, markup=False, highlight=False)

    def passphrase(self, name: str) -> str:
        return click.prompt(
            f"Enter passphrase for {name}",
            hide_input=True,
            default="",
            show_default=False,
            err=True,
        )

    def confirm(self, message: str) -> bool:
        return click.confirm(message, default=False, err=True)
