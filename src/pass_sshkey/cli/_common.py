"""Shared utilities for all CLI command modules.

Provides the Rich consoles, logging setup, error reporting, and the
lookup of the lifecycle coordinator stored on the click context.
"""

from __future__ import annotations

import logging
import sys
from typing import NoReturn

import click
from rich.console import Console
from rich.logging import RichHandler

from ..config import load_config
from ..errors import SshkeyError
from ..lifecycle import KeyLifecycle
from ..prompts import ConsolePrompter

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)


def setup_logging(verbose: bool) -> None:
    """Route pass_sshkey logs to stderr; INFO when verbose, else WARNING.

    Args:
        verbose: Whether the command was given -v/--verbose.
    """
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_time=False, show_path=False)],
        force=True,
    )


def get_lifecycle(ctx: click.Context) -> KeyLifecycle:
    """Return the coordinator on the context, building it on first use.

    Tests put a coordinator wired with fakes on ``obj`` up front.
    """
    root = ctx.find_root()
    if not isinstance(root.obj, KeyLifecycle):
        config = load_config()
        root.obj = KeyLifecycle.from_config(config, prompter=ConsolePrompter(console))
    return root.obj


def fail(exc: SshkeyError) -> NoReturn:
    """Print a one-line error and exit with the error's status.

    Args:
        exc: The error that ended the command.
    """
    err_console.print(f"[bold red]Error:[/] {exc}", highlight=False)
    sys.exit(exc.exit_code)
