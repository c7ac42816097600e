"""Key-pair deletion command: rm."""

from __future__ import annotations

import sys

import click

from ..errors import SshkeyError
from ._common import console, err_console, fail, get_lifecycle, setup_logging


def register_remove_commands(main: click.Group) -> None:
    """Register the rm command."""

    @main.command("rm")
    @click.argument("name", metavar="PASS-NAME")
    @click.option("-y", "--yes", "force", is_flag=True, help="Remove the key-pairs without confirmation.")
    @click.option("-v", "--verbose", is_flag=True, help="Enable verbose output.")
    @click.pass_context
    def remove(ctx: click.Context, name: str, force: bool, verbose: bool):
        """Remove key-pairs and passphrases from the store and ~/.ssh.

        Caution: like 'pass rm --recursive', this removes the whole
        PASS-NAME tree, and every local key file whose name starts
        with PASS-NAME.

        Examples:

            pass-sshkey rm work/github

            pass-sshkey rm work -y
        """
        setup_logging(verbose)
        try:
            result = get_lifecycle(ctx).remove(name, force=force)
        except SshkeyError as exc:
            fail(exc)

        for path in result.deleted:
            console.print(f"removed '{path}'", highlight=False)
        if result.failed:
            for path in result.failed:
                err_console.print(f"[red]Could not delete[/] {path}", highlight=False)
            err_console.print(
                f"[yellow]{name} is gone from the store; re-run rm to clean up ~/.ssh.[/]"
            )
            sys.exit(1)
