"""Local key directory rebuild command: restore."""

from __future__ import annotations

from typing import Optional

import click

from ..errors import SshkeyError
from ..models import RestoreStatus
from ._common import console, err_console, fail, get_lifecycle, setup_logging


def register_restore_commands(main: click.Group) -> None:
    """Register the restore command."""

    @main.command("restore")
    @click.argument("name", metavar="[PASS-NAME]", required=False)
    @click.option("-v", "--verbose", is_flag=True, help="Enable verbose output.")
    @click.pass_context
    def restore(ctx: click.Context, name: Optional[str], verbose: bool):
        """Restore SSH keys from the password store to ~/.ssh.

        Only private and public keys are restored; passphrases stay in
        the store. Existing files are never overwritten. Useful after
        moving the password store to a new machine.

        Examples:

            pass-sshkey restore

            pass-sshkey restore work
        """
        setup_logging(verbose)
        try:
            outcomes = get_lifecycle(ctx).restore(name)
        except SshkeyError as exc:
            fail(exc)

        for outcome in outcomes:
            if outcome.status == RestoreStatus.SKIPPED:
                err_console.print(f"[yellow]{outcome.target} already exists.[/]", highlight=False)
            else:
                console.print(
                    f"{outcome.entry} restored to [cyan]{outcome.target}[/]", highlight=False
                )
