"""
pass-sshkey CLI: SSH key-pairs kept in the password store.

The command set is closed: generate, rm, restore, version and help,
each registered from its own module. Running the group without a
sub-command lists the key and passphrase entries in the store.

Entry point: pass_sshkey.cli:main
"""

from __future__ import annotations

import click
from rich.text import Text
from rich.tree import Tree

from .. import VERSION_STRING, __version__
from ..errors import SshkeyError
from ._common import console, fail, get_lifecycle


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, message=VERSION_STRING)
@click.pass_context
def main(ctx: click.Context):
    """pass-sshkey: SSH key-pairs in the password store and ~/.ssh.

    Without a command, lists the keys and passphrases in the store.
    """
    if ctx.invoked_subcommand is not None:
        return
    try:
        entries = get_lifecycle(ctx).find()
    except SshkeyError as exc:
        fail(exc)
    console.print(entry_tree(entries))


def entry_tree(entries: list[str]) -> Tree:
    """Render entry names as a tree, the way ``pass find`` shows them."""
    tree = Tree("Password Store")
    nodes: dict[str, Tree] = {}
    for entry in entries:
        parent = tree
        prefix = ""
        for part in entry.split("/"):
            prefix = f"{prefix}/{part}" if prefix else part
            if prefix not in nodes:
                nodes[prefix] = parent.add(Text(part))
            parent = nodes[prefix]
    return tree


# ---------------------------------------------------------------------------
# Register all commands from modular files
# ---------------------------------------------------------------------------

from .generate import register_generate_commands
from .remove import register_remove_commands
from .restore import register_restore_commands
from .info import register_info_commands

register_generate_commands(main)
register_remove_commands(main)
register_restore_commands(main)
register_info_commands(main)
