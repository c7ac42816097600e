"""Static text commands: version, help."""

from __future__ import annotations

from typing import Optional

import click

from .. import VERSION_STRING, __url__
from ..errors import ValidationError
from ._common import fail

HELP_TOPICS = ("generate", "rm", "restore", "version")


def _command_context(ctx: click.Context, name: str) -> tuple[click.Command, click.Context]:
    group_ctx = ctx.parent or ctx
    command = group_ctx.command.get_command(group_ctx, name)
    return command, click.Context(command, info_name=name, parent=group_ctx)


def register_info_commands(main: click.Group) -> None:
    """Register the version and help commands."""

    @main.command("version")
    def version():
        """Show the pass-sshkey version."""
        click.echo(VERSION_STRING)
        click.echo(__url__)

    @main.command("help")
    @click.argument("topic", metavar="[generate|rm|restore|ALL]", required=False)
    @click.pass_context
    def help_cmd(ctx: click.Context, topic: Optional[str]):
        """Show usage for one command, or everything with ALL."""
        if topic is None:
            click.echo("Usage:")
            for name in HELP_TOPICS + ("help",):
                command, sub_ctx = _command_context(ctx, name)
                click.echo("    " + command.get_usage(sub_ctx).replace("Usage:", "", 1).strip())
            return

        if topic == "ALL":
            click.echo(VERSION_STRING)
            click.echo(__url__)
            for name in ("generate", "rm", "restore"):
                command, sub_ctx = _command_context(ctx, name)
                click.echo()
                click.echo(command.get_help(sub_ctx))
            return

        if topic not in HELP_TOPICS:
            fail(ValidationError(f"{topic} is not a valid subcommand."))
        command, sub_ctx = _command_context(ctx, topic)
        click.echo(command.get_help(sub_ctx))
