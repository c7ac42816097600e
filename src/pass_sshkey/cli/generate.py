"""Key-pair creation command: generate."""

from __future__ import annotations

from typing import Optional

import click

from ..errors import SshkeyError
from ..lifecycle import DEFAULT_KEY_BITS, DEFAULT_KEY_TYPE
from ..naming import KEY_TYPE_ALTERNATION
from ._common import fail, get_lifecycle, setup_logging


def register_generate_commands(main: click.Group) -> None:
    """Register the generate command."""

    @main.command("generate")
    @click.argument("name", metavar="PASS-NAME")
    @click.option("-t", "--keytype", default=DEFAULT_KEY_TYPE.value, show_default=True,
                  help=f"Type of the key: {KEY_TYPE_ALTERNATION}.")
    @click.option("-b", "--keybits", default=str(DEFAULT_KEY_BITS), show_default=True,
                  help="Number of bits in the key.")
    @click.option("-p", "--pass", "passphrase", is_flag=False, flag_value="", default=None,
                  metavar="[PASSPHRASE]",
                  help="Custom passphrase; prompted for when given without a value. "
                       "A value after -p is taken as the passphrase, so give "
                       "PASS-NAME first or use --pass=PASSPHRASE.")
    @click.option("-n", "--nopass", is_flag=True, help="Create the private key without a passphrase.")
    @click.option("-C", "--comment", default="", help="Comment to help identify the key.")
    @click.option("-c", "--clip", is_flag=True,
                  help="Put the passphrase on the clipboard; cleared after $PASSWORD_STORE_CLIP_TIME seconds.")
    @click.option("-v", "--verbose", is_flag=True, help="Enable verbose output.")
    @click.pass_context
    def generate(
        ctx: click.Context,
        name: str,
        keytype: str,
        keybits: str,
        passphrase: Optional[str],
        nopass: bool,
        comment: str,
        clip: bool,
        verbose: bool,
    ):
        """Create an SSH key-pair in the password store and ~/.ssh.

        By default the private key is protected by a random passphrase
        generated by pass, sized by $PASSWORD_STORE_GENERATED_LENGTH and
        $PASSWORD_STORE_CHARACTER_SET. The passphrase is stored only in
        PASS-NAME/passphrase. Prints the public key.

        Examples:

            pass-sshkey generate work/github -t ed25519

            pass-sshkey generate work/gitlab --pass=hunter2 -C me@work
        """
        setup_logging(verbose)
        try:
            result = get_lifecycle(ctx).generate(
                name,
                key_type=keytype,
                bits=keybits,
                comment=comment,
                passphrase=passphrase,
                nopass=nopass,
                clip=clip,
            )
        except SshkeyError as exc:
            fail(exc)

        click.echo(result.public_key, nl=False)
