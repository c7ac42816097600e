"""Key-pair generation via ssh-keygen."""

from __future__ import annotations

import logging
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path

from .config import SshkeyConfig
from .errors import KeyGenerationError, LocalFileError
from .models import KeyType

logger = logging.getLogger("pass_sshkey.keygen")


class KeyGenerator(ABC):
    """Produces a private key file and its ``.pub`` sibling."""

    @abstractmethod
    def generate(
        self,
        bits: int,
        key_type: KeyType,
        private_key: Path,
        passphrase: str,
        comment: str,
    ) -> None:
        """Write ``private_key`` and ``private_key.pub``.

        Raises:
            KeyGenerationError: If no key-pair was produced.
        """


class SshKeygen(KeyGenerator):
    """KeyGenerator that shells out to OpenSSH's ssh-keygen."""

    def __init__(self, config: SshkeyConfig):
        self.binary = config.keygen_bin

    def generate(
        self,
        bits: int,
        key_type: KeyType,
        private_key: Path,
        passphrase: str,
        comment: str,
    ) -> None:
        try:
            private_key.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        except OSError as exc:
            raise LocalFileError(
                f"could not create {private_key.parent}: {exc.strerror or exc}"
            ) from exc
        cmd = [
            self.binary,
            "-b", str(bits),
            "-t", key_type.value,
            "-f", str(private_key),
            "-N", passphrase,
            "-q",
            "-C", comment,
        ]
        logger.debug("Running %s -t %s -b %d -f %s", self.binary, key_type.value, bits, private_key)
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, check=False)
        except OSError as exc:
            raise KeyGenerationError(
                f"key generation failed: {exc}", command=[self.binary], returncode=127,
            ) from exc

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise KeyGenerationError(
                "key generation failed" + (f": {stderr}" if stderr else ""),
                command=[self.binary, "-t", key_type.value, "-f", str(private_key)],
                returncode=result.returncode,
                stderr=stderr,
            )
        logger.info("Generated %s key-pair %s", key_type.value, private_key)
