"""
Secret store adapters -- where the encrypted half of a key-pair lives.

The coordinator only talks to SecretStore. PassStore drives the real
``pass`` executable; every entry is a GPG file under the store root:

    <name>/id_<type>.gpg
    <name>/id_<type>.pub.gpg
    <name>/passphrase.gpg

Encryption, recipients and per-entry git commits are pass's business.
"""

from __future__ import annotations

import logging
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, Optional, Sequence

from .config import SshkeyConfig
from .errors import SubprocessFailure

logger = logging.getLogger("pass_sshkey.store")

GPG_SUFFIX = ".gpg"


class SecretStore(ABC):
    """Abstract hierarchical, encrypted key-value store."""

    @abstractmethod
    def is_initialized(self) -> bool:
        """Check the store root exists and has recipients configured."""

    @abstractmethod
    def exists(self, entry: str) -> bool:
        """Check whether a single entry exists."""

    @abstractmethod
    def has_directory(self, name: str) -> bool:
        """Check whether ``name`` is a subtree of entries."""

    @abstractmethod
    def location(self, entry: str) -> str:
        """Human-readable location of an entry, for messages."""

    @abstractmethod
    def insert(self, entry: str, content: bytes, force: bool = False) -> None:
        """Encrypt and store ``content`` as ``entry``."""

    @abstractmethod
    def generate(self, entry: str, length: int, force: bool = False) -> None:
        """Store a freshly generated random secret as ``entry``."""

    @abstractmethod
    def show_bytes(self, entry: str) -> bytes:
        """Decrypt an entry verbatim."""

    @abstractmethod
    def clip(self, entry: str) -> None:
        """Copy the first line of an entry to the clipboard."""

    @abstractmethod
    def remove(self, name: str, recursive: bool = True, force: bool = False) -> None:
        """Delete an entry or subtree.

        Raises:
            SubprocessFailure: If the store refused or the user aborted.
        """

    @abstractmethod
    def list_entries(self) -> list[str]:
        """All entry names, relative to the root, sorted."""

    @property
    @abstractmethod
    def is_versioned(self) -> bool:
        """Whether changes to the store are tracked in git."""

    @abstractmethod
    def commit(self, entries: Sequence[str], message: str) -> bool:
        """Stage and commit ``entries``. Returns False on failure."""

    def show(self, entry: str) -> str:
        """Decrypt an entry as text, without its trailing newlines."""
        return self.show_bytes(entry).decode("utf-8").rstrip("\n")


class PassStore(SecretStore):
    """SecretStore backed by the ``pass`` command line tool.

    The configured store root is exported as PASSWORD_STORE_DIR to every
    pass subprocess so pass and this adapter always agree on it.
    """

    def __init__(self, config: SshkeyConfig):
        self.config = config
        self.root = config.store_dir

    def _path(self, name: str) -> Path:
        # pass resolves names against its prefix; a leading slash must not
        # replace the root.
        return self.root / name.lstrip("/")

    def _entry_file(self, entry: str) -> Path:
        return self._path(f"{entry}{GPG_SUFFIX}")

    def _run(
        self,
        args: Sequence[str],
        input: Optional[bytes] = None,
        interactive: bool = False,
    ) -> subprocess.CompletedProcess:
        cmd = [self.config.pass_bin, *args]
        logger.debug("Running %s", " ".join(cmd[:3]))
        try:
            if interactive:
                result = subprocess.run(
                    cmd, env=self.config.subprocess_env(), check=False,
                )
            else:
                result = subprocess.run(
                    cmd,
                    input=input,
                    capture_output=True,
                    env=self.config.subprocess_env(),
                    check=False,
                )
        except OSError as exc:
            raise SubprocessFailure(
                f"could not run {cmd[0]}: {exc}", command=cmd, returncode=127,
            ) from exc

        if result.returncode != 0:
            stderr = (result.stderr or b"").decode("utf-8", "replace").strip()
            raise SubprocessFailure(
                f"{' '.join(cmd[:2])} failed"
                + (f": {stderr}" if stderr else f" with status {result.returncode}"),
                command=cmd,
                returncode=result.returncode,
                stderr=stderr,
            )
        return result

    def is_initialized(self) -> bool:
        return self.config.gpg_id_file.is_file()

    def exists(self, entry: str) -> bool:
        return self._entry_file(entry).exists()

    def has_directory(self, name: str) -> bool:
        return self._path(name).is_dir()

    def location(self, entry: str) -> str:
        return str(self._entry_file(entry))

    def insert(self, entry: str, content: bytes, force: bool = False) -> None:
        args = ["insert", "--multiline"]
        if force:
            args.append("--force")
        self._run([*args, entry], input=content)
        logger.debug("Inserted %s", entry)

    def generate(self, entry: str, length: int, force: bool = False) -> None:
        args = ["generate"]
        if force:
            args.append("--force")
        self._run([*args, entry, str(length)])
        logger.debug("Generated %s (%d characters)", entry, length)

    def show_bytes(self, entry: str) -> bytes:
        return self._run(["show", entry]).stdout

    def clip(self, entry: str) -> None:
        self._run(["show", "--clip", entry])

    def remove(self, name: str, recursive: bool = True, force: bool = False) -> None:
        args = ["rm"]
        if recursive:
            args.append("--recursive")
        if force:
            args.append("--force")
        # Without --force pass asks for confirmation on our terminal.
        self._run([*args, name], interactive=not force)

    def list_entries(self) -> list[str]:
        if not self.root.is_dir():
            return []
        entries = []
        for path in self.root.rglob(f"*{GPG_SUFFIX}"):
            rel = path.relative_to(self.root)
            if rel.parts[0] == ".git" or not path.is_file():
                continue
            entries.append(rel.as_posix()[: -len(GPG_SUFFIX)])
        return sorted(entries)

    @property
    def is_versioned(self) -> bool:
        return (self.root / ".git").exists()

    def commit(self, entries: Sequence[str], message: str) -> bool:
        files = [str(self._entry_file(e)) for e in entries]
        cmds: Iterable[list[str]] = (
            [self.config.git_bin, "-C", str(self.root), "add", *files],
            [self.config.git_bin, "-C", str(self.root), "commit", "-m", message],
        )
        for cmd in cmds:
            try:
                result = subprocess.run(
                    cmd, capture_output=True, text=True, check=False,
                )
            except OSError as exc:
                logger.warning("git unavailable, not committing: %s", exc)
                return False
            if result.returncode != 0:
                logger.warning(
                    "git %s failed: %s", cmd[3], (result.stderr or result.stdout).strip()
                )
                return False
        logger.info("Committed to password store git: %s", message)
        return True
