"""
Key-pair lifecycle -- generate, remove, restore across two stores.

The local key directory and the password store are updated in a fixed
order with no two-phase commit. When a step fails, earlier steps stay
done and the error propagates. Every step is safe to repeat, so the
resume point after any failure is simply re-running the command:

    generate  passphrase -> ssh-keygen -> store keys -> git commit
              (a failed ssh-keygen leaves <name>/passphrase in the store;
               the next generate overwrites it)
    remove    store subtree -> local files
              (a refused ``pass rm`` leaves both stores untouched locally;
               a failed unlink leaves stale local files, re-run rm)
    restore   one entry at a time, never overwriting

There is no locking. The "does not exist yet" checks in generate are
advisory; two concurrent generates for one name race on the store.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Optional, Union

from .config import SshkeyConfig
from .errors import (
    Aborted,
    AlreadyExists,
    LocalFileError,
    StoreNotInitialized,
    ValidationError,
)
from .keygen import KeyGenerator, SshKeygen
from .models import (
    GenerateResult,
    KeyPaths,
    KeyType,
    RemoveResult,
    RestoreOutcome,
    RestoreStatus,
)
from .naming import (
    PASSPHRASE_ENTRY,
    canonical_name,
    entry_to_local_filename,
    is_listed_entry,
    local_key_matcher,
    parse_key_type,
    store_key_matcher,
    to_local_filename,
    validate_name,
)
from .prompts import ConsolePrompter, Prompter
from .store import PassStore, SecretStore

logger = logging.getLogger("pass_sshkey.lifecycle")

DEFAULT_KEY_TYPE = KeyType.RSA
DEFAULT_KEY_BITS = 4096

_BITS_RE = re.compile(r"\d+")


def parse_key_bits(value: Union[int, str]) -> int:
    """Validate a key size. Must be a non-negative integer.

    Raises:
        ValidationError: On anything else.
    """
    if isinstance(value, bool):
        raise ValidationError(f"{value} is an invalid value for keybits (-b) option.")
    if isinstance(value, int):
        if value < 0:
            raise ValidationError(f"{value} is an invalid value for keybits (-b) option.")
        return value
    if not _BITS_RE.fullmatch(str(value).strip()):
        raise ValidationError(f"{value} is an invalid value for keybits (-b) option.")
    return int(value)


def _read_key(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise LocalFileError(f"could not read {path}: {exc.strerror or exc}") from exc


def _write_new(path: Path, data: bytes, mode: int) -> None:
    """Create ``path`` with ``mode``; never replaces an existing file."""
    try:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, mode)
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
    except OSError as exc:
        raise LocalFileError(f"could not write {path}: {exc.strerror or exc}") from exc


class KeyLifecycle:
    """Coordinates key-pairs between the local key directory and the store.

    All collaborators are injected so tests can swap them for fakes.
    """

    def __init__(
        self,
        config: SshkeyConfig,
        store: SecretStore,
        keygen: KeyGenerator,
        prompter: Prompter,
    ):
        self.config = config
        self.store = store
        self.keygen = keygen
        self.prompter = prompter

    @classmethod
    def from_config(
        cls, config: SshkeyConfig, prompter: Optional[Prompter] = None
    ) -> "KeyLifecycle":
        """Wire the real pass, ssh-keygen and terminal adapters."""
        return cls(
            config=config,
            store=PassStore(config),
            keygen=SshKeygen(config),
            prompter=prompter or ConsolePrompter(),
        )

    @property
    def ssh_dir(self) -> Path:
        return self.config.ssh_dir

    def _require_store(self) -> None:
        if not self.store.is_initialized():
            raise StoreNotInitialized(
                f"password store not found in {self.config.store_dir}. "
                "Check if password store was properly initialized."
            )

    def key_paths(self, name: str, key_type: Union[str, KeyType]) -> KeyPaths:
        """Where the key-pair for ``name`` lives in both stores."""
        key_type = parse_key_type(key_type)
        return KeyPaths(
            local_private=self.ssh_dir / to_local_filename(name, key_type),
            local_public=self.ssh_dir / to_local_filename(name, key_type, public=True),
            store_private=f"{name}/{key_type.keyname}",
            store_public=f"{name}/{key_type.keyname}.pub",
            passphrase=f"{name}/{PASSPHRASE_ENTRY}",
        )

    def _check_targets_free(self, paths: KeyPaths) -> None:
        if paths.local_private.exists():
            raise AlreadyExists("private key", str(paths.local_private))
        if paths.local_public.exists():
            raise AlreadyExists("public key", str(paths.local_public))
        if self.store.exists(paths.store_private):
            raise AlreadyExists("private key", self.store.location(paths.store_private))
        if self.store.exists(paths.store_public):
            raise AlreadyExists("public key", self.store.location(paths.store_public))

    # ------------------------------------------------------------------
    # generate
    # ------------------------------------------------------------------

    def generate(
        self,
        name: str,
        key_type: Union[str, KeyType] = DEFAULT_KEY_TYPE,
        bits: Union[int, str] = DEFAULT_KEY_BITS,
        comment: str = "",
        passphrase: Optional[str] = None,
        nopass: bool = False,
        clip: bool = False,
    ) -> GenerateResult:
        """Create a key-pair locally and store it, with its passphrase.

        Args:
            name: Logical name, e.g. ``work/github``.
            key_type: Key algorithm.
            bits: Key size in bits.
            comment: Key comment passed to ssh-keygen.
            passphrase: Custom passphrase. ``""`` prompts for one,
                ``None`` asks pass to generate a random one.
            nopass: Create the private key without a passphrase.
            clip: Copy the passphrase to the clipboard.

        Returns:
            GenerateResult: Paths and public key content.

        Raises:
            ValidationError: Bad key type, size or conflicting flags.
            PathRejected: Empty or traversing name.
            StoreNotInitialized: No password store at the configured root.
            AlreadyExists: Any of the four targets exists.
            KeyGenerationError: ssh-keygen failed.
            LocalFileError: The generated key files could not be read.
            SubprocessFailure: A pass operation failed.
        """
        bits = parse_key_bits(bits)
        key_type = parse_key_type(key_type)
        if passphrase is not None and nopass:
            raise ValidationError("can't use both -p,--pass and -n,--nopass.")
        validate_name(name)
        self._require_store()
        name = canonical_name(name)

        paths = self.key_paths(name, key_type)
        self._check_targets_free(paths)

        passphrase_value = ""
        if nopass:
            logger.info("Creating key without a passphrase ...")
        else:
            passphrase_value = self._acquire_passphrase(name, paths, passphrase, clip)

        logger.info("Generating ssh key-pair ...")
        self.keygen.generate(bits, key_type, paths.local_private, passphrase_value, comment)
        if paths.local_private.is_file() and paths.local_public.is_file():
            logger.info("SSH key-pair saved in %s", self.ssh_dir)

        private_key = _read_key(paths.local_private)
        public_key = _read_key(paths.local_public)
        self.store.insert(paths.store_private, private_key)
        self.store.insert(paths.store_public, public_key)
        logger.info("SSH key-pair saved in password store.")

        committed = False
        if self.store.is_versioned:
            committed = self.store.commit(
                [paths.store_private, paths.store_public],
                f"Add ssh key-pair for {name}",
            )
            if not committed:
                logger.warning("Key-pair for %s stored but not committed to git", name)

        return GenerateResult(
            name=name,
            key_type=key_type,
            paths=paths,
            public_key=public_key.decode("utf-8"),
            has_passphrase=not nopass,
            committed=committed,
        )

    def _acquire_passphrase(
        self, name: str, paths: KeyPaths, passphrase: Optional[str], clip: bool
    ) -> str:
        # The passphrase entry is written before the key exists. A stale
        # one from an earlier failed run is overwritten.
        if passphrase is not None:
            if passphrase == "":
                logger.info("Prompting for custom passphrase ...")
                passphrase = self.prompter.passphrase(name)
            logger.info("Creating key with custom passphrase ...")
            self.store.insert(paths.passphrase, f"{passphrase}\n".encode("utf-8"), force=True)
        else:
            logger.info(
                "Creating key with a random %d length passphrase ...",
                self.config.generated_length,
            )
            self.store.generate(paths.passphrase, self.config.generated_length, force=True)

        if clip:
            self.store.clip(paths.passphrase)
            logger.info(
                "Copied %s to clipboard. Will clear in %d seconds.",
                paths.passphrase,
                self.config.clip_time,
            )
        return self.store.show(paths.passphrase)

    # ------------------------------------------------------------------
    # remove
    # ------------------------------------------------------------------

    def find_local_keys(self, name: str) -> list[Path]:
        """Local key files belonging to ``name`` or any name below it."""
        if not self.ssh_dir.is_dir():
            return []
        matcher = local_key_matcher(name)
        return sorted(
            path for path in self.ssh_dir.rglob("*")
            if path.is_file() and matcher.fullmatch(path.name)
        )

    def remove(self, name: str, force: bool = False) -> RemoveResult:
        """Delete ``name``'s store subtree, then its local key files.

        A name missing from the store is reported, not raised.

        Raises:
            PathRejected: Empty or traversing name.
            SubprocessFailure: ``pass rm`` failed or was declined; local
                files are then left alone.
            Aborted: Local deletion was declined.
        """
        validate_name(name)
        self._require_store()
        name = canonical_name(name)
        result = RemoveResult(name=name)

        if not self.store.has_directory(name):
            self.prompter.notify(f"{name} not found in the Password Store")
            return result

        result.found = True
        self.prompter.notify(f"{name} found in the Password Store")
        self.store.remove(name, recursive=True, force=force)
        result.store_removed = True
        logger.info("Removed %s from the password store", name)

        result.local_files = self.find_local_keys(name)
        if not result.local_files:
            return result

        listing = " ".join(path.name for path in result.local_files)
        self.prompter.notify(f"Keys files in {self.ssh_dir} to be deleted:\n    {listing}")
        if not force and not self.prompter.confirm("Are you sure you would like to delete?"):
            raise Aborted("local key files were not deleted.")

        for path in result.local_files:
            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                logger.error("Could not delete %s: %s", path, exc)
                result.failed.append(path)
                continue
            result.deleted.append(path)
            logger.info("removed '%s'", path)
        return result

    # ------------------------------------------------------------------
    # restore / find
    # ------------------------------------------------------------------

    def restore(self, name: Optional[str] = None) -> list[RestoreOutcome]:
        """Write key entries from the store into the local key directory.

        Existing local files are never overwritten. Passphrases are never
        written locally.

        Args:
            name: Only restore entries under this logical name.

        Returns:
            One RestoreOutcome per matching store entry, in name order.

        Raises:
            LocalFileError: The key directory or a key file could not be
                created.
        """
        if name is not None:
            validate_name(name)
        self._require_store()

        matcher = store_key_matcher(name)
        entries = [e for e in self.store.list_entries() if matcher.fullmatch(e)]
        if entries:
            try:
                self.ssh_dir.mkdir(mode=0o700, parents=True, exist_ok=True)
            except OSError as exc:
                raise LocalFileError(f"could not create {self.ssh_dir}: {exc.strerror or exc}") from exc

        outcomes = []
        for entry in entries:
            target = self.ssh_dir / entry_to_local_filename(entry)
            if target.exists():
                logger.info("%s already exists, skipping", target)
                outcomes.append(RestoreOutcome(
                    entry=entry, target=target,
                    status=RestoreStatus.SKIPPED, reason="already exists",
                ))
                continue

            data = self.store.show_bytes(entry)
            mode = 0o644 if entry.endswith(".pub") else 0o600
            _write_new(target, data, mode)
            logger.info("%s restored to %s", entry, target)
            outcomes.append(RestoreOutcome(
                entry=entry, target=target, status=RestoreStatus.RESTORED,
            ))
        return outcomes

    def find(self) -> list[str]:
        """Store entries holding keys or passphrases."""
        self._require_store()
        return [e for e in self.store.list_entries() if is_listed_entry(e)]
