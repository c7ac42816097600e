"""
Pydantic models for key types and lifecycle results.

The coordinator returns these; the CLI renders them. Nothing here
touches the disk.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class KeyType(str, Enum):
    """SSH key algorithms accepted by ``ssh-keygen -t``."""

    DSA = "dsa"
    ECDSA = "ecdsa"
    ECDSA_SK = "ecdsa-sk"
    ED25519 = "ed25519"
    ED25519_SK = "ed25519-sk"
    RSA = "rsa"

    @property
    def keyname(self) -> str:
        """Basename of the private key entry, e.g. ``id_ed25519``."""
        return f"id_{self.value}"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


class KeyPaths(BaseModel):
    """The four artifacts a generated key-pair occupies.

    Attributes:
        local_private: Private key in the local key directory.
        local_public: Public key in the local key directory.
        store_private: Private key entry name in the password store.
        store_public: Public key entry name in the password store.
        passphrase: Passphrase entry name in the password store.
    """

    local_private: Path
    local_public: Path
    store_private: str
    store_public: str
    passphrase: str


class GenerateResult(BaseModel):
    """Outcome of a successful generate."""

    name: str
    key_type: KeyType
    paths: KeyPaths
    public_key: str
    has_passphrase: bool = True
    committed: bool = False


class RemoveResult(BaseModel):
    """Outcome of a remove.

    ``found`` is False when the name does not exist in the store; that
    is not an error and nothing is deleted.
    """

    name: str
    found: bool = False
    store_removed: bool = False
    local_files: list[Path] = Field(default_factory=list)
    deleted: list[Path] = Field(default_factory=list)
    failed: list[Path] = Field(default_factory=list)


class RestoreStatus(str, Enum):
    """Per-entry result of a restore."""

    RESTORED = "restored"
    SKIPPED = "skipped"


class RestoreOutcome(BaseModel):
    """What restore did with one password store entry."""

    entry: str
    target: Path
    status: RestoreStatus
    reason: Optional[str] = None
