"""Error taxonomy for key-pair lifecycle operations.

Adapters raise, the coordinator propagates, and only the CLI catches.
Each error carries the process exit status the CLI should use.
"""

from __future__ import annotations

from typing import Optional, Sequence


class SshkeyError(Exception):
    """Base class for every fatal pass-sshkey error."""

    exit_code = 1


class ValidationError(SshkeyError):
    """Invalid key type, key size, argument count or conflicting flags."""

    exit_code = 2


class PathRejected(ValidationError):
    """A logical name is empty or escapes the password store root."""


class ConfigError(SshkeyError):
    """Configuration could not be turned into a valid SshkeyConfig."""


class StoreNotInitialized(SshkeyError):
    """The password store root has no .gpg-id file."""


class AlreadyExists(SshkeyError):
    """A generate target already exists locally or in the store."""

    def __init__(self, kind: str, location: str):
        self.kind = kind
        self.location = location
        super().__init__(f"{kind} {location} already exists.")


class Aborted(SshkeyError):
    """The user declined a confirmation prompt."""


class SubprocessFailure(SshkeyError):
    """An external command (pass, git, ssh-keygen) returned failure."""

    def __init__(
        self,
        message: str,
        command: Optional[Sequence[str]] = None,
        returncode: int = 1,
        stderr: str = "",
    ):
        self.command = list(command or [])
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)

    @property
    def exit_code(self) -> int:  # type: ignore[override]
        return self.returncode or 1


class KeyGenerationError(SubprocessFailure):
    """ssh-keygen could not produce the key-pair."""


class LocalFileError(SshkeyError):
    """A file in the local key directory could not be read or written."""
