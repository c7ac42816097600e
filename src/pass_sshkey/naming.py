"""
Logical names, local key filenames, and the path guard.

A logical name such as ``work/github`` addresses a directory in the
password store. Its key-pair is mirrored locally as a flat file:

    work/github  + ed25519  ->  work-github-id_ed25519
                                work-github-id_ed25519.pub

The mapping is not collision-proof: ``a/b-c`` and ``a-b/c`` both
become ``a-b-c-id_<type>``.
"""

from __future__ import annotations

import posixpath
import re
from typing import Optional, Union

from .errors import PathRejected, ValidationError
from .models import KeyType

# Single definition site for the key type alternation.
KEY_TYPE_ALTERNATION = "|".join(re.escape(v) for v in KeyType.values())
KEY_SUFFIX_RE = rf"id_({KEY_TYPE_ALTERNATION})(\.pub)?"

PASSPHRASE_ENTRY = "passphrase"
PRIVATE_KEY_MARKER = "id_"


def parse_key_type(value: Union[str, KeyType]) -> KeyType:
    """Validate a key type against the fixed enumeration.

    Raises:
        ValidationError: If ``value`` is not a known key type.
    """
    if isinstance(value, KeyType):
        return value
    try:
        return KeyType(value)
    except ValueError:
        raise ValidationError(
            f"{value} is an invalid value for keytype (-t) option."
        ) from None


def validate_name(name: str) -> str:
    """Reject names that are empty or could leave the store root.

    Any ``..`` segment is refused, whether or not it would actually
    escape after normalisation, matching pass's own sneaky path check.

    Returns:
        The name unchanged, for chaining.

    Raises:
        PathRejected: On an empty or traversing name.
    """
    if name is None or not name.strip():
        raise PathRejected("one pass-name should be provided.")
    if ".." in name.split("/"):
        raise PathRejected(f"You've attempted to pass a sneaky path: {name}")
    if canonical_name(name) in ("", "."):
        raise PathRejected(f"{name} does not name an entry in the password store.")
    return name


def canonical_name(name: str) -> str:
    """Lexically resolve ``.``/``..`` and drop leading slashes."""
    normalized = posixpath.normpath(name)
    return normalized.lstrip("/")


def local_key_pattern(name: str) -> str:
    """Dash-joined form of a logical name, the prefix of its local files."""
    return canonical_name(name).replace("/", "-")


def to_local_filename(name: str, key_type: Union[str, KeyType], public: bool = False) -> str:
    """Map a logical name and key type to its local key filename.

    Pure and deterministic.

    Args:
        name: Logical name, e.g. ``work/github``.
        key_type: Key algorithm.
        public: Return the ``.pub`` variant.

    Returns:
        str: e.g. ``work-github-id_rsa`` or ``work-github-id_rsa.pub``.
    """
    key_type = parse_key_type(key_type)
    filename = f"{local_key_pattern(name)}-{key_type.keyname}"
    return filename + ".pub" if public else filename


def local_key_matcher(name: str) -> re.Pattern[str]:
    """Regex matching basenames of local key files created under ``name``.

    Matches ``<pattern>.*-id_(<types>)(\\.pub)?`` so keys of nested
    names (``work-github-...`` for ``work``) are included.
    """
    return re.compile(rf"{re.escape(local_key_pattern(name))}.*-{KEY_SUFFIX_RE}")


def store_key_matcher(prefix: Optional[str] = None) -> re.Pattern[str]:
    """Regex matching password store entry names that hold key material.

    Entry names are relative to the store root without the ``.gpg``
    extension. Passphrase entries never match.

    Args:
        prefix: Only match entries under ``<prefix>/``.
    """
    if prefix:
        head = re.escape(canonical_name(prefix)) + "/(?:.*/)?"
    else:
        head = "(?:.*/)?"
    return re.compile(rf"{head}{KEY_SUFFIX_RE}")


def entry_to_local_filename(entry: str) -> str:
    """``work/github/id_rsa.pub`` -> ``work-github-id_rsa.pub``."""
    return entry.replace("/", "-")


def is_listed_entry(entry: str) -> bool:
    """Entries shown by ``find``: private keys, public keys, passphrases."""
    return PRIVATE_KEY_MARKER in entry or PASSPHRASE_ENTRY in entry
