"""
Configuration for pass-sshkey.

One SshkeyConfig is built per invocation and handed to the lifecycle
coordinator. Values come from, lowest precedence first:

    1. model defaults
    2. an optional YAML file ($PASS_SSHKEY_CONFIG or
       ~/.config/pass-sshkey/config.yaml)
    3. the environment (the same PASSWORD_STORE_* variables pass reads)
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError

logger = logging.getLogger("pass_sshkey.config")

DEFAULT_CONFIG_FILE = "~/.config/pass-sshkey/config.yaml"

# environment variable -> config field
ENV_OVERRIDES = {
    "PASSWORD_STORE_DIR": "store_dir",
    "PASS_SSHKEY_DIR": "ssh_dir",
    "PASSWORD_STORE_GENERATED_LENGTH": "generated_length",
    "PASSWORD_STORE_CHARACTER_SET": "character_set",
    "PASSWORD_STORE_CLIP_TIME": "clip_time",
    "PASS_SSHKEY_PASS_BIN": "pass_bin",
    "PASS_SSHKEY_KEYGEN_BIN": "keygen_bin",
}


class SshkeyConfig(BaseModel):
    """Everything the coordinator and adapters need to know.

    Attributes:
        store_dir: Root of the password store.
        ssh_dir: Local key directory mirrored from the store.
        generated_length: Length of passphrases from ``pass generate``.
        character_set: Character set for generated passphrases.
        clip_time: Seconds before pass clears the clipboard.
        pass_bin: pass executable.
        keygen_bin: ssh-keygen executable.
        git_bin: git executable used to commit new keys.
    """

    model_config = ConfigDict(validate_default=True)

    store_dir: Path = Path("~/.password-store")
    ssh_dir: Path = Path("~/.ssh")
    generated_length: int = Field(default=25, ge=1)
    character_set: str = "[:punct:][:alnum:]"
    clip_time: int = Field(default=45, ge=0)
    pass_bin: str = "pass"
    keygen_bin: str = "ssh-keygen"
    git_bin: str = "git"

    @field_validator("store_dir", "ssh_dir", mode="after")
    @classmethod
    def _expand(cls, value: Path) -> Path:
        return value.expanduser()

    @property
    def gpg_id_file(self) -> Path:
        return self.store_dir / ".gpg-id"

    def subprocess_env(self) -> dict[str, str]:
        """Environment for pass subprocesses, pinned to this config."""
        env = os.environ.copy()
        env["PASSWORD_STORE_DIR"] = str(self.store_dir)
        env["PASSWORD_STORE_GENERATED_LENGTH"] = str(self.generated_length)
        env["PASSWORD_STORE_CHARACTER_SET"] = self.character_set
        env["PASSWORD_STORE_CLIP_TIME"] = str(self.clip_time)
        return env


def _read_config_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Failed to load config %s: %s, using defaults", path, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring config %s: expected a mapping", path)
        return {}
    return data


def load_config(
    config_file: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> SshkeyConfig:
    """Build the configuration for this invocation.

    Args:
        config_file: YAML file to read. Defaults to $PASS_SSHKEY_CONFIG
            or ~/.config/pass-sshkey/config.yaml.
        environ: Environment to read overrides from. Defaults to os.environ.

    Returns:
        SshkeyConfig: The merged configuration.

    Raises:
        ConfigError: If a value fails validation.
    """
    env = os.environ if environ is None else environ
    if config_file is None:
        config_file = Path(env.get("PASS_SSHKEY_CONFIG", DEFAULT_CONFIG_FILE))

    data = _read_config_file(Path(config_file).expanduser())
    for var, field in ENV_OVERRIDES.items():
        value = env.get(var)
        if value:
            data[field] = value

    try:
        return SshkeyConfig(**data)
    except ValidationError as exc:
        raise ConfigError(f"invalid configuration: {exc}") from exc
