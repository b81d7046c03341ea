"""Config file loading for credential-1password.

Looks for ``config.yaml`` in ``~/.credential-1password/`` (or the path in
``$CREDENTIAL_1PASSWORD_CONFIG``), parses it, and resolves relative
paths against the config file's location.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path

import yaml

CONFIG_FILENAME = "config.yaml"
CONFIG_DIRNAME = ".credential-1password"
CONFIG_ENV_VAR = "CREDENTIAL_1PASSWORD_CONFIG"

DEFAULT_VAULT_NAME = "credential-1password"
KEYSTORE_TYPES = ("keyring", "file", "memory")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(ValueError):
    """Raised for an unreadable or invalid config file."""


def default_config_dir() -> Path:
    return Path.home() / CONFIG_DIRNAME


@dataclass(frozen=True)
class HelperConfig:
    """Parsed credential-1password configuration."""

    config_path: Path | None = None
    op_path: str = "op"
    stdin_deadline: float = 30.0
    default_vault: str = DEFAULT_VAULT_NAME
    keystore: str = "keyring"
    keystore_path: Path = Path("~") / CONFIG_DIRNAME / "keystore.yaml"
    log_level: str = "WARNING"


def find_config() -> Path | None:
    """Return the config file to use, or ``None``.

    ``$CREDENTIAL_1PASSWORD_CONFIG`` wins over the per-user default.
    """
    from_env = os.environ.get(CONFIG_ENV_VAR)
    if from_env:
        return Path(from_env).expanduser()
    candidate = default_config_dir() / CONFIG_FILENAME
    if candidate.is_file():
        return candidate
    return None


def load_config(path: str | Path | None = None) -> HelperConfig:
    """Load the helper config.

    Resolution order:

    1. Explicit *path* (error if it doesn't exist).
    2. ``$CREDENTIAL_1PASSWORD_CONFIG`` (error if it doesn't exist).
    3. ``~/.credential-1password/config.yaml`` when present.
    4. Return an empty ``HelperConfig`` (all defaults).
    """
    config_path = Path(path).expanduser() if path is not None else find_config()

    if config_path is None:
        return _with_expanded_paths(HelperConfig())

    config_path = config_path.resolve()
    if not config_path.is_file():
        msg = f"Config file not found: {config_path}"
        raise FileNotFoundError(msg)

    return _parse_config(config_path)


def _parse_config(config_path: Path) -> HelperConfig:
    """Read and validate a YAML config file."""
    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc

    if not isinstance(data, dict):
        msg = f"Expected a YAML mapping in {config_path}, got {type(data).__name__}"
        raise ConfigError(msg)

    defaults = HelperConfig()

    try:
        deadline = float(data.get("stdin_deadline", defaults.stdin_deadline))
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"stdin_deadline must be a number in {config_path}") from exc
    if deadline <= 0:
        raise ConfigError(f"stdin_deadline must be positive in {config_path}")

    keystore = str(data.get("keystore", defaults.keystore))
    if keystore not in KEYSTORE_TYPES:
        raise ConfigError(
            f"Unknown keystore {keystore!r} in {config_path}. "
            f"Available: {', '.join(KEYSTORE_TYPES)}."
        )

    keystore_path = defaults.keystore_path
    if data.get("keystore_path") is not None:
        keystore_path = config_path.parent / Path(str(data["keystore_path"])).expanduser()

    log_level = str(data.get("log_level", defaults.log_level)).upper()
    if log_level not in LOG_LEVELS:
        raise ConfigError(
            f"Unknown log_level {log_level!r} in {config_path}. "
            f"Available: {', '.join(LOG_LEVELS)}."
        )

    return _with_expanded_paths(HelperConfig(
        config_path=config_path,
        op_path=str(data.get("op_path", defaults.op_path)),
        stdin_deadline=deadline,
        default_vault=str(data.get("default_vault") or defaults.default_vault),
        keystore=keystore,
        keystore_path=keystore_path,
        log_level=log_level,
    ))


def _with_expanded_paths(config: HelperConfig) -> HelperConfig:
    return replace(config, keystore_path=config.keystore_path.expanduser())
