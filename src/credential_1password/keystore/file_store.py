"""YAML-file keystore backend.

Stores all keys as a flat mapping in one file with owner-only
permissions. Every ``set`` writes a temporary file beside it and
replaces the keystore in one step.
"""

from __future__ import annotations

import contextlib
import os
import tempfile
from pathlib import Path

import yaml

from credential_1password.errors import StoreError


class FileKeystore:
    """Keystore backed by a YAML mapping on disk."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str) -> str:
        value = self._read().get(key)
        return "" if value is None else str(value)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        tmp_name = ""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True, mode=0o700)
            # mkstemp files are created 0600
            with tempfile.NamedTemporaryFile(
                mode="w", encoding="utf-8", dir=self._path.parent,
                prefix=f".{self._path.name}.", suffix=".tmp", delete=False,
            ) as tmp:
                tmp_name = tmp.name
                yaml.safe_dump(data, tmp, default_flow_style=False, sort_keys=True)
            os.replace(tmp_name, self._path)
        except OSError as exc:
            if tmp_name:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
            raise StoreError(f"unable to write keystore {self._path}: {exc}") from exc

    def _read(self) -> dict[str, str]:
        if not self._path.is_file():
            return {}
        try:
            data = yaml.safe_load(self._path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise StoreError(f"unable to read keystore {self._path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StoreError(
                f"Expected a YAML mapping in {self._path}, got {type(data).__name__}"
            )
        return data
