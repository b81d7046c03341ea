"""In-memory keystore: for tests and dry runs.

Optionally fails every ``get`` or ``set`` with an injected error so that
callers' handling of keystore outages can be exercised.
"""

from __future__ import annotations

from credential_1password.errors import StoreError


class MemoryKeystore:
    """Keystore backed by a plain dict."""

    def __init__(
        self,
        values: dict[str, str] | None = None,
        get_error: StoreError | None = None,
        set_error: StoreError | None = None,
    ) -> None:
        self.values: dict[str, str] = dict(values or {})
        self.get_error = get_error
        self.set_error = set_error

    def get(self, key: str) -> str:
        if self.get_error is not None:
            raise self.get_error
        return self.values.get(key, "")

    def set(self, key: str, value: str) -> None:
        if self.set_error is not None:
            raise self.set_error
        self.values[key] = value
