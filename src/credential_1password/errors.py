"""Exception hierarchy for the credential helper.

Every failure the helper can surface to its caller derives from
``CredentialHelperError``. The CLI prints the message to stderr and
exits non-zero; nothing else is retried except ``AuthFailureError``.
"""

from __future__ import annotations


class CredentialHelperError(Exception):
    """Base class for all credential helper failures."""


# --- Input and derivation (deterministic, never retried) ---


class UnknownModeError(CredentialHelperError):
    """Raised when ``--mode`` is neither predefined nor a valid generic mode."""


class MissingFieldError(CredentialHelperError):
    """Raised when a required stdin field is absent."""

    def __init__(self, field: str, mode: str = "") -> None:
        self.field = field
        where = f" in {mode} credentials" if mode else ""
        super().__init__(f"{field} is missing{where}")


class InvalidEncodingError(CredentialHelperError):
    """Raised for malformed JSON or URL input."""


class EmptyInputError(CredentialHelperError):
    """Raised when a single-line input protocol receives no lines."""


class MultipleLinesError(CredentialHelperError):
    """Raised when a single-line input protocol receives several lines."""


class StdinTimeoutError(CredentialHelperError):
    """Raised when stdin does not terminate before the read deadline."""

    def __init__(self, deadline: float) -> None:
        self.deadline = deadline
        super().__init__(f"closed stdin after waiting {deadline:g}s")


# --- Secret manager and keystore ---


class VaultNotFoundError(CredentialHelperError):
    """Raised when a named vault does not exist and creation was not requested."""

    def __init__(self, name: str, app: str = "credential-1password") -> None:
        self.name = name
        super().__init__(
            f'no vault found with name: "{name}"\n'
            f"create a new vault with: {app} vault {name} --create"
        )


class ToolError(CredentialHelperError):
    """Raised when the external ``op`` tool fails."""


class AuthFailureError(ToolError):
    """The ``op`` tool reported a missing or invalid session."""


class ItemNotFoundError(ToolError):
    """The ``op`` tool reported that an item or document does not exist."""


class StoreError(CredentialHelperError):
    """Raised when the platform keystore cannot be read or written."""
