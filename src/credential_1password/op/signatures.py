"""Classification of ``op`` error output.

``op`` reports every failure as free text on its combined output, so the
helper recognizes the few failures it reacts to by pattern. The patterns
below match ``op`` 1.x, whose errors look like::

    [ERROR] 2021/04/29 14:42:46 Invalid session token

They are brittle by nature: a new ``op`` release that rewords a message
will stop the matching silently, and the error is then reported as a
plain ``ToolError`` instead of triggering a sign-in.
"""

from __future__ import annotations

import re

from credential_1password.errors import AuthFailureError, ItemNotFoundError, ToolError

SIGNATURES_VERSION = "op 1.x"

_ERROR_PREFIX = r"\[ERROR\] \d{4}/\d{2}/\d{2} \d{2}:\d{2}:\d{2} "

AUTH_FAILURE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(
        _ERROR_PREFIX
        + r"You are not currently signed in\. Please run `op signin --help` for instructions"
    ),
    re.compile(_ERROR_PREFIX + r"Invalid session token"),
)

NOT_FOUND_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"doesn't seem to be an? (item|document|vault)"),
    re.compile(r"[Nn]o (item|document|vault) found"),
)


def _message(error: BaseException | str | None) -> str:
    if error is None:
        return ""
    return error if isinstance(error, str) else str(error)


def is_auth_failure(error: BaseException | str | None) -> bool:
    """True if *error* says the session is missing, expired or invalid."""
    if isinstance(error, AuthFailureError):
        return True
    message = _message(error)
    return any(pattern.search(message) for pattern in AUTH_FAILURE_PATTERNS)


def is_not_found(error: BaseException | str | None) -> bool:
    """True if *error* says the requested item, document or vault is absent."""
    if isinstance(error, ItemNotFoundError):
        return True
    message = _message(error)
    return any(pattern.search(message) for pattern in NOT_FOUND_PATTERNS)


def classify(output: str) -> ToolError:
    """Turn failed ``op`` output into the matching ``ToolError`` subclass."""
    if is_auth_failure(output):
        return AuthFailureError(output)
    if is_not_found(output):
        return ItemNotFoundError(output)
    return ToolError(output)
