"""Session retry: re-authenticate once when ``op`` rejects the session."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

from credential_1password.engine.session import SessionManager
from credential_1password.op.signatures import is_auth_failure

logger = logging.getLogger(__name__)

T = TypeVar("T")


def with_session_retry(
    operation: Callable[[], T],
    session: SessionManager,
    prepare: Callable[[], object] | None = None,
) -> T:
    """Run *operation*, retrying exactly once after an auth failure.

    When the first attempt fails with an error ``op`` uses for a missing
    or invalid session, the cached token is cleared, *prepare* is re-run
    (it usually signs in again and re-resolves the vault) and
    *operation* is called a second time. Any other error, and any error
    from the second attempt, propagates unchanged.
    """
    try:
        return operation()
    except Exception as exc:
        if not is_auth_failure(exc):
            raise
        logger.info("1Password session rejected, signing in again")

    session.clear_token()
    if prepare is not None:
        prepare()
    return operation()
