"""Session manager: caches and refreshes the ``op`` session token.

A token is usable for 30 minutes after it was issued. It lives in
process memory for the rest of the invocation and in the keystore
(``session-token.date`` / ``session-token.value``) across invocations.

States::

    no token --signin--> valid --30 min / auth failure--> cleared --signin--> valid
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from credential_1password.errors import ToolError
from credential_1password.keystore.base import (
    SESSION_TOKEN_DATE_KEY,
    SESSION_TOKEN_VALUE_KEY,
    Keystore,
)
from credential_1password.models import SessionToken
from credential_1password.op import client
from credential_1password.op.runner import OpFunc

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


class SessionManager:
    """Owns the session token for one invocation."""

    def __init__(
        self,
        keystore: Keystore,
        op: OpFunc,
        clock: Clock = utc_now,
    ) -> None:
        self._keystore = keystore
        self._op = op
        self._clock = clock
        self._token = ""

    @property
    def cached_token(self) -> str:
        """The in-memory token, or ``""`` (never triggers I/O)."""
        return self._token

    def get_token(self) -> str:
        """Return a usable session token, signing in if needed.

        1. A token already held in memory is returned as is.
        2. A keystore token younger than 30 minutes is loaded.
        3. Otherwise the user is asked to sign in.
        """
        if self._token:
            return self._token

        cached = self._load()
        if not cached.is_fresh(self._clock()):
            logger.debug("no fresh session token cached, signing in")
            return self.signin()

        self._token = cached.value
        return self._token

    def signin(self) -> str:
        """Sign in through ``op`` and cache the returned token.

        Failures from ``op`` are raised as is; retrying is left to
        ``with_session_retry``.
        """
        token = client.signin(self._op)
        if not token:
            raise ToolError("op signin returned an empty session token")
        self.set_token(token)
        logger.info("signed in to 1Password")
        return token

    def set_token(self, token: str) -> None:
        """Cache *token* as issued now, in memory and in the keystore."""
        token = token.strip()
        self._token = token
        # the date is written last
        self._keystore.set(SESSION_TOKEN_VALUE_KEY, token)
        self._keystore.set(SESSION_TOKEN_DATE_KEY, self._clock().isoformat())

    def clear_token(self) -> None:
        """Forget the token in memory and in the keystore."""
        self._token = ""
        self._keystore.set(SESSION_TOKEN_DATE_KEY, "")
        self._keystore.set(SESSION_TOKEN_VALUE_KEY, "")
        logger.debug("cleared cached session token")

    def _load(self) -> SessionToken:
        raw_date = self._keystore.get(SESSION_TOKEN_DATE_KEY)
        if not raw_date:
            return SessionToken()
        try:
            issued_at = datetime.fromisoformat(raw_date)
        except ValueError:
            logger.debug("ignoring unparsable session token date %r", raw_date)
            return SessionToken()
        if issued_at.tzinfo is None:
            issued_at = issued_at.replace(tzinfo=UTC)

        token = SessionToken(issued_at=issued_at)
        if not token.issued_within_ttl(self._clock()):
            return token
        return token.model_copy(update={"value": self._keystore.get(SESSION_TOKEN_VALUE_KEY)})
