"""Mode registry.

A mode selects the stdin protocol and key-derivation rule for one
invocation. The predefined modes are ``git``, ``docker`` and ``npm``;
any other non-empty, whitespace-free string that does not start with a
predefined mode name (case-insensitively) is a valid generic mode.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from credential_1password.errors import UnknownModeError

APP_SUFFIX = "credential-1password"


class ModeKind(enum.StrEnum):
    GIT = "git"
    DOCKER = "docker"
    NPM = "npm"
    GENERIC = "generic"


PREDEFINED_MODES: tuple[ModeKind, ...] = (ModeKind.GIT, ModeKind.DOCKER, ModeKind.NPM)

_WHITESPACE = (" ", "\t", "\n")


def is_predefined(mode: str) -> bool:
    return mode in {kind.value for kind in PREDEFINED_MODES}


def is_valid_generic(mode: str) -> bool:
    """Check that *mode* is usable as a generic mode name."""
    if not mode or any(ch in mode for ch in _WHITESPACE):
        return False
    lowered = mode.lower()
    return not any(lowered.startswith(kind.value) for kind in PREDEFINED_MODES)


def is_valid(mode: str) -> bool:
    return is_predefined(mode) or is_valid_generic(mode)


@dataclass(frozen=True)
class Mode:
    """A validated mode, fixed for the lifetime of one invocation."""

    name: str
    kind: ModeKind

    @classmethod
    def parse(cls, name: str) -> Mode:
        if is_predefined(name):
            return cls(name=name, kind=ModeKind(name))
        if is_valid_generic(name):
            return cls(name=name, kind=ModeKind.GENERIC)
        raise UnknownModeError(
            f"unknown mode {name!r}: use one of "
            f"{', '.join(kind.value for kind in PREDEFINED_MODES)} "
            f"or a generic name without whitespace that does not start with one of them"
        )

    @property
    def predefined(self) -> bool:
        return self.kind is not ModeKind.GENERIC

    @property
    def app_name(self) -> str:
        """``git-credential-1password`` for predefined modes, else the bare suffix."""
        if self.predefined:
            return f"{self.name}-{APP_SUFFIX}"
        return APP_SUFFIX

    def __str__(self) -> str:
        return self.name
