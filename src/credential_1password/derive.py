"""Key and credential derivation per mode.

Each mode gets a ``ModeStrategy``: how to derive its key, username and
password from parsed fields, and how to render a stored credential back
to the caller on ``get``. Any URL used as a key has its user-info
removed first, so a key never carries a secret.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from urllib.parse import SplitResult, urlsplit, urlunsplit

from credential_1password.errors import InvalidEncodingError, MissingFieldError
from credential_1password.inputs import DOCKER_SERVER_URL
from credential_1password.models import CredentialRequest
from credential_1password.modes import Mode, ModeKind

Fields = Mapping[str, str]


# --- URL helpers ---


def split_url(raw: str) -> SplitResult:
    try:
        return urlsplit(raw)
    except ValueError as exc:
        raise InvalidEncodingError(f"unable to parse url {raw!r}: {exc}") from exc


def scrub_url(url: SplitResult) -> str:
    """Render *url* without its ``user:password@`` component."""
    host = url.netloc.rpartition("@")[2]
    return urlunsplit((url.scheme, host, url.path, url.query, url.fragment))


def _require(fields: Fields, name: str, mode: ModeKind) -> str:
    if name not in fields:
        raise MissingFieldError(name, mode.value)
    return fields[name]


# --- git ---


def _git_url(fields: Fields) -> SplitResult:
    if "url" in fields:
        return split_url(fields["url"])
    host = _require(fields, "host", ModeKind.GIT)
    protocol = _require(fields, "protocol", ModeKind.GIT)
    return SplitResult(protocol, host, fields.get("path", ""), "", "")


def git_key(fields: Fields) -> str:
    return scrub_url(_git_url(fields))


def git_username(fields: Fields) -> str:
    if "url" in fields:
        username = split_url(fields["url"]).username
        if username:
            return username
    return _require(fields, "username", ModeKind.GIT)


def git_password(fields: Fields) -> str:
    if "url" in fields:
        password = split_url(fields["url"]).password
        if password:
            return password
    return _require(fields, "password", ModeKind.GIT)


def render_git(request: CredentialRequest, fields: Fields) -> str:
    url = split_url(git_key(fields))
    lines = [
        ("protocol", url.scheme),
        ("host", url.netloc),
        ("path", url.path.lstrip("/")),
        ("username", request.username),
        ("password", request.password),
    ]
    return "".join(f"{name}={value}\n" for name, value in lines if value)


# --- docker ---


def docker_key(fields: Fields) -> str:
    return scrub_url(split_url(_require(fields, DOCKER_SERVER_URL, ModeKind.DOCKER)))


def docker_username(fields: Fields) -> str:
    return _require(fields, "Username", ModeKind.DOCKER)


def docker_password(fields: Fields) -> str:
    return _require(fields, "Secret", ModeKind.DOCKER)


def render_docker(request: CredentialRequest, fields: Fields) -> str:
    payload = {
        "ServerURL": docker_key(fields),
        "Username": request.username,
        "Secret": request.password,
    }
    return json.dumps(payload, separators=(",", ":")) + "\n"


# --- npm ---


def npm_key(fields: Fields) -> str:
    return scrub_url(split_url(_require(fields, "registry", ModeKind.NPM)))


def npm_username(fields: Fields) -> str:
    return _require(fields, "email", ModeKind.NPM)


def npm_password(fields: Fields) -> str:
    return _require(fields, "_auth", ModeKind.NPM)


def render_npm(request: CredentialRequest, fields: Fields) -> str:
    lines = [
        ("registry", npm_key(fields)),
        ("always-auth", "true"),
        ("email", request.username),
        ("_auth", request.password),
    ]
    return "".join(f"{name}={value}\n" for name, value in lines if value)


# --- Strategy table ---


@dataclass(frozen=True)
class ModeStrategy:
    """How one mode derives and renders credentials."""

    key: Callable[[Mode, Fields], str]
    username: Callable[[Fields], str]
    password: Callable[[Fields], str]
    render: Callable[[CredentialRequest, Fields], str] | None = None
    stores_document: bool = False


STRATEGIES: dict[ModeKind, ModeStrategy] = {
    ModeKind.GIT: ModeStrategy(
        key=lambda _mode, fields: git_key(fields),
        username=git_username,
        password=git_password,
        render=render_git,
    ),
    ModeKind.DOCKER: ModeStrategy(
        key=lambda _mode, fields: docker_key(fields),
        username=docker_username,
        password=docker_password,
        render=render_docker,
    ),
    ModeKind.NPM: ModeStrategy(
        key=lambda _mode, fields: npm_key(fields),
        username=npm_username,
        password=npm_password,
        render=render_npm,
    ),
    ModeKind.GENERIC: ModeStrategy(
        key=lambda mode, _fields: mode.name,
        username=lambda fields: fields.get("username", ""),
        password=lambda fields: fields.get("password", ""),
        stores_document=True,
    ),
}


# --- Public API ---


def derive_key(mode: Mode, fields: Fields) -> str:
    """Derive the mode-specific key (a scrubbed URL, or the generic mode name)."""
    return STRATEGIES[mode.kind].key(mode, fields)


def derive_username(mode: Mode, fields: Fields) -> str:
    return STRATEGIES[mode.kind].username(fields)


def derive_password(mode: Mode, fields: Fields) -> str:
    return STRATEGIES[mode.kind].password(fields)


def lookup_key(mode: Mode, fields: Fields) -> str:
    """Derive the key secrets are titled with in the vault.

    Predefined modes are namespaced as ``{mode}:{key}`` so that several
    modes can share one vault.
    """
    key = derive_key(mode, fields)
    if not mode.predefined:
        return key
    return f"{mode.name}:{key}"


def derive_request(mode: Mode, fields: Fields, *, with_secret: bool = False) -> CredentialRequest:
    """Build the CredentialRequest for one invocation.

    Username and password are only derived when *with_secret* is set
    (``store``); ``get`` and ``erase`` identify by key alone.
    """
    key = lookup_key(mode, fields)
    if not with_secret:
        return CredentialRequest(key=key)
    return CredentialRequest(
        key=key,
        username=derive_username(mode, fields),
        password=derive_password(mode, fields),
    )
