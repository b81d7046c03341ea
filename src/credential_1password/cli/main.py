"""credential-1password CLI: credential helper backed by 1Password.

Commands:
    get             Print the stored credential for the stdin request
    store           Create or update the credential from stdin
    erase           Delete the credential for the stdin request
    vault           Get/set the vault credentials are stored in
    config vault    Alias of ``vault``
    signin          Sign in to 1Password and cache the session token
    session get     Print the current session token
    session set     Cache a session token read from stdin
"""

from __future__ import annotations

import functools
import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, NoReturn, TypeVar

import click

from credential_1password import __version__, commands
from credential_1password.config import ConfigError, HelperConfig, load_config
from credential_1password.engine.context import RequestContext
from credential_1password.engine.retry import with_session_retry
from credential_1password.engine.session import Clock, utc_now
from credential_1password.errors import CredentialHelperError
from credential_1password.keystore.base import Keystore, build_keystore
from credential_1password.modes import Mode, ModeKind
from credential_1password.op.runner import OpFunc, OpRunner

F = TypeVar("F", bound=Callable[..., Any])

MODE_ENV_VAR = "CREDENTIAL_1PASSWORD_MODE"
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


@dataclass
class CliServices:
    """Collaborators the CLI would otherwise build from config.

    Pass an instance as ``obj`` to substitute a fake ``op`` or keystore.
    """

    op: OpFunc | None = None
    keystore: Keystore | None = None
    clock: Clock = utc_now


def _fail(message: str) -> NoReturn:
    click.echo(message, err=True)
    sys.exit(1)


def _handle_errors(fn: F) -> F:
    """Print helper errors to stderr and exit 1."""

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return fn(*args, **kwargs)
        except CredentialHelperError as exc:
            _fail(str(exc))

    return wrapper  # type: ignore[return-value]


def _configure_logging(level: str) -> None:
    logging.basicConfig(stream=sys.stderr, format=LOG_FORMAT)
    logging.getLogger("credential_1password").setLevel(level)


def _build_context(
    services: CliServices,
    cfg: HelperConfig,
    mode: Mode,
) -> RequestContext:
    return RequestContext(
        mode=mode,
        op=services.op or OpRunner(cfg.op_path),
        keystore=services.keystore or build_keystore(cfg),
        stdin=sys.stdin,
        stdin_deadline=cfg.stdin_deadline,
        default_vault=cfg.default_vault,
        clock=services.clock,
    )


def _request_ctx() -> RequestContext:
    return click.get_current_context().find_object(RequestContext)


def _run_with_input(command: str, fn: Callable[[RequestContext], str | None]) -> None:
    """Parse stdin once, then run *fn* behind the session retry."""
    ctx = _request_ctx()
    ctx.parse_input(command)
    ctx.request()
    with_session_retry(ctx.prepare, ctx.session)
    output = with_session_retry(lambda: fn(ctx), ctx.session, prepare=ctx.prepare)
    if output:
        click.echo(output, nl=False)


# --- Root group ---


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--mode", "-m", default=ModeKind.GIT.value, envvar=MODE_ENV_VAR, show_default=True,
    help="Input protocol: git, docker, npm, or a generic name",
)
@click.option(
    "--config", "config_path", default=None,
    help="Path to config.yaml (default: ~/.credential-1password/config.yaml)",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr")
@click.pass_context
def cli(click_ctx: click.Context, mode: str, config_path: str | None, verbose: bool) -> None:
    """credential-1password: a git/docker/npm credential helper backed by 1Password."""
    services = click_ctx.obj if isinstance(click_ctx.obj, CliServices) else CliServices()

    try:
        cfg = load_config(config_path)
    except (ConfigError, FileNotFoundError) as exc:
        _fail(f"Error: {exc}")
    _configure_logging("DEBUG" if verbose else cfg.log_level)

    try:
        parsed_mode = Mode.parse(mode)
        click_ctx.obj = _build_context(services, cfg, parsed_mode)
    except CredentialHelperError as exc:
        _fail(str(exc))


# --- Credential commands ---


@cli.command()
@_handle_errors
def get() -> None:
    """Print the credential matching the request on stdin."""
    _run_with_input("get", commands.get_credential)


@cli.command()
@_handle_errors
def store() -> None:
    """Store the credential described on stdin."""
    _run_with_input("store", commands.store_credential)


@cli.command()
@_handle_errors
def erase() -> None:
    """Erase the credential matching the request on stdin."""
    _run_with_input("erase", commands.erase_credential)


# --- Vault ---


def _vault(name: str | None, create: bool) -> None:
    ctx = _request_ctx()
    output = with_session_retry(lambda: commands.vault(ctx, name, create), ctx.session)
    if output:
        click.echo(output, nl=False)


@cli.command("vault")
@click.argument("name", required=False)
@click.option("--create", "-c", is_flag=True, help="Create the vault if it does not exist")
@_handle_errors
def vault_cmd(name: str | None, create: bool) -> None:
    """Get/set the vault credentials are stored in."""
    _vault(name, create)


@cli.group()
def config() -> None:
    """Helper configuration commands."""


@config.command("vault")
@click.argument("name", required=False)
@click.option("--create", "-c", is_flag=True, help="Create the vault if it does not exist")
@_handle_errors
def config_vault(name: str | None, create: bool) -> None:
    """Get/set the vault credentials are stored in."""
    _vault(name, create)


# --- Session ---


@cli.command()
@_handle_errors
def signin() -> None:
    """Sign in to 1Password and cache the session token.

    Other commands also prompt for the master password when needed, but
    only after reading their credential input from stdin.
    """
    _request_ctx().session.signin()


@cli.group()
def session() -> None:
    """Get/set the cached session token."""


@session.command("get")
@_handle_errors
def session_get() -> None:
    """Print the current session token, signing in if none is cached."""
    ctx = _request_ctx()
    click.echo(commands.session_get(ctx), nl=False)


@session.command("set")
@_handle_errors
def session_set() -> None:
    """Cache a session token read from stdin."""
    commands.session_set(_request_ctx())


# --- Entry points ---


def main() -> None:
    cli(prog_name="credential-1password")


def git_main() -> None:
    cli(prog_name="git-credential-1password", default_map={"mode": ModeKind.GIT.value})


def docker_main() -> None:
    cli(prog_name="docker-credential-1password", default_map={"mode": ModeKind.DOCKER.value})


def npm_main() -> None:
    cli(prog_name="npm-credential-1password", default_map={"mode": ModeKind.NPM.value})
