"""Helper commands.

Each function performs one command against 1Password for an already
parsed ``RequestContext`` and returns the text to print (possibly
empty). The CLI wraps them in ``with_session_retry``.

Missing items are not errors: ``get`` prints nothing and ``erase`` does
nothing, so callers such as git fall through to their next helper.
"""

from __future__ import annotations

import logging

from credential_1password.engine.context import RequestContext
from credential_1password.errors import EmptyInputError
from credential_1password.inputs import read_lines
from credential_1password.models import CredentialRequest
from credential_1password.op import client

logger = logging.getLogger(__name__)


def _document_file_name(ctx: RequestContext) -> str:
    return f"{ctx.mode.name}-credentials"


def get_credential(ctx: RequestContext) -> str:
    """Look up the stored credential and render it in the mode's output format."""
    request = ctx.request()
    target = ctx.prepare()

    if ctx.strategy.stores_document:
        content = client.get_document(
            ctx.op,
            session_token=target.session_token,
            vault_uuid=target.vault_uuid,
            key=request.key,
        )
        if not content:
            logger.debug("no document stored for %s", request.key)
            return ""
        return content if content.endswith("\n") else content + "\n"

    item = client.get_item(
        ctx.op,
        session_token=target.session_token,
        vault_uuid=target.vault_uuid,
        key=request.key,
    )
    if item is None:
        logger.debug("no item stored for %s", request.key)
        return ""

    assert ctx.strategy.render is not None
    found = CredentialRequest(key=request.key, username=item.username, password=item.password)
    return ctx.strategy.render(found, ctx.parsed.fields)


def store_credential(ctx: RequestContext) -> None:
    """Create or update the credential for the parsed request."""
    request = ctx.request()
    target = ctx.prepare()

    existing = client.get_item(
        ctx.op,
        session_token=target.session_token,
        vault_uuid=target.vault_uuid,
        key=request.key,
    )

    if ctx.strategy.stores_document:
        if existing is None:
            client.create_document(
                ctx.op,
                session_token=target.session_token,
                vault_uuid=target.vault_uuid,
                title=request.key,
                file_name=_document_file_name(ctx),
                content=ctx.parsed.text,
            )
            logger.info("created document %s", request.key)
        else:
            client.edit_document(
                ctx.op,
                session_token=target.session_token,
                vault_uuid=target.vault_uuid,
                key=existing.uuid,
                content=ctx.parsed.text,
                file_name=_document_file_name(ctx),
                title=request.key,
            )
            logger.info("updated document %s", request.key)
        return

    if existing is None:
        client.create_item(
            ctx.op,
            session_token=target.session_token,
            vault_uuid=target.vault_uuid,
            title=request.key,
            username=request.username,
            password=request.password,
        )
        logger.info("created item %s", request.key)
        return

    if existing.username == request.username and existing.password == request.password:
        logger.debug("item %s is already up to date", request.key)
        return

    client.edit_item(
        ctx.op,
        session_token=target.session_token,
        vault_uuid=target.vault_uuid,
        uuid=existing.uuid,
        title=request.key,
        username=request.username,
        password=request.password,
    )
    logger.info("updated item %s", request.key)


def erase_credential(ctx: RequestContext) -> None:
    """Delete the stored credential, if any."""
    request = ctx.request()
    target = ctx.prepare()

    existing = client.get_item(
        ctx.op,
        session_token=target.session_token,
        vault_uuid=target.vault_uuid,
        key=request.key,
    )
    if existing is None:
        logger.debug("nothing to erase for %s", request.key)
        return

    delete = client.delete_document if ctx.strategy.stores_document else client.delete_item
    delete(
        ctx.op,
        session_token=target.session_token,
        vault_uuid=target.vault_uuid,
        key=existing.uuid or request.key,
    )
    logger.info("erased %s", request.key)


def vault(ctx: RequestContext, name: str | None, create: bool) -> str:
    """Get or set the vault credentials are stored in.

    With no *name*, prints the configured vault name, or with *create*
    makes sure that vault exists. With a *name*, switches to it,
    creating it first when *create* is set.
    """
    if name is None:
        current = ctx.vaults.get_vault_name()
        if not create:
            return current + "\n"
        ctx.vaults.set_vault_name(current, allow_create=True)
        return ""
    ctx.vaults.set_vault_name(name, allow_create=create)
    logger.info("using vault %s", name)
    return ""


def session_get(ctx: RequestContext) -> str:
    token = ctx.session.get_token()
    return token + "\n" if token else ""


def session_set(ctx: RequestContext) -> None:
    """Cache a session token read from the first line of stdin."""
    lines = read_lines(ctx.stdin, ctx.stdin_deadline)
    token = lines[0].strip() if lines else ""
    if not token:
        raise EmptyInputError("no session token provided on stdin")
    ctx.session.set_token(token)
