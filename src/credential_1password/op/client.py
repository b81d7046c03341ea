"""Typed wrappers around ``op`` sub-commands.

Each wrapper checks its required arguments before invoking the tool,
builds the ``op`` 1.x argument list, and parses JSON output into the
pydantic models in ``credential_1password.models``. Lookups return
``None`` when ``op`` reports the resource does not exist.
"""

from __future__ import annotations

from typing import TypeVar

from pydantic import BaseModel, ValidationError

from credential_1password.errors import ItemNotFoundError, ToolError
from credential_1password.models import OpItem, OpVault
from credential_1password.op.runner import OpFunc

ModelT = TypeVar("ModelT", bound=BaseModel)


def _check(action: str, **required: str) -> None:
    for name, value in required.items():
        if not value:
            raise ToolError(f"failed to {action}: missing {name.replace('_', ' ')}")


def _parse(model: type[ModelT], output: str, action: str) -> ModelT:
    try:
        return model.model_validate_json(output)
    except ValidationError as exc:
        raise ToolError(f"failed to {action}: unexpected op output") from exc


# --- Session ---


def signin(op: OpFunc) -> str:
    """Ask the user to sign in and return the raw session token."""
    return op("", ["signin", "--raw"]).strip()


# --- Vaults ---


def get_vault(op: OpFunc, *, session_token: str, name: str) -> OpVault | None:
    _check("get vault", session_token=session_token, vault_name=name)
    try:
        output = op("", ["get", "vault", name, "--session", session_token])
    except ItemNotFoundError:
        return None
    if not output:
        return None
    vault = _parse(OpVault, output, "get vault")
    return vault if vault.uuid else None


def create_vault(
    op: OpFunc,
    *,
    session_token: str,
    name: str,
    description: str,
    allow_admins_to_manage: bool = False,
) -> OpVault:
    _check("create vault", session_token=session_token, title=name, description=description)
    output = op("", [
        "create", "vault", name,
        "--session", session_token,
        "--description", description,
        "--allow-admins-to-manage", "true" if allow_admins_to_manage else "false",
    ])
    vault = _parse(OpVault, output, "create vault")
    if not vault.uuid:
        raise ToolError(f"failed to create vault: no uuid returned for {name!r}")
    return vault


# --- Login items ---


def get_item(op: OpFunc, *, session_token: str, vault_uuid: str, key: str) -> OpItem | None:
    _check("get item", session_token=session_token, vault_uuid=vault_uuid, item_title=key)
    try:
        output = op("", [
            "get", "item", key,
            "--session", session_token,
            "--vault", vault_uuid,
        ])
    except ItemNotFoundError:
        return None
    if not output:
        return None
    return _parse(OpItem, output, "get item")


def create_item(
    op: OpFunc,
    *,
    session_token: str,
    vault_uuid: str,
    title: str,
    username: str,
    password: str,
) -> str:
    _check("create item", session_token=session_token, vault_uuid=vault_uuid, item_title=title)
    return op("", [
        "create", "item", "Login",
        f"title={title}",
        f"username={username}",
        f"password={password}",
        "--session", session_token,
        "--vault", vault_uuid,
    ])


def edit_item(
    op: OpFunc,
    *,
    session_token: str,
    vault_uuid: str,
    uuid: str,
    title: str,
    username: str,
    password: str,
) -> str:
    _check("edit item", session_token=session_token, vault_uuid=vault_uuid, item_uuid=uuid)
    return op("", [
        "edit", "item", uuid,
        f"title={title}",
        f"username={username}",
        f"password={password}",
        "--session", session_token,
        "--vault", vault_uuid,
    ])


def delete_item(op: OpFunc, *, session_token: str, vault_uuid: str, key: str) -> None:
    _check("delete item", session_token=session_token, vault_uuid=vault_uuid, item_title=key)
    op("", [
        "delete", "item", key,
        "--session", session_token,
        "--vault", vault_uuid,
    ])


# --- Documents ---


def get_document(op: OpFunc, *, session_token: str, vault_uuid: str, key: str) -> str | None:
    _check(
        "get document", session_token=session_token, vault_uuid=vault_uuid, document_title=key,
    )
    try:
        return op("", [
            "get", "document", key,
            "--session", session_token,
            "--vault", vault_uuid,
        ])
    except ItemNotFoundError:
        return None


def create_document(
    op: OpFunc,
    *,
    session_token: str,
    vault_uuid: str,
    title: str,
    file_name: str,
    content: str,
) -> str:
    _check(
        "create document",
        session_token=session_token,
        vault_uuid=vault_uuid,
        document_title=title,
        document_file_name=file_name,
    )
    return op(content, [
        "create", "document", "-",
        "--session", session_token,
        "--vault", vault_uuid,
        "--title", title,
        "--file-name", file_name,
    ])


def edit_document(
    op: OpFunc,
    *,
    session_token: str,
    vault_uuid: str,
    key: str,
    content: str,
    file_name: str = "",
    title: str = "",
) -> str:
    _check(
        "edit document", session_token=session_token, vault_uuid=vault_uuid, document_title=key,
    )
    args = [
        "edit", "document", key, "-",
        "--session", session_token,
        "--vault", vault_uuid,
    ]
    if file_name:
        args.extend(["--file-name", file_name])
    if title:
        args.extend(["--title", title])
    return op(content, args)


def delete_document(op: OpFunc, *, session_token: str, vault_uuid: str, key: str) -> None:
    _check(
        "delete document", session_token=session_token, vault_uuid=vault_uuid, document_title=key,
    )
    op("", [
        "delete", "document", key,
        "--session", session_token,
        "--vault", vault_uuid,
    ])
