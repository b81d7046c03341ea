"""Data models for the credential helper.

Defines the schemas for:
- Credential requests (what the caller asked for)
- Session tokens (how long an ``op`` sign-in stays usable)
- ``op`` JSON output (vaults and items)
"""

from __future__ import annotations

from datetime import datetime, timedelta

from pydantic import BaseModel, ConfigDict, Field

SESSION_TTL = timedelta(minutes=30)


# --- Requests ---


class CredentialRequest(BaseModel):
    """A lookup derived from one invocation's stdin.

    ``key`` is the canonical lookup key. It never contains user-info.
    """

    model_config = ConfigDict(frozen=True)

    key: str
    username: str = ""
    password: str = ""


# --- Session ---


class SessionToken(BaseModel):
    """A cached ``op`` session token and the time it was issued."""

    value: str = ""
    issued_at: datetime | None = None

    def issued_within_ttl(self, now: datetime) -> bool:
        if self.issued_at is None:
            return False
        return timedelta(0) <= now - self.issued_at < SESSION_TTL

    def is_fresh(self, now: datetime) -> bool:
        return bool(self.value) and self.issued_within_ttl(now)


# --- op output ---


class OpField(BaseModel):
    """A single field inside an item's ``details.fields`` list."""

    model_config = ConfigDict(extra="ignore")

    designation: str = ""
    name: str = ""
    value: str = ""


class OpItemDetails(BaseModel):
    model_config = ConfigDict(extra="ignore")

    fields: list[OpField] = Field(default_factory=list)


class OpItem(BaseModel):
    """Subset of ``op get item`` output the helper relies on."""

    model_config = ConfigDict(extra="ignore")

    uuid: str = ""
    details: OpItemDetails = Field(default_factory=OpItemDetails)

    def field_value(self, designation: str) -> str:
        for item_field in self.details.fields:
            if item_field.designation == designation:
                return item_field.value
        return ""

    @property
    def username(self) -> str:
        return self.field_value("username")

    @property
    def password(self) -> str:
        return self.field_value("password")


class OpVault(BaseModel):
    """Subset of ``op get vault`` / ``op create vault`` output."""

    model_config = ConfigDict(extra="ignore")

    uuid: str = ""
    name: str = ""
