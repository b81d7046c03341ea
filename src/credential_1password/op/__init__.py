"""Integration with the 1Password ``op`` command-line tool."""

from credential_1password.op.runner import OpFunc, OpRunner
from credential_1password.op.signatures import classify, is_auth_failure, is_not_found

__all__ = [
    "OpFunc",
    "OpRunner",
    "classify",
    "is_auth_failure",
    "is_not_found",
]
