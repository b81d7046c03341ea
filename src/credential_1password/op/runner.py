"""OpRunner: runs the 1Password ``op`` CLI via subprocess.

The runner is the only place the helper starts a process. It returns
the tool's trimmed output on success and raises the classified
``ToolError`` on a non-zero exit.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Callable

from credential_1password.errors import ToolError
from credential_1password.op.signatures import classify

logger = logging.getLogger(__name__)

OpFunc = Callable[[str, list[str]], str]

# Commands that prompt the user and so must keep stderr on the terminal.
INTERACTIVE_COMMANDS = frozenset({"signin"})


class OpRunner:
    """Callable wrapper around the ``op`` executable.

    ``runner(stdin, args)`` pipes *stdin* to the process when it is
    non-empty; otherwise the process inherits the caller's stdin so an
    interactive sign-in can read the master password.
    """

    def __init__(self, op_path: str = "op") -> None:
        self._op_path = op_path

    @property
    def op_path(self) -> str:
        return self._op_path

    def __call__(self, stdin: str, args: list[str]) -> str:
        command = [self._op_path, *args]
        interactive = bool(args) and args[0] in INTERACTIVE_COMMANDS
        logger.debug("running %s %s", self._op_path, " ".join(args[:2]))

        try:
            result = subprocess.run(
                command,
                input=stdin or None,
                stdout=subprocess.PIPE,
                stderr=None if interactive else subprocess.STDOUT,
                text=True,
                check=False,
            )
        except FileNotFoundError as exc:
            raise ToolError(f"unable to run {self._op_path}: executable not found") from exc
        except OSError as exc:
            raise ToolError(f"unable to run {self._op_path}: {exc}") from exc

        output = (result.stdout or "").strip()
        if result.returncode != 0:
            logger.debug("%s exited with status %d", self._op_path, result.returncode)
            raise classify(output or f"{self._op_path} exited with status {result.returncode}")
        return output
