"""Stdin reading and per-mode decoding.

Stdin is read line by line until a blank line or end of stream, on a
background thread bounded by a deadline. The stream is closed on every
exit path. The decoded result is a flat string map that later stages
derive keys and credentials from.
"""

from __future__ import annotations

import contextlib
import json
import logging
import queue
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import IO, Any

from credential_1password.errors import (
    EmptyInputError,
    InvalidEncodingError,
    MultipleLinesError,
    StdinTimeoutError,
)
from credential_1password.modes import Mode, ModeKind

logger = logging.getLogger(__name__)

DEFAULT_STDIN_DEADLINE = 30.0

DOCKER_SERVER_URL = "ServerURL"


@dataclass(frozen=True)
class ParsedInput:
    """Raw stdin text plus the fields decoded from it."""

    text: str = ""
    fields: dict[str, str] = field(default_factory=dict)


# --- Reading ---


def read_lines(stream: IO[str], deadline: float = DEFAULT_STDIN_DEADLINE) -> list[str]:
    """Read lines from *stream* until a blank line or EOF.

    Raises:
        StdinTimeoutError: If no terminal condition is reached within
            *deadline* seconds.
    """
    outcome: queue.Queue[list[str] | BaseException] = queue.Queue(maxsize=1)

    def _scan() -> None:
        lines: list[str] = []
        try:
            while True:
                raw = stream.readline()
                if not raw:
                    break
                line = raw.removesuffix("\n").removesuffix("\r")
                if line == "":
                    break
                lines.append(line)
        except (OSError, ValueError) as exc:
            outcome.put(exc)
            return
        outcome.put(lines)

    reader = threading.Thread(target=_scan, name="stdin-reader", daemon=True)
    finished = False
    try:
        reader.start()
        try:
            result = outcome.get(timeout=deadline)
        except queue.Empty:
            logger.debug("stdin deadline of %ss exceeded", deadline)
            raise StdinTimeoutError(deadline) from None
        finished = True
    finally:
        if finished:
            _close_quietly(stream)
        else:
            # close() waits on the buffer lock held by the pending read
            threading.Thread(target=_close_quietly, args=(stream,), daemon=True).start()

    if isinstance(result, BaseException):
        raise InvalidEncodingError(f"unable to read stdin: {result}") from result
    return result


def _close_quietly(stream: IO[str]) -> None:
    with contextlib.suppress(OSError, ValueError):
        stream.close()


# --- Decoding ---


def decode_key_values(lines: list[str]) -> dict[str, str]:
    """Split each line on its first ``=``; lines without one are skipped."""
    fields: dict[str, str] = {}
    for line in lines:
        name, sep, value = line.partition("=")
        if sep:
            fields[name] = value
    return fields


def decode_json_object(lines: list[str]) -> dict[str, str]:
    """Decode the joined lines as one JSON object with stringified values."""
    try:
        data = json.loads("\n".join(lines))
    except json.JSONDecodeError as exc:
        raise InvalidEncodingError(f"unable to decode JSON input: {exc}") from exc
    if not isinstance(data, dict):
        raise InvalidEncodingError(
            f"expected a JSON object, got {type(data).__name__}"
        )
    return {str(name): _stringify(value) for name, value in data.items()}


def decode_server_url(lines: list[str]) -> dict[str, str]:
    """Decode a single non-blank line as the docker server URL."""
    non_blank = [line.strip() for line in lines if line.strip()]
    if not non_blank:
        raise EmptyInputError("cannot parse url from zero lines of input")
    if len(non_blank) > 1:
        raise MultipleLinesError("cannot parse url from multiple lines of input")
    return {DOCKER_SERVER_URL: non_blank[0]}


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value)


Decoder = Callable[[str, list[str]], dict[str, str]]


def _docker_decoder(command: str, lines: list[str]) -> dict[str, str]:
    if command == "store":
        return decode_json_object(lines)
    return decode_server_url(lines)


DECODERS: dict[ModeKind, Decoder] = {
    ModeKind.GIT: lambda _command, lines: decode_key_values(lines),
    ModeKind.DOCKER: _docker_decoder,
    ModeKind.NPM: lambda _command, lines: decode_key_values(lines),
    ModeKind.GENERIC: lambda _command, lines: decode_key_values(lines),
}


def parse_input(
    mode: Mode,
    command: str,
    stream: IO[str],
    deadline: float = DEFAULT_STDIN_DEADLINE,
) -> ParsedInput:
    """Read and decode stdin for *command* under *mode*.

    Generic modes only read stdin for ``store``; their ``get`` and
    ``erase`` are keyed by the mode name alone.
    """
    if not mode.predefined and command != "store":
        lines: list[str] = []
    else:
        lines = read_lines(stream, deadline)

    fields = DECODERS[mode.kind](command, lines)
    logger.debug(
        "parsed %d line(s) for %s %s: fields=%s",
        len(lines), mode, command, sorted(fields),
    )
    return ParsedInput(text="\n".join(lines) + "\n", fields=fields)
