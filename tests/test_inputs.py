"""Tests for stdin reading and per-mode decoding."""

from __future__ import annotations

import io
import time

import pytest

from credential_1password.errors import (
    EmptyInputError,
    InvalidEncodingError,
    MultipleLinesError,
    StdinTimeoutError,
)
from credential_1password.inputs import (
    decode_json_object,
    decode_key_values,
    parse_input,
    read_lines,
)
from credential_1password.modes import Mode


class SlowStream(io.StringIO):
    """A stdin stand-in that sleeps before every line."""

    def __init__(self, text: str, delay: float) -> None:
        super().__init__(text)
        self.delay = delay

    def readline(self, size: int = -1) -> str:  # type: ignore[override]
        time.sleep(self.delay)
        return super().readline(size)


class UntouchedStream(io.StringIO):
    def readline(self, size: int = -1) -> str:  # type: ignore[override]
        raise AssertionError("stdin should not be read")


def _wait_closed(stream: io.StringIO, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if stream.closed:
            return True
        time.sleep(0.01)
    return stream.closed


# --- read_lines ---


class TestReadLines:
    def test_reads_until_eof(self):
        assert read_lines(io.StringIO("a=1\nb=2")) == ["a=1", "b=2"]

    def test_stops_at_blank_line(self):
        assert read_lines(io.StringIO("a=1\n\nb=2\n")) == ["a=1"]

    def test_strips_crlf(self):
        assert read_lines(io.StringIO("a=1\r\nb=2\r\n")) == ["a=1", "b=2"]

    def test_empty_stream(self):
        assert read_lines(io.StringIO("")) == []

    def test_closes_stream_on_success(self):
        stream = io.StringIO("a=1\n")
        read_lines(stream)
        assert stream.closed

    def test_slow_stream_within_deadline(self):
        stream = SlowStream("a=1\n", delay=0.01)
        assert read_lines(stream, deadline=2.0) == ["a=1"]
        assert stream.closed

    def test_timeout(self):
        stream = SlowStream("a=1\n", delay=0.5)
        with pytest.raises(StdinTimeoutError, match="closed stdin after waiting"):
            read_lines(stream, deadline=0.05)

    def test_closes_stream_on_timeout(self):
        stream = SlowStream("a=1\n", delay=0.5)
        with pytest.raises(StdinTimeoutError):
            read_lines(stream, deadline=0.05)
        assert _wait_closed(stream)


# --- decoders ---


class TestDecoders:
    def test_key_values_split_on_first_equals(self):
        fields = decode_key_values(["password=a=b=c", "host=github.com"])
        assert fields == {"password": "a=b=c", "host": "github.com"}

    def test_key_values_skip_lines_without_equals(self):
        assert decode_key_values(["garbage", "a=1"]) == {"a": "1"}

    def test_json_object_values_stringified(self):
        fields = decode_json_object(['{"ServerURL": "x", "Port": 5000, "Flag": true, "N": null}'])
        assert fields == {"ServerURL": "x", "Port": "5000", "Flag": "true", "N": ""}

    def test_json_invalid(self):
        with pytest.raises(InvalidEncodingError):
            decode_json_object(["{not json"])

    def test_json_not_an_object(self):
        with pytest.raises(InvalidEncodingError, match="list"):
            decode_json_object(['["a"]'])


# --- parse_input ---


class TestParseInput:
    def test_git(self):
        parsed = parse_input(Mode.parse("git"), "get", io.StringIO("protocol=https\nhost=github.com"))
        assert parsed.fields == {"protocol": "https", "host": "github.com"}
        assert parsed.text == "protocol=https\nhost=github.com\n"

    def test_git_empty_is_ok(self):
        parsed = parse_input(Mode.parse("git"), "get", io.StringIO(""))
        assert parsed.fields == {}

    def test_docker_get(self):
        parsed = parse_input(
            Mode.parse("docker"), "get", io.StringIO("https://index.docker.io/v1/"),
        )
        assert parsed.fields == {"ServerURL": "https://index.docker.io/v1/"}

    def test_docker_get_zero_lines(self):
        with pytest.raises(EmptyInputError):
            parse_input(Mode.parse("docker"), "get", io.StringIO(""))

    def test_docker_get_multiple_lines(self):
        with pytest.raises(MultipleLinesError):
            parse_input(
                Mode.parse("docker"), "erase",
                io.StringIO("https://index.docker.io/v1/\nhttps://index.docker.io/v1/"),
            )

    def test_docker_store_json(self):
        payload = '{"ServerURL":"https://index.docker.io/v1/","Username":"u","Secret":"s"}'
        parsed = parse_input(Mode.parse("docker"), "store", io.StringIO(payload))
        assert parsed.fields == {
            "ServerURL": "https://index.docker.io/v1/",
            "Username": "u",
            "Secret": "s",
        }

    def test_docker_store_invalid_json(self):
        with pytest.raises(InvalidEncodingError):
            parse_input(Mode.parse("docker"), "store", io.StringIO("https://index.docker.io/v1/"))

    def test_npm(self):
        parsed = parse_input(
            Mode.parse("npm"), "store",
            io.StringIO("registry=https://registry.npmjs.org/\nemail=a@b.c\n_auth=abc\n"),
        )
        assert parsed.fields["_auth"] == "abc"

    def test_generic_get_skips_reading(self):
        stream = UntouchedStream("a=1\n")
        parsed = parse_input(Mode.parse("pip"), "get", stream)
        assert parsed.fields == {}
        assert parsed.text == "\n"

    def test_generic_store_reads(self):
        parsed = parse_input(Mode.parse("pip"), "store", io.StringIO("index=x\ntoken=y\n"))
        assert parsed.fields == {"index": "x", "token": "y"}
        assert parsed.text == "index=x\ntoken=y\n"

    def test_idempotent(self):
        text = "protocol=https\nhost=github.com\npath=org/repo.git\n"
        first = parse_input(Mode.parse("git"), "store", io.StringIO(text))
        second = parse_input(Mode.parse("git"), "store", io.StringIO(text))
        assert first == second
