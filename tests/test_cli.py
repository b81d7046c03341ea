"""Tests for the credential-1password CLI commands."""

from __future__ import annotations

import json
import warnings
from pathlib import Path

import pytest
from click.testing import CliRunner, Result
from fakes import ITEM_MISSING, SIGNED_OUT, VAULT_MISSING, FakeClock, FakeOp, item_json, vault_json

from credential_1password.cli.main import CliServices, cli
from credential_1password.config import CONFIG_ENV_VAR
from credential_1password.keystore import (
    SESSION_TOKEN_DATE_KEY,
    SESSION_TOKEN_VALUE_KEY,
    VAULT_NAME_KEY,
    VAULT_UUID_KEY,
    MemoryKeystore,
)

GIT_REQUEST = "protocol=https\nhost=github.com\n\n"
GIT_STORE = "protocol=https\nhost=github.com\nusername=u\npassword=p\n\n"
DOCKER_SERVER = "https://index.docker.io/v1/"


@pytest.fixture(autouse=True)
def _no_user_config(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    monkeypatch.delenv("CREDENTIAL_1PASSWORD_MODE", raising=False)


@pytest.fixture()
def fake_op() -> FakeOp:
    return FakeOp().on(("get", "vault"), vault_json(uuid="vault-1"))


def _invoke(
    args: list[str],
    op: FakeOp,
    keystore: MemoryKeystore,
    clock: FakeClock,
    stdin: str = "",
    **extra,
) -> Result:
    services = CliServices(op=op, keystore=keystore, clock=clock)
    return CliRunner().invoke(cli, args, input=stdin, obj=services, **extra)


def _signed_in(keystore: MemoryKeystore, clock: FakeClock, token: str = "cached") -> None:
    keystore.values[SESSION_TOKEN_DATE_KEY] = clock.now.isoformat()
    keystore.values[SESSION_TOKEN_VALUE_KEY] = token
    keystore.values[VAULT_NAME_KEY] = "credential-1password"
    keystore.values[VAULT_UUID_KEY] = "vault-1"


# --- get ---


class TestGet:
    def test_git_get(self, fake_op, keystore, clock):
        fake_op.on(("get", "item"), item_json())
        result = _invoke(["get"], fake_op, keystore, clock, GIT_REQUEST)
        assert result.exit_code == 0, result.stderr
        assert result.stdout == "protocol=https\nhost=github.com\nusername=u\npassword=p\n"

        args = fake_op.calls_to("get", "item")[0]
        assert args[2] == "git:https://github.com"
        assert args[args.index("--vault") + 1] == "vault-1"

    def test_first_run_signs_in_and_creates_default_vault(self, keystore, clock):
        op = FakeOp()
        op.on(("get", "vault"), VAULT_MISSING)
        op.on(("create", "vault"), vault_json(uuid="vault-new"))
        op.on(("get", "item"), ITEM_MISSING)

        result = _invoke(["get"], op, keystore, clock, GIT_REQUEST)
        assert result.exit_code == 0, result.stderr
        assert result.stdout == ""
        assert len(op.calls_to("signin")) == 1
        assert len(op.calls_to("create", "vault")) == 1
        assert keystore.values[VAULT_UUID_KEY] == "vault-new"
        assert keystore.values[SESSION_TOKEN_VALUE_KEY] == "token-1"

    def test_cached_session_and_vault_skip_signin(self, fake_op, keystore, clock):
        _signed_in(keystore, clock)
        fake_op.on(("get", "item"), item_json())
        result = _invoke(["get"], fake_op, keystore, clock, GIT_REQUEST)
        assert result.exit_code == 0, result.stderr
        assert fake_op.calls_to("signin") == []
        assert fake_op.calls_to("get", "vault") == []

    def test_docker_get(self, fake_op, keystore, clock):
        fake_op.on(("get", "item"), item_json(username="du", password="ds"))
        result = _invoke(
            ["--mode", "docker", "get"], fake_op, keystore, clock, DOCKER_SERVER + "\n",
        )
        assert result.exit_code == 0, result.stderr
        assert json.loads(result.stdout) == {
            "ServerURL": DOCKER_SERVER, "Username": "du", "Secret": "ds",
        }
        assert fake_op.calls_to("get", "item")[0][2] == "docker:" + DOCKER_SERVER

    def test_docker_get_missing_item(self, fake_op, keystore, clock):
        fake_op.on(("get", "item"), ITEM_MISSING)
        result = _invoke(
            ["--mode", "docker", "get"], fake_op, keystore, clock, DOCKER_SERVER + "\n",
        )
        assert result.exit_code == 0, result.stderr
        assert result.stdout == ""

    def test_docker_empty_stdin(self, fake_op, keystore, clock):
        result = _invoke(["--mode", "docker", "get"], fake_op, keystore, clock, "")
        assert result.exit_code == 1
        assert "cannot parse url from zero lines of input" in result.stderr
        assert fake_op.calls == []

    def test_git_missing_host_fails_before_signin(self, fake_op, keystore, clock):
        result = _invoke(["get"], fake_op, keystore, clock, "protocol=https\n")
        assert result.exit_code == 1
        assert "host is missing in git credentials" in result.stderr
        assert fake_op.calls == []

    def test_mode_from_default_map(self, fake_op, keystore, clock):
        fake_op.on(("get", "item"), ITEM_MISSING)
        result = _invoke(
            ["get"], fake_op, keystore, clock, DOCKER_SERVER + "\n",
            default_map={"mode": "docker"},
        )
        assert result.exit_code == 0, result.stderr
        assert fake_op.calls_to("get", "item")[0][2].startswith("docker:")

    def test_generic_get_prints_document(self, fake_op, keystore, clock):
        fake_op.on(("get", "document"), "index=x\ntoken=y")
        result = _invoke(["--mode", "pip", "get"], fake_op, keystore, clock)
        assert result.exit_code == 0, result.stderr
        assert result.stdout == "index=x\ntoken=y\n"
        assert fake_op.calls_to("get", "document")[0][2] == "pip"


# --- store ---


class TestStore:
    def test_git_store_creates_item(self, fake_op, keystore, clock):
        fake_op.on(("get", "item"), ITEM_MISSING)
        fake_op.on(("create", "item"), "")
        result = _invoke(["store"], fake_op, keystore, clock, GIT_STORE)
        assert result.exit_code == 0, result.stderr
        assert result.stdout == ""

        args = fake_op.calls_to("create", "item")[0]
        assert args[:6] == [
            "create", "item", "Login",
            "title=git:https://github.com", "username=u", "password=p",
        ]

    def test_git_store_updates_changed_item(self, fake_op, keystore, clock):
        fake_op.on(("get", "item"), item_json(uuid="item-9", password="old"))
        fake_op.on(("edit", "item"), "")
        result = _invoke(["store"], fake_op, keystore, clock, GIT_STORE)
        assert result.exit_code == 0, result.stderr
        args = fake_op.calls_to("edit", "item")[0]
        assert args[2] == "item-9"
        assert "password=p" in args
        assert fake_op.calls_to("create", "item") == []

    def test_git_store_unchanged_item(self, fake_op, keystore, clock):
        fake_op.on(("get", "item"), item_json())
        result = _invoke(["store"], fake_op, keystore, clock, GIT_STORE)
        assert result.exit_code == 0, result.stderr
        assert fake_op.calls_to("edit", "item") == []
        assert fake_op.calls_to("create", "item") == []

    def test_git_store_missing_password(self, fake_op, keystore, clock):
        result = _invoke(["store"], fake_op, keystore, clock, GIT_REQUEST)
        assert result.exit_code == 1
        assert "username is missing" in result.stderr

    def test_docker_store_json(self, fake_op, keystore, clock):
        fake_op.on(("get", "item"), ITEM_MISSING)
        fake_op.on(("create", "item"), "")
        payload = json.dumps({"ServerURL": DOCKER_SERVER, "Username": "du", "Secret": "ds"})
        result = _invoke(["-m", "docker", "store"], fake_op, keystore, clock, payload)
        assert result.exit_code == 0, result.stderr
        args = fake_op.calls_to("create", "item")[0]
        assert f"title=docker:{DOCKER_SERVER}" in args
        assert "username=du" in args
        assert "password=ds" in args

    def test_generic_store_creates_document(self, fake_op, keystore, clock):
        fake_op.on(("get", "item"), ITEM_MISSING)
        fake_op.on(("create", "document"), "")
        result = _invoke(["-m", "pip", "store"], fake_op, keystore, clock, "index=x\ntoken=y\n")
        assert result.exit_code == 0, result.stderr

        stdin, args = next(
            (stdin, args) for stdin, args in fake_op.calls if args[:2] == ["create", "document"]
        )
        assert stdin == "index=x\ntoken=y\n"
        assert args[args.index("--title") + 1] == "pip"
        assert args[args.index("--file-name") + 1] == "pip-credentials"

    def test_generic_store_edits_existing_document(self, fake_op, keystore, clock):
        fake_op.on(("get", "item"), item_json(uuid="doc-1"))
        fake_op.on(("edit", "document"), "")
        result = _invoke(["-m", "pip", "store"], fake_op, keystore, clock, "index=z\n")
        assert result.exit_code == 0, result.stderr
        assert fake_op.calls_to("edit", "document")[0][2] == "doc-1"


# --- erase ---


class TestErase:
    def test_git_erase(self, fake_op, keystore, clock):
        fake_op.on(("get", "item"), item_json(uuid="item-3"))
        fake_op.on(("delete", "item"), "")
        result = _invoke(["erase"], fake_op, keystore, clock, GIT_REQUEST)
        assert result.exit_code == 0, result.stderr
        assert fake_op.calls_to("delete", "item")[0][2] == "item-3"

    def test_erase_missing_is_noop(self, fake_op, keystore, clock):
        fake_op.on(("get", "item"), ITEM_MISSING)
        result = _invoke(["erase"], fake_op, keystore, clock, GIT_REQUEST)
        assert result.exit_code == 0, result.stderr
        assert fake_op.calls_to("delete", "item") == []

    def test_generic_erase_deletes_document(self, fake_op, keystore, clock):
        fake_op.on(("get", "item"), item_json(uuid="doc-1"))
        fake_op.on(("delete", "document"), "")
        result = _invoke(["-m", "pip", "erase"], fake_op, keystore, clock)
        assert result.exit_code == 0, result.stderr
        assert fake_op.calls_to("delete", "document")[0][2] == "doc-1"


# --- session retry ---


class TestAuthRetry:
    def test_expired_session_signs_in_once(self, fake_op, keystore, clock):
        _signed_in(keystore, clock, token="stale")
        fake_op.on(("get", "item"), SIGNED_OUT, item_json())

        result = _invoke(["get"], fake_op, keystore, clock, GIT_REQUEST)
        assert result.exit_code == 0, result.stderr
        assert result.stdout.endswith("password=p\n")
        assert len(fake_op.calls_to("signin")) == 1

        sessions = [args[args.index("--session") + 1] for args in fake_op.calls_to("get", "item")]
        assert sessions == ["stale", "token-1"]
        assert keystore.values[SESSION_TOKEN_VALUE_KEY] == "token-1"

    def test_second_failure_is_reported(self, fake_op, keystore, clock):
        _signed_in(keystore, clock, token="stale")
        fake_op.on(("get", "item"), SIGNED_OUT)

        result = _invoke(["get"], fake_op, keystore, clock, GIT_REQUEST)
        assert result.exit_code == 1
        assert "You are not currently signed in" in result.stderr
        assert len(fake_op.calls_to("get", "item")) == 2
        assert len(fake_op.calls_to("signin")) == 1


# --- vault ---


class TestVault:
    def test_prints_default_name(self, fake_op, keystore, clock):
        result = _invoke(["vault"], fake_op, keystore, clock)
        assert result.exit_code == 0, result.stderr
        assert result.stdout == "credential-1password\n"
        assert fake_op.calls == []

    def test_switch_to_existing(self, fake_op, keystore, clock):
        fake_op.on(("get", "vault", "team"), vault_json(uuid="vault-team", name="team"))
        result = _invoke(["vault", "team"], fake_op, keystore, clock)
        assert result.exit_code == 0, result.stderr
        assert keystore.values[VAULT_NAME_KEY] == "team"
        assert keystore.values[VAULT_UUID_KEY] == "vault-team"

    def test_switch_to_missing(self, fake_op, keystore, clock):
        fake_op.on(("get", "vault", "team"), VAULT_MISSING)
        result = _invoke(["vault", "team"], fake_op, keystore, clock)
        assert result.exit_code == 1
        assert 'no vault found with name: "team"' in result.stderr
        assert "git-credential-1password vault team --create" in result.stderr
        assert fake_op.calls_to("create", "vault") == []

    def test_switch_with_create(self, fake_op, keystore, clock):
        fake_op.on(("get", "vault", "team"), VAULT_MISSING)
        fake_op.on(("create", "vault"), vault_json(uuid="vault-team", name="team"))
        result = _invoke(["vault", "team", "--create"], fake_op, keystore, clock)
        assert result.exit_code == 0, result.stderr
        assert keystore.values[VAULT_NAME_KEY] == "team"
        assert len(fake_op.calls_to("create", "vault")) == 1

    def test_config_vault_alias(self, fake_op, keystore, clock):
        keystore.values[VAULT_NAME_KEY] = "team"
        result = _invoke(["config", "vault"], fake_op, keystore, clock)
        assert result.exit_code == 0, result.stderr
        assert result.stdout == "team\n"


# --- session ---


class TestSession:
    def test_signin(self, fake_op, keystore, clock):
        result = _invoke(["signin"], fake_op, keystore, clock)
        assert result.exit_code == 0, result.stderr
        assert keystore.values[SESSION_TOKEN_VALUE_KEY] == "token-1"

    def test_session_set_then_get(self, fake_op, keystore, clock):
        result = _invoke(["session", "set"], fake_op, keystore, clock, "manual-token\n")
        assert result.exit_code == 0, result.stderr
        assert keystore.values[SESSION_TOKEN_VALUE_KEY] == "manual-token"

        result = _invoke(["session", "get"], fake_op, keystore, clock)
        assert result.exit_code == 0, result.stderr
        assert result.stdout == "manual-token\n"
        assert fake_op.calls_to("signin") == []

    def test_session_set_empty(self, fake_op, keystore, clock):
        result = _invoke(["session", "set"], fake_op, keystore, clock, "\n")
        assert result.exit_code == 1
        assert "no session token" in result.stderr

    def test_session_get_signs_in_when_stale(self, fake_op, keystore, clock):
        _signed_in(keystore, clock, token="old")
        clock.advance(minutes=31)
        result = _invoke(["session", "get"], fake_op, keystore, clock)
        assert result.exit_code == 0, result.stderr
        assert result.stdout == "token-1\n"


# --- Root options ---


class TestRootOptions:
    def test_unknown_mode(self, fake_op, keystore, clock):
        result = _invoke(["--mode", "git_", "get"], fake_op, keystore, clock, GIT_REQUEST)
        assert result.exit_code == 1
        assert "unknown mode 'git_'" in result.stderr
        assert fake_op.calls == []

    def test_mode_from_env(self, fake_op, keystore, clock, monkeypatch):
        monkeypatch.setenv("CREDENTIAL_1PASSWORD_MODE", "docker")
        fake_op.on(("get", "item"), ITEM_MISSING)
        result = _invoke(["get"], fake_op, keystore, clock, DOCKER_SERVER + "\n")
        assert result.exit_code == 0, result.stderr
        assert fake_op.calls_to("get", "item")[0][2].startswith("docker:")

    def test_missing_config_file(self, fake_op, keystore, clock, tmp_path: Path):
        result = _invoke(
            ["--config", str(tmp_path / "nope.yaml"), "vault"], fake_op, keystore, clock,
        )
        assert result.exit_code == 1
        assert "Config file not found" in result.stderr

    def test_config_default_vault(self, fake_op, keystore, clock, tmp_path: Path):
        cfg = tmp_path / "config.yaml"
        cfg.write_text("default_vault: personal\n", encoding="utf-8")
        result = _invoke(["--config", str(cfg), "vault"], fake_op, keystore, clock)
        assert result.exit_code == 0, result.stderr
        assert result.stdout == "personal\n"

    def test_unknown_log_level_in_config(self, fake_op, keystore, clock, tmp_path: Path):
        cfg = tmp_path / "config.yaml"
        cfg.write_text("log_level: verbose\n", encoding="utf-8")
        result = _invoke(["--config", str(cfg), "vault"], fake_op, keystore, clock)
        assert result.exit_code == 1
        assert result.exception is None or isinstance(result.exception, SystemExit)
        assert "Unknown log_level 'VERBOSE'" in result.stderr

    def test_reads_process_stdin_without_deprecation(self, fake_op, keystore, clock):
        fake_op.on(("get", "item"), item_json())
        with warnings.catch_warnings():
            warnings.filterwarnings(
                "error", message=".*get_text_stream.*", category=DeprecationWarning,
            )
            result = _invoke(["get"], fake_op, keystore, clock, GIT_REQUEST)
        assert result.exit_code == 0, result.stderr
        assert result.stdout.endswith("password=p\n")

    def test_version(self, fake_op, keystore, clock):
        result = _invoke(["--version"], fake_op, keystore, clock)
        assert result.exit_code == 0
        assert "0.4.0" in result.stdout
