"""
tests/test_cli.py -- Admin CLI subcommands (main.py).

Covers hash-password, add-user against a temporary SQLite database, and
decode-token in both output modes.
"""

from __future__ import annotations

import json
import time

import pytest

import main
from auth.passwords import PasswordHasher
from auth.store import SqlCredentialStore
from auth.tokens import TokenCodec
from core.config import get_settings


def test_no_command_prints_help(capsys) -> None:
    assert main.main([]) == 0
    assert "hash-password" in capsys.readouterr().out


def test_hash_password_output_verifies(capsys) -> None:
    assert main.main(["hash-password", "--password", "s3cret"]) == 0
    hashed = capsys.readouterr().out.strip()
    assert PasswordHasher().verify("s3cret", hashed)


def test_hash_password_rejects_overlong_password(capsys) -> None:
    assert main.main(["hash-password", "--password", "é" * 40]) == 1
    err = capsys.readouterr().err
    assert "[!]" in err
    assert "72" in err


class TestAddUser:
    @pytest.fixture
    def db_url(self, tmp_path, monkeypatch) -> str:
        url = f"sqlite:///{tmp_path / 'cli.db'}"
        settings = get_settings().model_copy(update={"credential_db_url": url})
        monkeypatch.setattr(main, "get_settings", lambda: settings)
        return url

    def test_add_user_persists_hash(self, db_url: str) -> None:
        assert main.main(["add-user", "alice", "--password", "wonderland"]) == 0
        store = SqlCredentialStore(db_url)
        try:
            assert PasswordHasher().verify("wonderland", store.lookup("alice").password_hash)
        finally:
            store.close()

    def test_duplicate_user_fails(self, db_url: str, capsys) -> None:
        assert main.main(["add-user", "alice", "--password", "one"]) == 0
        assert main.main(["add-user", "alice", "--password", "two"]) == 1
        assert "already exists" in capsys.readouterr().err

    def test_overlong_password_fails_without_insert(self, db_url: str, capsys) -> None:
        assert main.main(["add-user", "alice", "--password", "é" * 40]) == 1
        assert "[!]" in capsys.readouterr().err
        store = SqlCredentialStore(db_url)
        try:
            assert store.count() == 0
        finally:
            store.close()

    def test_requires_database_url(self, monkeypatch, capsys) -> None:
        settings = get_settings().model_copy(update={"credential_db_url": ""})
        monkeypatch.setattr(main, "get_settings", lambda: settings)
        assert main.main(["add-user", "alice", "--password", "x"]) == 1
        assert "CREDENTIAL_DB_URL" in capsys.readouterr().err


class TestDecodeToken:
    def test_valid_token_json(self, signing_key: str, capsys) -> None:
        token = TokenCodec(secret_key=signing_key).issue("farhan")
        assert main.main(["decode-token", token, "--json"]) == 0
        assert json.loads(capsys.readouterr().out) == {"valid": True, "username": "farhan"}

    def test_expired_token_json(self, signing_key: str, capsys) -> None:
        token = TokenCodec(secret_key=signing_key, ttl_seconds=1, clock=lambda: time.time() - 10).issue("farhan")
        assert main.main(["decode-token", token, "--json"]) == 1
        assert json.loads(capsys.readouterr().out) == {"valid": False, "reason": "expired"}

    def test_garbage_token_text(self, capsys) -> None:
        assert main.main(["decode-token", "garbage"]) == 1
        assert "invalid" in capsys.readouterr().out
