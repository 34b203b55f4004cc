"""
tests/test_config.py -- Settings validation and environment parsing.

Settings are built with _env_file=None so a developer's local .env never
leaks into the assertions.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from core.config import Settings, get_settings


@pytest.fixture(autouse=True)
def _fresh_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_debug_mode_generates_secret_key() -> None:
    settings = Settings(_env_file=None, debug=True, secret_key="")
    assert len(settings.secret_key) == 64


def test_production_requires_secret_key() -> None:
    with pytest.raises(ValidationError, match="SECRET_KEY is required"):
        Settings(_env_file=None, debug=False, secret_key="")


def test_short_secret_key_rejected() -> None:
    with pytest.raises(ValidationError, match="at least 32 characters"):
        Settings(_env_file=None, secret_key="too-short")


@pytest.mark.parametrize("ttl", [0, -5])
def test_non_positive_ttl_rejected(ttl: int) -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, token_expire_seconds=ttl)


@pytest.mark.parametrize("rounds", [3, 32])
def test_bcrypt_rounds_out_of_range(rounds: int) -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, bcrypt_rounds=rounds)


def test_access_rules_normalized() -> None:
    settings = Settings(_env_file=None, access_rules={"/x": " OPEN ", "/y": "Authenticated"})
    assert settings.access_rules == {"/x": "open", "/y": "authenticated"}


def test_unknown_access_requirement_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, access_rules={"/x": "admins-only"})


def test_unknown_default_requirement_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, default_requirement="sometimes")


def test_default_access_rules() -> None:
    rules = Settings(_env_file=None).access_rules
    assert rules["/login"] == "open"
    assert rules["/health"] == "open"
    assert rules["/hello"] == "authenticated"


def test_json_fields_read_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("SEED_USERS", '{"alice": "$2b$04$hash"}')
    monkeypatch.setenv("ACCESS_RULES", '{"/public/*": "open", "/*": "authenticated"}')
    monkeypatch.setenv("TOKEN_EXPIRE_SECONDS", "120")
    settings = get_settings()
    assert settings.seed_users == {"alice": "$2b$04$hash"}
    assert list(settings.access_rules) == ["/public/*", "/*"]
    assert settings.token_expire_seconds == 120


def test_get_settings_is_cached() -> None:
    assert get_settings() is get_settings()
