"""
tests/conftest.py -- Shared test fixtures for TokenGate.

This module provides:
  - hasher / codec / store: fast unit-level building blocks (bcrypt cost 4)
  - _patch_lifespan(): wires test auth components into app.state, bypassing
    the real startup that reads SEED_USERS / CREDENTIAL_DB_URL
  - api_client: TestClient over the real app with user farhan/123 seeded

DEBUG and SECRET_KEY must be set before any auth/core import so every
Settings instance (including ones rebuilt after get_settings.cache_clear())
signs with the same key.
LOGIN_RATE_LIMIT is relaxed so the many logins in the suite never hit 429, and
BCRYPT_ROUNDS drops to the minimum cost so CLI hashing stays fast.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: set before any auth/core import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("SECRET_KEY", "test-signing-key-0123456789abcdef0123456789abcdef")
os.environ.setdefault("LOGIN_RATE_LIMIT", "1000/minute")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.bootstrap import AuthComponents, build_auth_components
from auth.models import Credential
from auth.passwords import PasswordHasher
from auth.store import InMemoryCredentialStore
from auth.tokens import TokenCodec
from core.config import get_settings

TEST_SECRET = os.environ["SECRET_KEY"]

# bcrypt's minimum cost -- keeps the suite fast.
FAST_ROUNDS = 4


class FakeClock:
    """Settable clock for TokenCodec expiry tests."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ---------------------------------------------------------------------------
# Unit-level fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=FAST_ROUNDS)


@pytest.fixture(scope="session")
def farhan_credential(hasher: PasswordHasher) -> Credential:
    return Credential(username="farhan", password_hash=hasher.hash("123"))


@pytest.fixture
def store(farhan_credential: Credential) -> InMemoryCredentialStore:
    return InMemoryCredentialStore([farhan_credential])


@pytest.fixture(scope="session")
def signing_key() -> str:
    return TEST_SECRET


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def codec(clock: FakeClock, signing_key: str) -> TokenCodec:
    return TokenCodec(secret_key=signing_key, ttl_seconds=3600, clock=clock)


# ---------------------------------------------------------------------------
# Integration fixtures
# ---------------------------------------------------------------------------


def _patch_lifespan(components: AuthComponents):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.auth_components = components
        yield

    return test_lifespan


@pytest.fixture(scope="module")
def auth_components(farhan_credential: Credential) -> AuthComponents:
    settings = get_settings().model_copy(update={"bcrypt_rounds": FAST_ROUNDS})
    return build_auth_components(settings, store=InMemoryCredentialStore([farhan_credential]))


@pytest.fixture(scope="module")
def api_client(auth_components: AuthComponents) -> Generator[TestClient, None, None]:
    """Yield a TestClient for the real app with farhan/123 in the credential store.

    Tests hit the real middleware stack and route handlers; only the lifespan
    is swapped so no environment-driven seeding happens.
    """
    app.router.lifespan_context = _patch_lifespan(auth_components)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client


@pytest.fixture
def login_token(api_client: TestClient) -> str:
    resp = api_client.post("/login", json={"username": "farhan", "password": "123"})
    assert resp.status_code == 200, resp.text
    return resp.text
