"""
auth/bootstrap.py -- Build the authentication components from Settings.

Used by the API lifespan and by the CLI so both wire the same objects the
same way. This is the only auth module that reads configuration; everything
else takes its collaborators as constructor arguments.

Store selection:
  CREDENTIAL_DB_URL empty  -> InMemoryCredentialStore built from SEED_USERS.
  CREDENTIAL_DB_URL set    -> SqlCredentialStore; SEED_USERS entries that are
                              not already present are inserted (bootstrap path).

Layer rule: no imports from api/. Import from core/ is allowed -- core/ is the
kernel and has no reverse dependencies.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError

from auth.authenticator import Authenticator
from auth.gate import RequestAuthenticationGate
from auth.models import Credential
from auth.passwords import PasswordHasher
from auth.pipeline import RequestPipeline
from auth.policy import AccessPolicy
from auth.store import CredentialStore, InMemoryCredentialStore, SqlCredentialStore
from auth.tokens import TokenCodec
from core.config import Settings

logger = logging.getLogger("tokengate.auth")


@dataclass
class AuthComponents:
    store: CredentialStore
    hasher: PasswordHasher
    codec: TokenCodec
    authenticator: Authenticator
    pipeline: RequestPipeline

    def close(self) -> None:
        self.store.close()


def build_credential_store(settings: Settings) -> CredentialStore:
    if not settings.credential_db_url:
        store = InMemoryCredentialStore.from_hashes(settings.seed_users)
        logger.info("In-memory credential store loaded (%d users)", len(store))
        return store

    sql_store = SqlCredentialStore(settings.credential_db_url)
    for username, password_hash in settings.seed_users.items():
        # Insert-or-skip: another worker may seed the same row concurrently.
        try:
            sql_store.add(Credential(username=username, password_hash=password_hash))
        except IntegrityError:
            logger.debug("Seed user %s already present", username)
    logger.info("SQL credential store ready (%d users)", sql_store.count())
    return sql_store


def build_pipeline(codec: TokenCodec, settings: Settings) -> RequestPipeline:
    policy = AccessPolicy.from_mapping(settings.access_rules, default=settings.default_requirement)
    return RequestPipeline([RequestAuthenticationGate(codec), policy])


def build_auth_components(settings: Settings, store: CredentialStore | None = None) -> AuthComponents:
    """Wire hasher, codec, authenticator and pipeline around a credential store.

    Pass store to substitute a pre-built backend (tests do this).
    """
    if store is None:
        store = build_credential_store(settings)
    hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    codec = TokenCodec(secret_key=settings.secret_key, ttl_seconds=settings.token_expire_seconds)
    authenticator = Authenticator(store, hasher, codec)
    pipeline = build_pipeline(codec, settings)
    return AuthComponents(
        store=store,
        hasher=hasher,
        codec=codec,
        authenticator=authenticator,
        pipeline=pipeline,
    )
