"""
auth/store.py -- Credential lookup backends.

CredentialStore is the capability the Authenticator depends on:
lookup(username) returns a Credential or raises UserNotFound, and close()
releases whatever the backend holds (called once at shutdown).
Two implementations:

  InMemoryCredentialStore -- read-only mapping built once at startup from
      configuration (SEED_USERS). Safe to share across threads without locks
      because nothing mutates it after construction.

  SqlCredentialStore -- SQLAlchemy Core persistence (Repository + Data
      Mapper). add() exists only for the bootstrap/admin path (CLI add-user,
      startup seeding); request handling only ever calls lookup().

Security:
  All queries use bound parameters. No f-strings in SQL.
  Lookups are case-sensitive exact matches on username.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Protocol

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, event, func, select
from sqlalchemy.engine import Engine

from auth.errors import UserNotFound
from auth.models import Credential

logger = logging.getLogger("tokengate.auth.store")


class CredentialStore(Protocol):
    def lookup(self, username: str) -> Credential: ...

    def close(self) -> None: ...


# ---------------------------------------------------------------------------
# In-memory store
# ---------------------------------------------------------------------------


class InMemoryCredentialStore:
    """Immutable username -> Credential map.

    Usage:
        store = InMemoryCredentialStore([Credential("farhan", hasher.hash("123"))])
        store.lookup("farhan")
    """

    def __init__(self, credentials: Iterable[Credential] = ()) -> None:
        entries: dict[str, Credential] = {}
        for cred in credentials:
            if cred.username in entries:
                raise ValueError(f"Duplicate username: {cred.username!r}")
            entries[cred.username] = cred
        self._entries: Mapping[str, Credential] = MappingProxyType(entries)

    @classmethod
    def from_hashes(cls, hashes: Mapping[str, str]) -> InMemoryCredentialStore:
        """Build a store from a {username: bcrypt_hash} mapping (SEED_USERS)."""
        return cls(Credential(username=u, password_hash=h) for u, h in hashes.items())

    def lookup(self, username: str) -> Credential:
        try:
            return self._entries[username]
        except KeyError:
            raise UserNotFound(username) from None

    def __len__(self) -> int:
        return len(self._entries)

    def close(self) -> None:
        """Nothing to release."""


# ---------------------------------------------------------------------------
# SQL store -- schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_credentials = Table(
    "credentials",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", String(255), nullable=False, unique=True),
    Column("password_hash", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
)


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# SQL store -- repository
# ---------------------------------------------------------------------------


class SqlCredentialStore:
    """Repository for Credential rows.

    Usage:
        store = SqlCredentialStore("sqlite:///credentials.db")
        store.add(Credential("admin", hasher.hash("secret")))
        store.lookup("admin")
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite") and ":memory:" not in db_url and "mode=memory" not in db_url:
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    def lookup(self, username: str) -> Credential:
        with self.engine.connect() as conn:
            row = conn.execute(_credentials.select().where(_credentials.c.username == username)).fetchone()
        if row is None:
            raise UserNotFound(username)
        return _row_to_credential(row)

    def add(self, credential: Credential) -> int:
        """Insert a credential and return its row ID.

        Raises sqlalchemy.exc.IntegrityError if the username already exists.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _credentials.insert().values(
                    username=credential.username,
                    password_hash=credential.password_hash,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
        logger.info("Credential added for %s", credential.username)
        return result.inserted_primary_key[0]

    def count(self) -> int:
        with self.engine.connect() as conn:
            return conn.execute(select(func.count()).select_from(_credentials)).scalar() or 0

    def close(self) -> None:
        self.engine.dispose()


def _row_to_credential(row) -> Credential:
    return Credential(username=row.username, password_hash=row.password_hash)
