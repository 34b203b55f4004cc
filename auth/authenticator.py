"""
auth/authenticator.py -- Username/password login orchestration.

Authenticator ties a CredentialStore, a PasswordHasher and a TokenCodec
together. login() either returns a freshly issued token or raises
AuthenticationFailed -- never UserNotFound or PasswordMismatch, so a caller
cannot tell a missing username from a wrong password.

Timing equalization: an unknown username still pays for one bcrypt
verify against _dummy_hash, so response time does not reveal whether the
username exists either.

The internal cause is kept for the audit log only (unknown_user /
bad_password). The password is never logged.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import logging

from auth.errors import AuthenticationFailed, PasswordMismatch, UserNotFound
from auth.models import LoginRequest
from auth.passwords import PasswordHasher
from auth.store import CredentialStore
from auth.tokens import TokenCodec

logger = logging.getLogger("tokengate.auth")


class Authenticator:
    def __init__(self, store: CredentialStore, hasher: PasswordHasher, codec: TokenCodec) -> None:
        self.store = store
        self.hasher = hasher
        self.codec = codec
        # Computed once so the first failed login is not measurably slower
        # than later ones.
        self._dummy_hash = hasher.hash("tokengate_timing_dummy")

    def check_credentials(self, username: str, password: str) -> str:
        """Return username if the password matches its stored hash.

        Raises UserNotFound or PasswordMismatch. Internal: login() is the only
        caller and collapses both into AuthenticationFailed.
        """
        try:
            credential = self.store.lookup(username)
        except UserNotFound:
            # Equalize timing -- do NOT return before running bcrypt
            self.hasher.verify(password, self._dummy_hash)
            raise
        if not self.hasher.verify(password, credential.password_hash):
            raise PasswordMismatch(username)
        return credential.username

    def login(self, request: LoginRequest) -> str:
        """Verify a login attempt and return a signed token on success.

        Side effects: none beyond token creation. No session is recorded.
        """
        try:
            username = self.check_credentials(request.username, request.password)
        except UserNotFound:
            logger.info("Login failed for %r (unknown_user)", request.username)
            raise AuthenticationFailed() from None
        except PasswordMismatch:
            logger.info("Login failed for %r (bad_password)", request.username)
            raise AuthenticationFailed() from None

        token = self.codec.issue(username)
        logger.info("Login succeeded for %r", username)
        return token
