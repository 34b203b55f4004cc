"""
auth/passwords.py -- bcrypt password hashing.

Using bcrypt directly rather than passlib[bcrypt] because passlib's internal
wrap-bug detection creates a password longer than 72 bytes, which bcrypt 4.x
rejects with an explicit error.

bcrypt.gensalt() draws a fresh random salt on every call, so hashing the same
password twice yields two different strings that both verify. checkpw()
recomputes with the salt embedded in the stored hash and compares in constant
time.

bcrypt only reads the first 72 bytes of its input, and bcrypt 5 raises instead
of truncating. hash() rejects longer passwords up front with PasswordTooLong;
verify() treats them as a mismatch.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import bcrypt

from auth.errors import PasswordTooLong

MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """One-way salted password hashing with a configurable bcrypt cost."""

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds

    def hash(self, plain: str) -> str:
        """Return a bcrypt hash of the given plaintext password.

        Raises PasswordTooLong if the UTF-8 encoding exceeds 72 bytes.
        """
        encoded = plain.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise PasswordTooLong(len(encoded))
        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, plain: str, hashed: str) -> bool:
        """Return True if the plaintext password matches the bcrypt hash.

        A wrong password returns False. So does a stored value that is not a
        bcrypt hash at all, or a password bcrypt refuses (both ValueError).
        """
        try:
            return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError:
            return False
