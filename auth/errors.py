"""
auth/errors.py -- Typed failures raised inside the authentication core.

Hierarchy:
  AuthError
    UserNotFound          -- CredentialStore.lookup() miss
    PasswordMismatch      -- PasswordHasher rejected the password
    AuthenticationFailed  -- the only login failure callers ever see
    TokenInvalid          -- bad signature, malformed encoding, missing claims
      TokenExpired        -- signature fine, exp <= now
    AccessDenied          -- AccessPolicy rejected an unauthenticated request
    PasswordTooLong       -- plaintext exceeds bcrypt's 72-byte input limit

UserNotFound and PasswordMismatch never leave the Authenticator; both become
AuthenticationFailed with the same message so callers cannot tell them apart.
TokenInvalid and TokenExpired never leave the gate; both become "proceed
unauthenticated".

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations


class AuthError(Exception):
    """Base class for every failure raised by the auth package."""


class UserNotFound(AuthError):
    def __init__(self, username: str) -> None:
        super().__init__(f"No credential for user {username!r}")
        self.username = username


class PasswordMismatch(AuthError):
    def __init__(self, username: str) -> None:
        super().__init__(f"Password mismatch for user {username!r}")
        self.username = username


class AuthenticationFailed(AuthError):
    """Login failed. The message is identical for every cause."""

    def __init__(self) -> None:
        super().__init__("Invalid username or password.")


class TokenInvalid(AuthError):
    """Token could not be decoded or its signature did not verify."""


class TokenExpired(TokenInvalid):
    """Token signature is valid but exp is not in the future."""


class AccessDenied(AuthError):
    """A protected route was requested without an authenticated identity."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Authentication required for {path}")
        self.path = path


class PasswordTooLong(AuthError, ValueError):
    def __init__(self, length: int) -> None:
        super().__init__(f"Password is {length} bytes; bcrypt accepts at most 72.")
        self.length = length
