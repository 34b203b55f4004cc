"""
auth/tokens.py -- JWT issue and verification.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry
       exactly sub (username), iat and exp as integer epoch seconds. There is
       no server-side token state -- validity is signature + expiry only.

  Algorithm pinning: decode() is always called with algorithms=["HS256"].
       A token whose header names any other algorithm (including "none") is
       rejected before its claims are looked at.

  Canonical signature: base64url has spare low bits in its final character,
       so two different strings can decode to the same signature bytes. The
       signature segment must round-trip exactly; otherwise a one-character
       edit to a token could still verify.

  Expiry: checked here, not by python-jose, against the injectable clock.
       exp is a hard boundary (exp <= now is expired), no leeway.

Layer rule: no imports from api/ or core/. The secret key and TTL are passed
in by the caller (api/main.py reads them from Settings).
"""

from __future__ import annotations

import base64
import binascii
import time
from collections.abc import Callable

from jose import JWTError, jwt

from auth.errors import TokenExpired, TokenInvalid
from auth.models import AuthenticatedIdentity

ALGORITHM = "HS256"

# require_* is left off: python-jose turns every required claim into a
# verify_* check, which would re-enable its own wall-clock exp check.
_DECODE_OPTIONS = {
    "verify_signature": True,
    "verify_exp": False,  # enforced below against self._clock
    "verify_iat": True,
}

_REQUIRED_CLAIMS = ("sub", "iat", "exp")


def _is_canonical_segment(segment: str) -> bool:
    """Return True if segment is the unique unpadded base64url form of its bytes."""
    try:
        raw = base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))
    except (binascii.Error, ValueError):
        return False
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii") == segment


class TokenCodec:
    """Create and verify signed bearer tokens.

    Usage:
        codec = TokenCodec(secret_key=settings.secret_key, ttl_seconds=3600)
        token = codec.issue("farhan")
        codec.verify(token)  # AuthenticatedIdentity(username="farhan")
    """

    def __init__(
        self,
        secret_key: str,
        ttl_seconds: int = 3600,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not secret_key:
            raise ValueError("TokenCodec requires a non-empty secret key")
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._secret_key = secret_key
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    def issue(self, username: str) -> str:
        """Encode a signed JWT with sub=username, iat=now and exp=now+TTL."""
        issued_at = int(self._clock())
        claims = {
            "sub": username,
            "iat": issued_at,
            "exp": issued_at + self.ttl_seconds,
        }
        return jwt.encode(claims, self._secret_key, algorithm=ALGORITHM)

    def verify(self, token: str) -> AuthenticatedIdentity:
        """Verify signature and expiry; return the embedded identity.

        Raises:
            TokenExpired: signature verified but exp <= now.
            TokenInvalid: anything else -- wrong shape, bad encoding, bad
                signature, foreign algorithm, missing or mistyped claims.
        """
        segments = token.split(".")
        if len(segments) != 3 or not _is_canonical_segment(segments[2]):
            raise TokenInvalid("Malformed token")

        try:
            claims = jwt.decode(token, self._secret_key, algorithms=[ALGORITHM], options=_DECODE_OPTIONS)
        except JWTError as exc:
            raise TokenInvalid(str(exc)) from exc

        missing = [name for name in _REQUIRED_CLAIMS if name not in claims]
        if missing:
            raise TokenInvalid(f"Missing claim(s): {', '.join(missing)}")

        expires_at = claims["exp"]
        subject = claims["sub"]
        if not isinstance(expires_at, int) or isinstance(expires_at, bool):
            raise TokenInvalid("exp claim must be an integer")
        if not isinstance(subject, str) or not subject:
            raise TokenInvalid("sub claim must be a non-empty string")
        if expires_at <= self._clock():
            raise TokenExpired("Token has expired")

        return AuthenticatedIdentity(username=subject)
