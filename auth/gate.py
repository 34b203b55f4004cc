"""
auth/gate.py -- Per-request bearer token authentication stage.

RequestAuthenticationGate reads the Authorization header captured on the
RequestContext and has exactly one of three outcomes:

  1. NoHeader           -- no header, or a scheme other than Bearer.
  2. MalformedOrInvalid -- Bearer with empty credentials, or TokenCodec
                           rejected the token (bad signature, expired, junk).
  3. Authenticated      -- identity attached to the context.

In every case the context is handed on unchanged otherwise. The gate never
rejects a request; turning "not authenticated" into a refusal is the
AccessPolicy's job.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import logging

from auth.errors import TokenExpired, TokenInvalid
from auth.models import RequestContext
from auth.tokens import TokenCodec

logger = logging.getLogger("tokengate.auth.gate")

BEARER_SCHEME = "bearer"


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token from an "Authorization: Bearer <token>" value, else None.

    The scheme match is case-insensitive (RFC 7235). Empty credentials count
    as no token.
    """
    if not authorization:
        return None
    scheme, _, credentials = authorization.strip().partition(" ")
    if scheme.lower() != BEARER_SCHEME:
        return None
    token = credentials.strip()
    return token or None


class RequestAuthenticationGate:
    """Pipeline stage that attaches an AuthenticatedIdentity for valid tokens."""

    name = "authentication_gate"

    def __init__(self, codec: TokenCodec) -> None:
        self.codec = codec

    def __call__(self, context: RequestContext) -> None:
        # Once per request, even if the pipeline runs again on the same context.
        if context.gate_applied:
            return
        context.gate_applied = True

        token = extract_bearer_token(context.authorization)
        if token is None:
            return

        try:
            identity = self.codec.verify(token)
        except TokenExpired:
            logger.debug("Expired bearer token on %s %s", context.method, context.path)
            return
        except TokenInvalid as exc:
            logger.debug("Rejected bearer token on %s %s: %s", context.method, context.path, exc)
            return

        context.identity = identity
