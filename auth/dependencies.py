"""
auth/dependencies.py -- FastAPI Depends() helpers for reading the auth context.

The authenticate_request middleware in api/main.py runs the RequestPipeline
and stores the resulting RequestContext on request.state.auth_context. Route
handlers read it through these helpers instead of re-parsing headers.

try_get_identity() is the soft variant (returns None when unauthenticated).
get_current_identity() wraps it and raises HTTP 401 -- a second line of
defence for routes that must never run anonymously even if the access rules
are misconfigured.

Layer rule: auth/dependencies.py may import from fastapi (for
HTTPException/Request) because it is part of the FastAPI dependency injection
system. No imports from api/.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from auth.models import AuthenticatedIdentity, RequestContext


def get_request_context(request: Request) -> RequestContext | None:
    return getattr(request.state, "auth_context", None)


def try_get_identity(request: Request) -> AuthenticatedIdentity | None:
    """Return the identity the gate attached to this request, or None. Never raises."""
    context = get_request_context(request)
    if context is None:
        return None
    return context.identity


def get_current_identity(request: Request) -> AuthenticatedIdentity:
    """Require authentication. Raises HTTP 401 if the request is not authenticated.

    Use as a FastAPI dependency:
        @router.get("/protected")
        async def route(identity: AuthenticatedIdentity = Depends(get_current_identity)): ...
    """
    identity = try_get_identity(request)
    if identity is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Authentication required."},
            headers={"WWW-Authenticate": "Bearer"},
        )
    return identity
