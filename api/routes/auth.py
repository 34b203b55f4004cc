"""
api/routes/auth.py -- Login and identity endpoints.

Routes:
  POST /login  -- username/password login; body is the bare token (open)
  GET  /me     -- identity attached by the authentication gate (protected)

Security:
  - POST /login is rate-limited per client IP (LOGIN_RATE_LIMIT).
  - Authenticator.login() equalizes timing and collapses unknown-user and
    wrong-password into one AuthenticationFailed, so the response for both
    is byte-for-byte identical.
  - Cache-Control: no-store on every login response.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse

from api.limiter import limiter, login_rate_limit
from api.models import ErrorDetail, ErrorResponse, LoginBody, MeResponse
from auth.authenticator import Authenticator
from auth.dependencies import get_current_identity
from auth.errors import AuthenticationFailed
from auth.models import AuthenticatedIdentity, LoginRequest

# Access rules live in ACCESS_RULES (core/config.py); defaults:
# - POST /login: open -- the login endpoint must be reachable unauthenticated
# - GET  /me:    authenticated
router = APIRouter()


@router.post("/login", response_class=PlainTextResponse)
@limiter.limit(login_rate_limit)
def login(request: Request, body: LoginBody) -> Response:
    """Exchange a username and password for a signed bearer token.

    Returns the same generic error for wrong username and wrong password
    ("bad_credentials") to avoid leaking username existence.
    """
    authenticator: Authenticator = request.app.state.auth_components.authenticator
    try:
        token = authenticator.login(LoginRequest(username=body.username, password=body.password))
    except AuthenticationFailed as exc:
        resp = JSONResponse(
            status_code=401,
            content=ErrorResponse(error=ErrorDetail(code="bad_credentials", message=str(exc))).model_dump(),
        )
        resp.headers["Cache-Control"] = "no-store"
        return resp

    resp = PlainTextResponse(token)
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.get("/me", response_model=MeResponse)
async def me(identity: AuthenticatedIdentity = Depends(get_current_identity)) -> MeResponse:
    """Return the identity resolved from the request's bearer token."""
    return MeResponse(username=identity.username)
