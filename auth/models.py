"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, near-zero logic). Stores, the codec
and the pipeline do the work; these types only carry shape.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Credential:
    """A stored login credential. username is the unique key.

    password_hash is a bcrypt digest (salt embedded). The plaintext password
    is never stored anywhere.
    """

    username: str
    password_hash: str = field(repr=False)


@dataclass(frozen=True)
class AuthenticatedIdentity:
    """The identity resolved from a verified token. Lives for one request only."""

    username: str


@dataclass
class RequestContext:
    """Request-scoped authorization context threaded through the pipeline.

    Built by the HTTP middleware from the incoming request, passed by parameter
    to each pipeline stage, then stored on request.state for route handlers.
    Never shared between requests.

    gate_applied guards the authentication gate so it runs at most once per
    request even if the pipeline is re-entered.
    """

    method: str
    path: str
    authorization: str | None = None
    client_host: str | None = None
    identity: AuthenticatedIdentity | None = None
    gate_applied: bool = False

    @property
    def authenticated(self) -> bool:
        return self.identity is not None


@dataclass(frozen=True)
class LoginRequest:
    """A transient login attempt. The password never appears in repr or logs."""

    username: str
    password: str = field(repr=False)
