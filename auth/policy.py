"""
auth/policy.py -- Route access rules evaluated after the authentication gate.

AccessPolicy holds an ordered table of (glob pattern, Requirement). The first
pattern that matches the request path decides; unmatched paths use the
default requirement. A path that requires authentication and arrives without
an identity raises AccessDenied -- the single place a request is refused for
lack of authentication.

Patterns use fnmatch syntax and are case-sensitive: "/hello", "/api/*",
"/files/*.txt".

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
from fnmatch import fnmatchcase

from auth.errors import AccessDenied
from auth.models import RequestContext


class Requirement(str, Enum):
    OPEN = "open"
    AUTHENTICATED = "authenticated"


class AccessPolicy:
    """Pipeline stage enforcing per-route authentication requirements.

    Usage:
        policy = AccessPolicy.from_mapping({"/login": "open", "/hello": "authenticated"})
        policy.requirement_for("/hello")  # Requirement.AUTHENTICATED
    """

    name = "access_policy"

    def __init__(
        self,
        rules: Iterable[tuple[str, Requirement]],
        default: Requirement = Requirement.AUTHENTICATED,
    ) -> None:
        self.rules: tuple[tuple[str, Requirement], ...] = tuple(rules)
        self.default = default

    @classmethod
    def from_mapping(
        cls,
        rules: Mapping[str, str],
        default: str | Requirement = Requirement.AUTHENTICATED,
    ) -> AccessPolicy:
        """Build a policy from a {pattern: "open" | "authenticated"} mapping.

        Mapping order is rule order. Unknown requirement strings raise ValueError.
        """
        return cls(
            ((pattern, Requirement(value)) for pattern, value in rules.items()),
            default=Requirement(default),
        )

    def requirement_for(self, path: str) -> Requirement:
        for pattern, requirement in self.rules:
            if fnmatchcase(path, pattern):
                return requirement
        return self.default

    def __call__(self, context: RequestContext) -> None:
        if self.requirement_for(context.path) is Requirement.AUTHENTICATED and not context.authenticated:
            raise AccessDenied(context.path)
