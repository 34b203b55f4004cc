"""
api/limiter.py -- Shared slowapi rate limiter instance.

Imported by api/main.py (mounted as middleware) and api/routes/auth.py (per-
route limit on POST /login with @limiter.limit()).

A single shared instance keeps one in-memory counter store for the whole app;
separate instances per module would each count on their own and never trip.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from core.config import get_settings

limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")


def login_rate_limit() -> str:
    """Resolve LOGIN_RATE_LIMIT per request so tests can relax it via env."""
    return get_settings().login_rate_limit
