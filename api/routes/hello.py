"""
api/routes/hello.py -- Sample protected resource.

GET /hello is protected by the default ACCESS_RULES. The handler itself holds
no auth logic: by the time it runs, the access policy has already refused
unauthenticated requests.
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter()


@router.get("/hello", response_class=PlainTextResponse)
async def hello() -> str:
    return "Hello"
