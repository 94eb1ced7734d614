"""CORS headers attached to every tutor API response, preflight included."""

from __future__ import annotations

from collections.abc import Sequence

ALLOW_METHODS = "GET, POST, OPTIONS"
ALLOW_HEADERS = "Content-Type, Authorization, X-Requested-With"
MAX_AGE = "86400"

_DEV_HOSTS = ("localhost", "127.0.0.1")
_PREVIEW_SUFFIXES = (".vercel.app", ".vercel.dev")


def is_allowed_origin(origin: str | None, allowed: Sequence[str]) -> bool:
    # same-origin and non-browser callers send no Origin
    if not origin:
        return True
    if any(host in origin for host in _DEV_HOSTS):
        return True
    if origin.endswith(_PREVIEW_SUFFIXES):
        return True
    return origin in allowed


def cors_headers(origin: str | None, allowed: Sequence[str]) -> dict[str, str]:
    if origin and is_allowed_origin(origin, allowed):
        allow_origin = origin
    else:
        allow_origin = allowed[0] if allowed else "*"
    return {
        "Access-Control-Allow-Origin": allow_origin,
        "Access-Control-Allow-Methods": ALLOW_METHODS,
        "Access-Control-Allow-Headers": ALLOW_HEADERS,
        "Access-Control-Max-Age": MAX_AGE,
        "Vary": "Origin",
    }
