"""Shared CORS headers and preflight handling."""
from __future__ import annotations

from typing import Dict

from starlette.requests import Request
from starlette.responses import Response

from .config import Settings

ALLOWED_METHODS = "POST, OPTIONS"
ALLOWED_HEADERS = "Content-Type"
PREFLIGHT_HEADERS = (
    "Origin",
    "Access-Control-Request-Method",
    "Access-Control-Request-Headers",
)


def cors_headers(settings: Settings) -> Dict[str, str]:
    """Headers attached to every synthesis response and CORS preflight."""

    return {
        "Access-Control-Allow-Origin": settings.allowed_origin,
        "Access-Control-Allow-Methods": ALLOWED_METHODS,
        "Access-Control-Allow-Headers": ALLOWED_HEADERS,
    }


def is_preflight(request: Request) -> bool:
    return all(request.headers.get(name) is not None for name in PREFLIGHT_HEADERS)


def options_response(request: Request, settings: Settings) -> Response:
    """Answer an ``OPTIONS`` request without a body."""

    if is_preflight(request):
        return Response(status_code=200, headers=cors_headers(settings))
    return Response(status_code=200, headers={"Allow": ALLOWED_METHODS})
