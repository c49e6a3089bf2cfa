"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Response

Mandatory stages (always installed, in this order):
    SecurityHeadersMiddleware -- helmet-style security headers
    BodyParserMiddleware -- JSON and URL-encoded bodies with a size ceiling
    CORSMiddleware -- Origin allow-list enforcement
"""

from wren.middleware.body import BodyParserMiddleware
from wren.middleware.cors import (
    DEFAULT_ALLOWED_ORIGINS,
    CORSConfig,
    CORSMiddleware,
    is_allowed,
    merge_origins,
)
from wren.middleware.pipeline import MiddlewarePipeline
from wren.middleware.protocol import Middleware, Next
from wren.middleware.security_headers import (
    SecurityHeadersConfig,
    SecurityHeadersMiddleware,
)

__all__ = [
    "DEFAULT_ALLOWED_ORIGINS",
    "BodyParserMiddleware",
    "CORSConfig",
    "CORSMiddleware",
    "Middleware",
    "MiddlewarePipeline",
    "Next",
    "SecurityHeadersConfig",
    "SecurityHeadersMiddleware",
    "is_allowed",
    "merge_origins",
]
