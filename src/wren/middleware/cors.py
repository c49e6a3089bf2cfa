"""CORS admission control.

Two pieces:

- The origin policy: ``merge_origins()`` builds the allow-list once at
  startup, ``is_allowed()`` decides a single request.
- ``CORSMiddleware``: the mandatory pipeline stage that applies the policy
  to every request and rejects disallowed origins before any caller
  middleware or route handler runs.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from wren.errors import CorsRejection
from wren.http.request import Request
from wren.http.response import Response
from wren.middleware.protocol import Next

DEFAULT_ALLOWED_ORIGINS: frozenset[str] = frozenset(
    {
        "http://localhost:4000",
        "http://localhost:3000",
        "http://127.0.0.1:4000",
        "http://127.0.0.1:3000",
    }
)


def merge_origins(
    extra: Iterable[str] = (),
    defaults: frozenset[str] = DEFAULT_ALLOWED_ORIGINS,
) -> frozenset[str]:
    """Return a new allow-list holding *defaults* plus *extra*.

    Neither input is modified.
    """
    return defaults | frozenset(extra)


def is_allowed(origin: str | None, allow_list: frozenset[str] | set[str]) -> bool:
    """Decide whether a request with this ``Origin`` header may proceed.

    A missing or empty origin is a same-origin or non-browser request and
    is always allowed. Anything else must be an exact member of
    *allow_list*: no wildcards, no scheme or port normalization.
    """
    if not origin:
        return True
    return origin in allow_list


@dataclass(frozen=True, slots=True)
class CORSConfig:
    """CORS stage configuration.

    ``allow_origins`` is the already-merged allow-list.
    """

    allow_origins: frozenset[str] = DEFAULT_ALLOWED_ORIGINS
    allow_methods: tuple[str, ...] = ("GET", "HEAD", "PUT", "PATCH", "POST", "DELETE")
    allow_headers: tuple[str, ...] = ()
    expose_headers: tuple[str, ...] = ()
    allow_credentials: bool = False
    max_age: int | None = None


class CORSMiddleware:
    """Origin allow-list enforcement plus CORS response headers.

    Handles:
    - Requests without ``Origin``: passed through untouched
    - Disallowed origins: ``CorsRejection`` (403), nothing downstream runs
    - Preflight ``OPTIONS`` requests: 204 with CORS headers
    - Allowed actual requests: ``Access-Control-Allow-Origin`` + ``Vary``

    Usage::

        CORSMiddleware(CORSConfig(
            allow_origins=merge_origins(["https://example.com"]),
        ))
    """

    __slots__ = ("config",)

    def __init__(self, config: CORSConfig | None = None) -> None:
        self.config = config or CORSConfig()

    def _add_cors_headers(self, response: Response, origin: str) -> Response:
        cfg = self.config
        response = response.with_header("Access-Control-Allow-Origin", origin)
        response = response.with_header("Vary", "Origin")
        if cfg.allow_credentials:
            response = response.with_header("Access-Control-Allow-Credentials", "true")
        if cfg.expose_headers:
            response = response.with_header(
                "Access-Control-Expose-Headers",
                ", ".join(cfg.expose_headers),
            )
        return response

    def _preflight_response(self, origin: str, request: Request) -> Response:
        cfg = self.config
        response = self._add_cors_headers(Response(body="", status=204), origin)
        response = response.with_header(
            "Access-Control-Allow-Methods",
            ", ".join(cfg.allow_methods),
        )

        # Reflect the requested headers when none are configured
        requested = request.headers.get("access-control-request-headers")
        if cfg.allow_headers:
            response = response.with_header(
                "Access-Control-Allow-Headers",
                ", ".join(cfg.allow_headers),
            )
        elif requested:
            response = response.with_header("Access-Control-Allow-Headers", requested)
            response = response.with_header("Vary", "Access-Control-Request-Headers")

        if cfg.max_age is not None:
            response = response.with_header("Access-Control-Max-Age", str(cfg.max_age))
        return response

    async def __call__(self, request: Request, next: Next) -> Response:
        origin = request.origin

        if not is_allowed(origin, self.config.allow_origins):
            raise CorsRejection(origin or "")

        # No Origin header: not a CORS request
        if not origin:
            return await next(request)

        if request.method == "OPTIONS" and request.headers.get(
            "access-control-request-method"
        ):
            return self._preflight_response(origin, request)

        response = await next(request)
        return self._add_cors_headers(response, origin)
