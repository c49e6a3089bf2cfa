"""The request pipeline — fixed mandatory stages, then caller stages.

Order is not configurable:

1. Security headers
2. Body parsing (JSON and URL-encoded, size ceiling)
3. CORS origin check
4. Caller middleware, in the order given

The error boundary is installed last, during ``Application.init()``, and
sits directly inside the security-headers stage: every later stage's
failure reaches it, and the response it produces still passes back
through the security headers.
"""

from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from wren.errors import ConfigurationError
from wren.http.request import Request
from wren.http.response import Response
from wren.middleware.body import BodyParserMiddleware
from wren.middleware.cors import CORSConfig, CORSMiddleware
from wren.middleware.protocol import Middleware, Next
from wren.middleware.security_headers import SecurityHeadersConfig, SecurityHeadersMiddleware

type Endpoint = Callable[[Request], Awaitable[Response]]


def compose(stages: Sequence[Callable[..., Any]], endpoint: Endpoint) -> Endpoint:
    """Wrap *endpoint* in *stages*, first stage outermost."""
    handler = endpoint
    for stage in reversed(stages):
        outer = handler

        async def make_next(req: Request, _mw: Any = stage, _next: Next = outer) -> Response:
            return await _mw(req, _next)

        handler = make_next
    return handler


class MiddlewarePipeline:
    """Ordered, build-once stage list shared by every request.

    Usage::

        pipeline = MiddlewarePipeline(
            allowed_origins=merge_origins(config.allowed_cors_origin),
            caller_stages=config.middleware,
        )
        pipeline.build()
        pipeline.install_error_boundary(boundary)
        response = await pipeline.run(request, dispatch)
    """

    __slots__ = (
        "_boundary",
        "_stages",
        "allowed_origins",
        "caller_stages",
        "max_body_size",
        "security",
    )

    def __init__(
        self,
        *,
        allowed_origins: frozenset[str],
        caller_stages: Sequence[Middleware] = (),
        max_body_size: int,
        security: SecurityHeadersConfig | None = None,
    ) -> None:
        self.allowed_origins = allowed_origins
        self.caller_stages = tuple(caller_stages)
        self.max_body_size = max_body_size
        self.security = security or SecurityHeadersConfig()
        self._stages: tuple[Middleware, ...] | None = None
        self._boundary: Middleware | None = None

    @property
    def is_built(self) -> bool:
        return self._stages is not None

    @property
    def stages(self) -> tuple[Middleware, ...]:
        """The stages every request passes through, boundary included."""
        if self._stages is None:
            msg = "Pipeline has not been built yet."
            raise ConfigurationError(msg)
        if self._boundary is None:
            return self._stages
        head, *rest = self._stages
        return (head, self._boundary, *rest)

    def build(self) -> tuple[Middleware, ...]:
        """Assemble the stage tuple. Callable once.

        Raises:
            ConfigurationError: If called twice or a caller stage is not callable.
        """
        if self._stages is not None:
            msg = "Pipeline is already built."
            raise ConfigurationError(msg)
        for index, stage in enumerate(self.caller_stages):
            if not callable(stage):
                msg = f"Middleware #{index} ({stage!r}) is not callable."
                raise ConfigurationError(msg)

        mandatory: tuple[Middleware, ...] = (
            SecurityHeadersMiddleware(self.security),
            BodyParserMiddleware(self.max_body_size),
            CORSMiddleware(CORSConfig(allow_origins=self.allowed_origins)),
        )
        self._stages = (*mandatory, *self.caller_stages)
        return self._stages

    def install_error_boundary(self, boundary: Middleware) -> None:
        """Install the terminal error boundary. Requires ``build()`` first."""
        if self._stages is None:
            msg = "Build the pipeline before installing the error boundary."
            raise ConfigurationError(msg)
        if self._boundary is not None:
            msg = "An error boundary is already installed."
            raise ConfigurationError(msg)
        self._boundary = boundary

    async def run(self, request: Request, endpoint: Endpoint) -> Response:
        """Send *request* through every stage, then *endpoint*."""
        return await compose(self.stages, endpoint)(request)
