"""The error boundary — one place where failures become responses.

Installed as the last step of ``Application.init()``, directly inside the
security-headers stage. Everything raised further down the pipeline
(body parsing, CORS, caller middleware, route middleware, handlers) ends
here and always produces exactly one response:

- ``CorsRejection``   -> 403 JSON, never reaches the custom handler
- other ``HTTPError`` -> its status, JSON ``{"message": detail}``
- anything else       -> custom handler (side effects only), then 500 JSON
"""

import logging

from wren._internal.invoke import invoke
from wren._internal.types import ErrorSink, Logger
from wren.errors import CorsRejection, HTTPError
from wren.http.request import Request
from wren.http.response import Response
from wren.middleware.protocol import Next

logger = logging.getLogger("wren.server")

INTERNAL_ERROR_MESSAGE = "Internal server error."


def http_error_response(exc: HTTPError) -> Response:
    """Map an HTTPError to its JSON response."""
    return Response.json({"message": exc.detail or f"Error {exc.status}"}, status=exc.status)


def internal_error_response() -> Response:
    return Response.json({"message": INTERNAL_ERROR_MESSAGE}, status=500)


class ErrorBoundary:
    """Terminal error-handling stage.

    ``custom_handler`` is called with the original exception for side
    effects such as reporting. It cannot change the response: whatever it
    returns is ignored, and if it raises, the failure is logged and the
    generic 500 is still sent.
    """

    __slots__ = ("custom_handler", "logger")

    def __init__(
        self,
        *,
        logger: Logger | None = None,
        custom_handler: ErrorSink | None = None,
    ) -> None:
        self.logger: Logger = logging.getLogger("wren.server") if logger is None else logger
        self.custom_handler = custom_handler

    async def __call__(self, request: Request, next: Next) -> Response:
        try:
            return await next(request)
        except CorsRejection as exc:
            logger.debug(
                "403 %s %s — origin %r rejected", request.method, request.path, exc.origin
            )
            return http_error_response(exc)
        except HTTPError as exc:
            logger.debug(
                "%d %s %s — %s", exc.status, request.method, request.path, exc.detail
            )
            return http_error_response(exc)
        except Exception as exc:
            return await self.handle_internal_error(exc, request)

    async def handle_internal_error(self, exc: Exception, request: Request) -> Response:
        """Report *exc* and build the uniform 500 response."""
        self.logger.error(exc)
        if self.custom_handler is not None:
            try:
                await invoke(self.custom_handler, exc)
            except Exception as handler_exc:
                self.logger.error(handler_exc)
        return internal_error_response()
