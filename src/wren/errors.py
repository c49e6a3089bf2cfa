"""Wren exception hierarchy.

Shared across the pipeline, route table, server lifecycle, and application
so every module raises and catches the same types.
"""

from dataclasses import dataclass


class WrenError(Exception):
    """Base for all wren-specific errors."""


class ConfigurationError(WrenError):
    """Raised when the application is assembled with invalid configuration.

    Always fatal at assembly time: a missing logger, an unsupported route
    method, or a secure transport that was required but never supplied.
    """


class BindError(WrenError):
    """Raised when the server cannot bind its listening socket.

    Fatal. The lifecycle never retries; the process is expected to exit
    or be restarted by its supervisor.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(WrenError):
    """An error that maps directly to an HTTP status code.

    Raised by pipeline stages or handlers. The error boundary converts
    these to a JSON response carrying ``detail`` as the message.
    """

    status: int
    detail: str = ""

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class BadRequest(HTTPError):  # noqa: N818
    """400 — the request body could not be parsed."""

    def __init__(self, detail: str = "Bad request.") -> None:
        super().__init__(status=400, detail=detail)


class CorsRejection(HTTPError):  # noqa: N818
    """403 — the ``Origin`` header is not in the allow-list.

    Raised by the CORS stage before any route or caller middleware runs.
    """

    origin: str = ""

    def __init__(self, origin: str, detail: str = "Not allowed by CORS.") -> None:
        super().__init__(status=403, detail=detail)
        object.__setattr__(self, "origin", origin)


class NotFound(HTTPError):  # noqa: N818
    """404 — no route matched the request."""

    def __init__(self, detail: str = "Not found.") -> None:
        super().__init__(status=404, detail=detail)


class PayloadTooLarge(HTTPError):  # noqa: N818
    """413 — the request body exceeds the configured ceiling.

    Distinct from ``BadRequest`` so callers can tell an oversize body
    from a malformed one.
    """

    limit: int = 0

    def __init__(self, limit: int, detail: str = "Payload too large.") -> None:
        super().__init__(status=413, detail=detail)
        object.__setattr__(self, "limit", limit)
