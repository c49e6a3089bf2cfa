"""Wren — a small bootstrap library for ASGI applications.

Assembles a fixed request pipeline (security headers, body parsing, CORS
origin validation), registers caller routes, binds a pounce server, and
funnels uncaught handler errors into one JSON error response.

Basic usage::

    import logging

    from wren import Application, AppConfig, Route

    def list_todos(request):
        return [{"id": 1, "title": "Write docs"}]

    app = Application(
        AppConfig(port=8800, routes=(Route("/todos", "get", list_todos),)),
        logger=logging.getLogger("todos"),
    )
    app.run()
"""

__version__ = "0.1.0"
__all__ = [
    "AppConfig",
    "Application",
    "BadRequest",
    "BindError",
    "ConfigurationError",
    "CorsRejection",
    "HTTPError",
    "HttpMethod",
    "Middleware",
    "Next",
    "NotFound",
    "PayloadTooLarge",
    "PounceTransport",
    "Request",
    "Response",
    "Route",
    "TlsTransport",
    "WrenError",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import wren`` fast while providing a clean top-level API.
    """
    if name == "Application":
        from wren.app import Application

        return Application

    if name == "AppConfig":
        from wren.config import AppConfig

        return AppConfig

    if name == "Request":
        from wren.http.request import Request

        return Request

    if name == "Response":
        from wren.http.response import Response

        return Response

    if name == "Route":
        from wren.routing.route import Route

        return Route

    if name == "HttpMethod":
        from wren.routing.methods import HttpMethod

        return HttpMethod

    if name in ("Middleware", "Next"):
        from wren.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in ("PounceTransport", "TlsTransport"):
        from wren.server import lifecycle as _lifecycle

        return getattr(_lifecycle, name)

    if name in (
        "BadRequest",
        "BindError",
        "ConfigurationError",
        "CorsRejection",
        "HTTPError",
        "NotFound",
        "PayloadTooLarge",
        "WrenError",
    ):
        from wren import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
