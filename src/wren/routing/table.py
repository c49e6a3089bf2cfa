"""The route table — caller routes first, then the not-found catch-all.

Wraps the trie ``Router`` with the registration contract the application
relies on: methods are validated as routes arrive, per-route middleware
is attached to its route alone, and nothing is dispatched until the
catch-all is in place.
"""

from collections.abc import Awaitable, Callable, Iterable

from wren._internal.invoke import invoke
from wren.errors import ConfigurationError
from wren.http.request import Request
from wren.http.response import Response
from wren.routing.route import Route
from wren.routing.router import Router
from wren.server.negotiation import negotiate

type Endpoint = Callable[[Request], Awaitable[Response]]


class RouteTable:
    """Registration and dispatch for one application.

    Usage::

        table = RouteTable()
        for route in config.routes:
            table.register(route)
        table.install_catch_all(NotFoundHandler(env))
        response = await table.dispatch(request)
    """

    __slots__ = ("_catch_all", "_router")

    def __init__(self) -> None:
        self._router = Router()
        self._catch_all: Endpoint | None = None

    @property
    def routes(self) -> list[Route]:
        return self._router.routes

    @property
    def is_compiled(self) -> bool:
        return self._catch_all is not None

    def register(self, route: Route) -> None:
        """Register one route.

        Raises:
            ConfigurationError: Unsupported method, bad path, non-callable
                handler or middleware, or registration after the catch-all.
        """
        if self._catch_all is not None:
            msg = f"Cannot register {route.path!r} after the catch-all is installed."
            raise ConfigurationError(msg)
        if not callable(route.handler):
            msg = f"Handler for {route.path!r} is not callable."
            raise ConfigurationError(msg)
        if route.middleware is not None and not callable(route.middleware):
            msg = f"Middleware for {route.path!r} is not callable."
            raise ConfigurationError(msg)
        self._router.add(route)

    def register_all(self, routes: Iterable[Route]) -> None:
        """Register *routes* in order. An empty iterable is fine."""
        for route in routes:
            self.register(route)

    def install_catch_all(self, handler: Endpoint) -> None:
        """Install the unconditional not-found stage and freeze the table."""
        if self._catch_all is not None:
            msg = "The catch-all is already installed."
            raise ConfigurationError(msg)
        self._router.compile()
        self._catch_all = handler

    async def dispatch(self, request: Request) -> Response:
        """Run the matching route (through its own middleware), or the catch-all."""
        if self._catch_all is None:
            msg = "Route table dispatched before the catch-all was installed."
            raise ConfigurationError(msg)

        match = self._router.match(request.method, request.path)
        if match is None:
            return await self._catch_all(request)

        route = match.route
        request = request.with_path_params(match.path_params)

        async def endpoint(req: Request) -> Response:
            result = await invoke(route.handler, req)
            return negotiate(result)

        if route.middleware is not None:
            return await route.middleware(request, endpoint)
        return await endpoint(request)
