"""Wren application assembler.

Configured once at construction. ``init()`` assembles the request pipeline
in a fixed order and binds the server; ``run()`` then serves it.
"""

import threading
from collections.abc import Callable
from enum import StrEnum
from typing import Any

from wren._internal.asgi import Receive, Scope, Send
from wren._internal.types import Logger
from wren.config import AppConfig
from wren.errors import ConfigurationError
from wren.middleware.cors import merge_origins
from wren.middleware.pipeline import MiddlewarePipeline
from wren.middleware.security_headers import SecurityHeadersConfig
from wren.routing.route import Route
from wren.routing.table import RouteTable
from wren.server.errors import ErrorBoundary
from wren.server.handler import handle_request
from wren.server.lifecycle import (
    PounceTransport,
    ServerHandle,
    ServerLifecycle,
    ServerState,
    Transport,
)
from wren.server.not_found import NotFoundHandler, create_error_page_environment


class _Stage(StrEnum):
    """Assembly progress, in ``init()`` order."""

    NEW = "new"
    PIPELINE = "pipeline"
    ROUTES = "routes"
    SERVER = "server"
    READY = "ready"


class Application:
    """The wren application.

    Assembly order is fixed and load-bearing:

    1. Middleware pipeline (security headers, body parsing, CORS, caller stages)
    2. Route table (caller routes in order, then the not-found catch-all)
    3. Server lifecycle start (bind and listen)
    4. Error boundary

    Usage::

        app = Application(
            AppConfig(port=3000, routes=(Route("/todos", "get", list_todos),)),
            logger=logging.getLogger("todos"),
        )
        app.run()

    Thread safety:
        Configuration is immutable. In-process assembly (``TestClient``,
        first ASGI request without ``init()``) takes a lock with a
        double-check so it happens once. After assembly the allow-list,
        stage tuple, and route table are read-only.
    """

    __slots__ = (
        "_allowed_origins",
        "_assembly_lock",
        "_lifecycle",
        "_logger",
        "_pipeline",
        "_routes",
        "_stage",
        "config",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        logger: Logger | None = None,
        transport: Transport | None = None,
        secure_transport: Transport | None = None,
    ) -> None:
        self.config: AppConfig = (config or AppConfig()).resolve()
        self._logger = logger
        self._allowed_origins: frozenset[str] = merge_origins(self.config.allowed_cors_origin)
        self._pipeline = MiddlewarePipeline(
            allowed_origins=self._allowed_origins,
            caller_stages=self.config.middleware,
            max_body_size=self.config.max_body_size,
            security=SecurityHeadersConfig(
                content_security_policy=self.config.content_security_policy,
            ),
        )
        self._routes = RouteTable()
        self._lifecycle = ServerLifecycle(
            host=self.config.host,
            port=self.config.port,
            secure=self.config.is_secure_http,
            logger=logger,
            transport=transport or PounceTransport(log_level=self.config.log_level),
            secure_transport=secure_transport,
            app_name=self.config.app_name,
            environment=self.config.environment,
        )
        self._stage = _Stage.NEW
        self._assembly_lock = threading.Lock()

    # -- Collaborators --

    @property
    def logger(self) -> Logger | None:
        return self._logger

    @logger.setter
    def logger(self, logger: Logger) -> None:
        """Supply the logger after construction. Must happen before ``init()``."""
        if self._stage is not _Stage.NEW:
            msg = "The logger cannot be replaced after assembly has started."
            raise ConfigurationError(msg)
        self._logger = logger
        self._lifecycle.logger = logger

    # -- Read-only views --

    @property
    def allowed_origins(self) -> frozenset[str]:
        """The merged CORS allow-list (defaults plus configured extras)."""
        return self._allowed_origins

    @property
    def is_secure_http(self) -> bool:
        return self.config.is_secure_http

    @property
    def state(self) -> ServerState:
        return self._lifecycle.state

    @property
    def handle(self) -> ServerHandle | None:
        """The bound listener after ``init()``, else ``None``."""
        return self._lifecycle.handle

    @property
    def routes(self) -> list[Route]:
        return self._routes.routes

    @property
    def pipeline(self) -> MiddlewarePipeline:
        return self._pipeline

    @property
    def is_ready(self) -> bool:
        return self._stage is _Stage.READY

    # -- Assembly --

    def init(self) -> ServerHandle:
        """Assemble the pipeline and bind the server. Callable once.

        The logger is checked first, so a missing logger fails before the
        pipeline is built or any socket is opened.

        Raises:
            ConfigurationError: Missing logger, invalid route, missing secure
                transport, or a second call.
            BindError: The listening socket could not be bound.
        """
        with self._assembly_lock:
            if self._stage is not _Stage.NEW:
                msg = f"{self.config.app_name}: init() may only be called once."
                raise ConfigurationError(msg)
            if self.logger is None:
                msg = "A logger with info() and error() is required before init()."
                raise ConfigurationError(msg)
            self._lifecycle.select_transport()

            self._build_pipeline()
            self._build_routes()
            handle = self._start_server()
            self._install_error_handler()
            return handle

    def run(self) -> None:
        """Initialize if needed, then serve until shutdown. Blocks."""
        if self._stage is _Stage.NEW:
            self.init()
        self._lifecycle.serve(self)

    def close(self) -> None:
        """Release the listener without serving."""
        self._lifecycle.close()

    def _build_pipeline(self) -> None:
        self._pipeline.build()
        self._stage = _Stage.PIPELINE

    def _build_routes(self) -> None:
        self._routes.register_all(self.config.routes)
        env = create_error_page_environment(self.config.error_page_dir)
        self._routes.install_catch_all(NotFoundHandler(env, app_name=self.config.app_name))
        self._stage = _Stage.ROUTES

    def _start_server(self) -> ServerHandle:
        handle = self._lifecycle.start()
        self._stage = _Stage.SERVER
        return handle

    def _install_error_handler(self) -> None:
        self._pipeline.install_error_boundary(
            ErrorBoundary(
                logger=self.logger,
                custom_handler=self.config.custom_error_handler,
            )
        )
        self._stage = _Stage.READY

    def _ensure_assembled(self) -> None:
        """Assemble for in-process serving, without binding a socket.

        Runs steps 1, 2, and 4 of ``init()``. Used by the test client and
        by servers that call the ASGI app without ``init()``.
        """
        if self._stage is _Stage.READY:
            return
        with self._assembly_lock:
            if self._stage is _Stage.READY:
                return
            if self._stage is not _Stage.NEW:
                msg = f"Cannot assemble from stage {self._stage.value!r}."
                raise ConfigurationError(msg)
            self._build_pipeline()
            self._build_routes()
            self._install_error_handler()

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_assembled()
        await handle_request(
            scope,
            receive,
            send,
            pipeline=self._pipeline,
            routes=self._routes,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Assembly happens at startup so a configuration error is reported
        to the server instead of surfacing on the first request.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self._ensure_assembled()
                except ConfigurationError as exc:
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    def describe(self) -> list[tuple[str, str, Callable[..., Any]]]:
        """``(method, path, handler)`` for every registered route."""
        return [(str(r.method).upper(), r.path, r.handler) for r in self.routes]
