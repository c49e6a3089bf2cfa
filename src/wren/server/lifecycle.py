"""Server lifecycle — bind once, report, then serve.

States::

    UNBOUND --start()--> BINDING --bind ok--> LISTENING
                             \
                              --bind error--> FAILED

A failed bind is fatal: the error is logged and re-raised (``OSError``
as ``BindError``, anything else unchanged). There is no retry and no
backoff. Binding blocks until the socket is listening and has no
timeout.

Transports are pluggable. ``PounceTransport`` serves plain HTTP through
pounce; ``TlsTransport`` adds a certificate and key. When the lifecycle
is secure it uses the secure transport it was given and never falls back
to plain HTTP.
"""

import socket
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Any, Protocol

from wren._internal.asgi import ASGIApp
from wren._internal.types import Logger
from wren.errors import BindError, ConfigurationError


class ServerState(StrEnum):
    UNBOUND = "unbound"
    BINDING = "binding"
    LISTENING = "listening"
    FAILED = "failed"


class Transport(Protocol):
    """What the lifecycle needs from a server transport."""

    scheme: str

    def bind(self, host: str, port: int) -> tuple[str, int]:
        """Bind and listen; return the resolved ``(address, port)``."""
        ...

    def serve(self, app: ASGIApp) -> None:
        """Serve *app* until shutdown. Blocks."""
        ...

    def close(self) -> None: ...


@dataclass(frozen=True, slots=True)
class ServerHandle:
    """The bound listener, as seen by the rest of the application."""

    address: str
    port: int
    scheme: str
    transport: Transport

    @property
    def url(self) -> str:
        host = self.address or "localhost"
        if ":" in host:
            host = f"[{host}]"
        return f"{self.scheme}://{host}:{self.port}"


class PounceTransport:
    """Plain HTTP through the pounce ASGI server.

    ``bind()`` reserves the listening socket itself so that bind errors
    and the resolved port (including port 0) are known before serving
    starts. ``serve()`` releases the reservation and hands the resolved
    port to pounce.
    """

    scheme = "http"

    __slots__ = ("_socket", "host", "log_level", "port", "workers")

    def __init__(self, *, workers: int = 1, log_level: str = "info") -> None:
        self.workers = workers
        self.log_level = log_level
        self.host: str | None = None
        self.port: int | None = None
        self._socket: socket.socket | None = None

    def bind(self, host: str, port: int) -> tuple[str, int]:
        family = socket.AF_INET6 if ":" in host else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((host, port))
            sock.listen()
        except BaseException:
            sock.close()
            raise
        self._socket = sock
        address, bound_port = sock.getsockname()[:2]
        self.host, self.port = address, bound_port
        return address, bound_port

    def server_options(self) -> dict[str, Any]:
        """Keyword arguments for ``pounce.config.ServerConfig``."""
        if self.host is None or self.port is None:
            msg = "Transport is not bound."
            raise ConfigurationError(msg)
        return {
            "host": self.host,
            "port": self.port,
            "workers": self.workers,
            "log_level": self.log_level,
        }

    def serve(self, app: ASGIApp) -> None:
        from pounce.config import ServerConfig
        from pounce.server import Server

        config = ServerConfig(**self.server_options())
        self.close()
        server = Server(config, app)
        server.run()

    def close(self) -> None:
        if self._socket is not None:
            self._socket.close()
            self._socket = None


class TlsTransport(PounceTransport):
    """HTTPS through pounce, with the given certificate and private key.

    Raises:
        ConfigurationError: If either file does not exist.
    """

    scheme = "https"

    __slots__ = ("certfile", "keyfile")

    def __init__(
        self,
        certfile: str | Path,
        keyfile: str | Path,
        *,
        workers: int = 1,
        log_level: str = "info",
    ) -> None:
        super().__init__(workers=workers, log_level=log_level)
        for label, path in (("certificate", certfile), ("private key", keyfile)):
            if not Path(path).is_file():
                msg = f"TLS {label} file not found: {path}"
                raise ConfigurationError(msg)
        self.certfile = str(certfile)
        self.keyfile = str(keyfile)

    def server_options(self) -> dict[str, Any]:
        return {
            **super().server_options(),
            "ssl_certfile": self.certfile,
            "ssl_keyfile": self.keyfile,
        }


class ServerLifecycle:
    """Owns the listener for one application.

    Usage::

        lifecycle = ServerLifecycle(host="0.0.0.0", port=8800, secure=False, logger=log)
        handle = lifecycle.start()      # bound and listening, banner logged
        lifecycle.serve(app)            # blocks
    """

    __slots__ = (
        "_handle",
        "_state",
        "app_name",
        "environment",
        "host",
        "logger",
        "port",
        "secure",
        "secure_transport",
        "transport",
    )

    def __init__(
        self,
        *,
        host: str,
        port: int,
        secure: bool,
        logger: Logger | None,
        transport: Transport | None = None,
        secure_transport: Transport | None = None,
        app_name: str = "",
        environment: str = "development",
    ) -> None:
        self.host = host
        self.port = port
        self.secure = secure
        self.logger = logger
        self.transport = transport
        self.secure_transport = secure_transport
        self.app_name = app_name
        self.environment = environment
        self._state = ServerState.UNBOUND
        self._handle: ServerHandle | None = None

    @property
    def state(self) -> ServerState:
        return self._state

    @property
    def handle(self) -> ServerHandle | None:
        """The bound listener once ``LISTENING``, else ``None``."""
        return self._handle

    def select_transport(self) -> Transport:
        """The transport ``start()`` will bind.

        Raises:
            ConfigurationError: Secure mode without a secure transport.
        """
        if self.secure:
            if self.secure_transport is None:
                msg = (
                    "Secure HTTP is enabled (is_secure_http=True or production "
                    "environment) but no secure transport was supplied. Pass "
                    "secure_transport=TlsTransport(certfile, keyfile)."
                )
                raise ConfigurationError(msg)
            return self.secure_transport
        return self.transport if self.transport is not None else PounceTransport()

    def start(self) -> ServerHandle:
        """Bind the listener. One-shot.

        Raises:
            ConfigurationError: Missing logger or transport, or not ``UNBOUND``.
                Raised before any socket is opened.
            BindError: The socket could not be bound.
        """
        if self._state is not ServerState.UNBOUND:
            msg = f"Cannot start a server that is {self._state.value}."
            raise ConfigurationError(msg)
        if self.logger is None:
            msg = "A logger with info() and error() is required to start the server."
            raise ConfigurationError(msg)
        transport = self.select_transport()

        self._state = ServerState.BINDING
        try:
            address, port = transport.bind(self.host, self.port)
        except OSError as exc:
            self._state = ServerState.FAILED
            self.logger.error(exc)
            msg = f"Cannot listen on {self.host}:{self.port}: {exc.strerror or exc}"
            raise BindError(msg) from exc
        except Exception as exc:
            self._state = ServerState.FAILED
            self.logger.error(exc)
            raise

        self._handle = ServerHandle(
            address=address, port=port, scheme=transport.scheme, transport=transport
        )
        self._state = ServerState.LISTENING
        self.log_status(self._handle)
        return self._handle

    def log_status(self, handle: ServerHandle) -> None:
        """Report the running instance through the logger."""
        if self.logger is None:
            msg = "A logger is required to report server status."
            raise ConfigurationError(msg)
        self.logger.info(f"App Name: {self.app_name}")
        self.logger.info(f"Host: {handle.address or 'localhost'}")
        self.logger.info(f"Port: {handle.port}")
        self.logger.info(f"Environment: {self.environment}")
        self.logger.info(f"Status: Running ({handle.url})")

    def serve(self, app: ASGIApp) -> None:
        """Serve *app* on the bound transport. Blocks until shutdown."""
        if self._handle is None or self._state is not ServerState.LISTENING:
            msg = f"Cannot serve from state {self._state.value}; call start() first."
            raise ConfigurationError(msg)
        self._handle.transport.serve(app)

    def close(self) -> None:
        """Release the listener, if any."""
        if self._handle is not None:
            self._handle.transport.close()
