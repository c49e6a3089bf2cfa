"""Shared fixtures: a recording logger and a socket-free transport."""

from typing import Any

import pytest

from wren.app import Application
from wren.config import AppConfig


class RecordingLogger:
    """Logger double that keeps every message it receives."""

    def __init__(self) -> None:
        self.infos: list[Any] = []
        self.errors: list[Any] = []

    def info(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        self.infos.append(msg)

    def error(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        self.errors.append(msg)


class FakeTransport:
    """Transport double. Records binds instead of opening sockets."""

    def __init__(
        self,
        scheme: str = "http",
        *,
        port: int = 8800,
        fail_with: BaseException | None = None,
    ) -> None:
        self.scheme = scheme
        self.port = port
        self.fail_with = fail_with
        self.binds: list[tuple[str, int]] = []
        self.served: list[Any] = []
        self.closed = False

    def bind(self, host: str, port: int) -> tuple[str, int]:
        self.binds.append((host, port))
        if self.fail_with is not None:
            raise self.fail_with
        return host, port or self.port

    def serve(self, app: Any) -> None:
        self.served.append(app)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def make_app(logger: RecordingLogger, transport: FakeTransport):
    """Build an Application wired to the recording logger and fake transport."""

    def _make(config: AppConfig | None = None, **kwargs: Any) -> Application:
        kwargs.setdefault("logger", logger)
        kwargs.setdefault("transport", transport)
        return Application(config or AppConfig(environment="development"), **kwargs)

    return _make


@pytest.fixture
def secure_transport() -> FakeTransport:
    return FakeTransport("https", port=8443)


@pytest.fixture
def failing_transport():
    """Factory for a transport whose ``bind()`` raises *error*."""

    def _make(error: BaseException) -> FakeTransport:
        return FakeTransport(fail_with=error)

    return _make
