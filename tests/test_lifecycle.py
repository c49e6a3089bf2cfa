"""Tests for the server lifecycle and its transports."""

import socket

import pytest

from wren.errors import BindError, ConfigurationError
from wren.server.lifecycle import (
    PounceTransport,
    ServerHandle,
    ServerLifecycle,
    ServerState,
    TlsTransport,
)


def _lifecycle(logger, transport, **kwargs) -> ServerLifecycle:
    kwargs.setdefault("host", "127.0.0.1")
    kwargs.setdefault("port", 8800)
    kwargs.setdefault("secure", False)
    return ServerLifecycle(logger=logger, transport=transport, app_name="todos", **kwargs)


class TestStart:
    def test_listening_after_start(self, logger, transport) -> None:
        lifecycle = _lifecycle(logger, transport)
        assert lifecycle.state is ServerState.UNBOUND

        handle = lifecycle.start()

        assert lifecycle.state is ServerState.LISTENING
        assert transport.binds == [("127.0.0.1", 8800)]
        assert handle.port == 8800
        assert handle.url == "http://127.0.0.1:8800"

    def test_banner_is_logged(self, logger, transport) -> None:
        _lifecycle(logger, transport, environment="development").start()
        assert logger.infos == [
            "App Name: todos",
            "Host: 127.0.0.1",
            "Port: 8800",
            "Environment: development",
            "Status: Running (http://127.0.0.1:8800)",
        ]

    def test_missing_logger_fails_before_bind(self, transport) -> None:
        lifecycle = _lifecycle(None, transport)
        with pytest.raises(ConfigurationError, match="logger"):
            lifecycle.start()
        assert transport.binds == []
        assert lifecycle.state is ServerState.UNBOUND

    def test_start_twice(self, logger, transport) -> None:
        lifecycle = _lifecycle(logger, transport)
        lifecycle.start()
        with pytest.raises(ConfigurationError):
            lifecycle.start()
        assert len(transport.binds) == 1


class TestSecureSelection:
    def test_secure_uses_secure_transport(self, logger, transport, secure_transport) -> None:
        lifecycle = _lifecycle(
            logger, transport, secure=True, secure_transport=secure_transport
        )
        handle = lifecycle.start()
        assert transport.binds == []
        assert secure_transport.binds == [("127.0.0.1", 8800)]
        assert handle.scheme == "https"

    def test_secure_without_secure_transport(self, logger, transport) -> None:
        lifecycle = _lifecycle(logger, transport, secure=True)
        with pytest.raises(ConfigurationError, match="secure transport"):
            lifecycle.start()
        assert transport.binds == []

    def test_tls_transport_requires_files(self, tmp_path) -> None:
        with pytest.raises(ConfigurationError, match="not found"):
            TlsTransport(tmp_path / "cert.pem", tmp_path / "key.pem")

    def test_tls_options(self, tmp_path) -> None:
        cert = tmp_path / "cert.pem"
        key = tmp_path / "key.pem"
        cert.write_text("cert")
        key.write_text("key")
        tls = TlsTransport(cert, key)
        tls.host, tls.port = "127.0.0.1", 8443
        options = tls.server_options()
        assert options["ssl_certfile"] == str(cert)
        assert options["ssl_keyfile"] == str(key)
        assert tls.scheme == "https"


class TestBindFailures:
    def test_os_error_becomes_bind_error(self, logger, failing_transport) -> None:
        cause = OSError(98, "Address already in use")
        transport = failing_transport(cause)
        lifecycle = _lifecycle(logger, transport)

        with pytest.raises(BindError) as exc_info:
            lifecycle.start()

        assert exc_info.value.__cause__ is cause
        assert lifecycle.state is ServerState.FAILED
        assert logger.errors == [cause]
        assert len(transport.binds) == 1

    def test_other_errors_are_reraised(self, logger, failing_transport) -> None:
        transport = failing_transport(ValueError("bad host"))
        lifecycle = _lifecycle(logger, transport)

        with pytest.raises(ValueError, match="bad host"):
            lifecycle.start()
        assert lifecycle.state is ServerState.FAILED

    def test_real_port_conflict(self, logger) -> None:
        occupied = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        occupied.bind(("127.0.0.1", 0))
        occupied.listen()
        port = occupied.getsockname()[1]
        try:
            lifecycle = _lifecycle(logger, PounceTransport(), port=port)
            with pytest.raises(BindError):
                lifecycle.start()
            assert lifecycle.state is ServerState.FAILED
        finally:
            occupied.close()


class TestPounceTransport:
    def test_bind_port_zero(self, logger) -> None:
        transport = PounceTransport()
        lifecycle = _lifecycle(logger, transport, port=0)
        try:
            handle = lifecycle.start()
            assert handle.port > 0
            assert transport.server_options()["port"] == handle.port
        finally:
            lifecycle.close()

    def test_options_before_bind(self) -> None:
        with pytest.raises(ConfigurationError):
            PounceTransport().server_options()

    def test_serve_before_start(self, logger, transport) -> None:
        with pytest.raises(ConfigurationError):
            _lifecycle(logger, transport).serve(lambda *a: None)


class TestServerHandle:
    def test_ipv6_url(self, transport) -> None:
        handle = ServerHandle(address="::1", port=80, scheme="http", transport=transport)
        assert handle.url == "http://[::1]:80"


class TestLogStatus:
    def test_without_logger_raises(self, transport) -> None:
        lifecycle = _lifecycle(None, transport)
        handle = ServerHandle(address="127.0.0.1", port=1, scheme="http", transport=transport)
        with pytest.raises(ConfigurationError, match="logger"):
            lifecycle.log_status(handle)
