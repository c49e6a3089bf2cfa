"""Tests for the fixed pipeline order and the security-headers stage."""

import pytest

from wren.config import AppConfig
from wren.errors import ConfigurationError
from wren.middleware.body import BodyParserMiddleware
from wren.middleware.cors import CORSMiddleware, merge_origins
from wren.middleware.pipeline import MiddlewarePipeline
from wren.middleware.security_headers import (
    SecurityHeadersConfig,
    SecurityHeadersMiddleware,
)
from wren.routing.route import Route
from wren.server.errors import ErrorBoundary
from wren.testing import TestClient


def _pipeline(*caller_stages) -> MiddlewarePipeline:
    return MiddlewarePipeline(
        allowed_origins=merge_origins(),
        caller_stages=caller_stages,
        max_body_size=1024,
    )


async def _noop(request, next):
    return await next(request)


class TestStageOrder:
    def test_mandatory_stages_come_first(self) -> None:
        pipeline = _pipeline(_noop)
        stages = pipeline.build()
        assert isinstance(stages[0], SecurityHeadersMiddleware)
        assert isinstance(stages[1], BodyParserMiddleware)
        assert isinstance(stages[2], CORSMiddleware)
        assert stages[3] is _noop

    def test_boundary_sits_inside_security_headers(self) -> None:
        pipeline = _pipeline(_noop)
        pipeline.build()
        boundary = ErrorBoundary()
        pipeline.install_error_boundary(boundary)
        stages = pipeline.stages
        assert isinstance(stages[0], SecurityHeadersMiddleware)
        assert stages[1] is boundary
        assert isinstance(stages[2], BodyParserMiddleware)
        assert stages[-1] is _noop

    def test_caller_stages_keep_their_order(self) -> None:
        async def first(request, next):
            return await next(request)

        async def second(request, next):
            return await next(request)

        stages = _pipeline(first, second).build()
        assert stages[3:] == (first, second)

    async def test_caller_stages_run_in_order(self, make_app) -> None:
        seen: list[str] = []

        def make_stage(name):
            async def stage(request, next):
                seen.append(name)
                return await next(request)

            return stage

        app = make_app(
            AppConfig(
                environment="development",
                middleware=(make_stage("a"), make_stage("b")),
                routes=(Route("/", "get", lambda request: "ok"),),
            )
        )
        async with TestClient(app) as client:
            response = await client.get("/")

        assert response.status == 200
        assert seen == ["a", "b"]


class TestBuildContract:
    def test_build_twice_raises(self) -> None:
        pipeline = _pipeline()
        pipeline.build()
        with pytest.raises(ConfigurationError):
            pipeline.build()

    def test_non_callable_stage_raises(self) -> None:
        pipeline = _pipeline("not a middleware")
        with pytest.raises(ConfigurationError, match="not callable"):
            pipeline.build()

    def test_boundary_requires_build(self) -> None:
        with pytest.raises(ConfigurationError):
            _pipeline().install_error_boundary(ErrorBoundary())

    def test_stages_before_build_raises(self) -> None:
        with pytest.raises(ConfigurationError):
            _ = _pipeline().stages


class TestSecurityHeaders:
    def test_default_pairs_have_no_csp(self) -> None:
        names = {name for name, _ in SecurityHeadersConfig().header_pairs()}
        assert "Content-Security-Policy" not in names
        assert "X-Content-Type-Options" in names
        assert "Strict-Transport-Security" in names

    def test_disabled_header_is_skipped(self) -> None:
        pairs = SecurityHeadersConfig(x_frame_options=None).header_pairs()
        assert "X-Frame-Options" not in {name for name, _ in pairs}

    async def test_present_on_success(self, make_app) -> None:
        app = make_app(
            AppConfig(
                environment="development",
                routes=(Route("/", "get", lambda request: "ok"),),
            )
        )
        async with TestClient(app) as client:
            response = await client.get("/")

        assert response.status == 200
        assert response.header("X-Content-Type-Options") == "nosniff"
        assert response.header("X-Frame-Options") == "SAMEORIGIN"
        assert response.header("Referrer-Policy") == "no-referrer"
        assert response.header("Content-Security-Policy") is None

    async def test_present_on_error(self, make_app) -> None:
        def boom(request):
            raise RuntimeError("boom")

        app = make_app(
            AppConfig(
                environment="development",
                routes=(Route("/", "get", boom),),
            )
        )
        async with TestClient(app) as client:
            response = await client.get("/")

        assert response.status == 500
        assert response.header("X-Content-Type-Options") == "nosniff"

    async def test_present_on_not_found(self, make_app) -> None:
        async with TestClient(make_app()) as client:
            response = await client.get("/missing")

        assert response.status == 404
        assert response.header("X-Content-Type-Options") == "nosniff"

    async def test_configured_csp(self, make_app) -> None:
        app = make_app(
            AppConfig(
                environment="development",
                content_security_policy="default-src 'self'",
                routes=(Route("/", "get", lambda request: "ok"),),
            )
        )
        async with TestClient(app) as client:
            response = await client.get("/")

        assert response.header("Content-Security-Policy") == "default-src 'self'"

    async def test_handler_header_wins(self, make_app) -> None:
        from wren.http.response import Response

        app = make_app(
            AppConfig(
                environment="development",
                routes=(
                    Route(
                        "/",
                        "get",
                        lambda request: Response("ok").with_header("X-Frame-Options", "DENY"),
                    ),
                ),
            )
        )
        async with TestClient(app) as client:
            response = await client.get("/")

        assert response.header("X-Frame-Options") == "DENY"
