"""Tests for path parsing, method parsing, and trie matching."""

import pytest

from wren.errors import ConfigurationError
from wren.routing.methods import HttpMethod
from wren.routing.route import Route
from wren.routing.router import Router, parse_path


def _handler(request):
    return "ok"


def _other(request):
    return "other"


class TestHttpMethod:
    @pytest.mark.parametrize("value", ["get", "GET", "Get", " get "])
    def test_any_case(self, value: str) -> None:
        assert HttpMethod.parse(value) is HttpMethod.GET

    def test_member_passes_through(self) -> None:
        assert HttpMethod.parse(HttpMethod.PATCH) is HttpMethod.PATCH

    def test_all_is_supported(self) -> None:
        assert HttpMethod.parse("all") is HttpMethod.ALL

    @pytest.mark.parametrize("value", ["fetch", "", "CONNECT", 42])
    def test_unknown_raises(self, value) -> None:
        with pytest.raises(ConfigurationError, match="Unsupported route method"):
            HttpMethod.parse(value)


class TestParsePath:
    def test_static(self) -> None:
        segments = parse_path("/todos/archive")
        assert [s.value for s in segments] == ["todos", "archive"]
        assert not any(s.is_param for s in segments)

    def test_root(self) -> None:
        assert parse_path("/") == []

    def test_typed_param(self) -> None:
        (_, seg) = parse_path("/todos/{id:int}")
        assert seg.is_param
        assert seg.param_name == "id"
        assert seg.param_type == "int"

    def test_unknown_converter(self) -> None:
        with pytest.raises(ConfigurationError, match="converter"):
            parse_path("/todos/{id:uuid}")

    def test_relative_path(self) -> None:
        with pytest.raises(ConfigurationError, match="must start with"):
            parse_path("todos")


class TestMatch:
    def _router(self, *routes: Route) -> Router:
        router = Router()
        for route in routes:
            router.add(route)
        router.compile()
        return router

    def test_static_match(self) -> None:
        router = self._router(Route("/todos", "get", _handler))
        match = router.match("GET", "/todos")
        assert match is not None
        assert match.route.handler is _handler

    def test_trailing_slash_is_ignored(self) -> None:
        router = self._router(Route("/todos", "get", _handler))
        assert router.match("GET", "/todos/") is not None

    def test_method_mismatch_is_none(self) -> None:
        router = self._router(Route("/todos", "get", _handler))
        assert router.match("POST", "/todos") is None

    def test_unknown_path_is_none(self) -> None:
        router = self._router(Route("/todos", "get", _handler))
        assert router.match("GET", "/users") is None

    def test_all_matches_every_method(self) -> None:
        router = self._router(Route("/health", "all", _handler))
        for method in ("GET", "POST", "DELETE", "PATCH"):
            assert router.match(method, "/health") is not None

    def test_exact_method_beats_all(self) -> None:
        router = self._router(
            Route("/todos", "all", _other),
            Route("/todos", "get", _handler),
        )
        assert router.match("GET", "/todos").route.handler is _handler
        assert router.match("PUT", "/todos").route.handler is _other

    def test_first_registration_wins(self) -> None:
        router = self._router(
            Route("/todos", "get", _handler),
            Route("/todos", "get", _other),
        )
        assert router.match("GET", "/todos").route.handler is _handler
        assert len(router.routes) == 2

    def test_params_are_captured(self) -> None:
        router = self._router(Route("/todos/{id:int}", "get", _handler))
        match = router.match("GET", "/todos/42")
        assert match is not None
        assert match.path_params == {"id": 42}
        assert router.match("GET", "/todos/abc") is None

    def test_static_beats_param(self) -> None:
        router = self._router(
            Route("/todos/{id}", "get", _other),
            Route("/todos/archive", "get", _handler),
        )
        assert router.match("GET", "/todos/archive").route.handler is _handler
        assert router.match("GET", "/todos/7").route.handler is _other

    def test_backtracks_from_static_to_param(self) -> None:
        router = self._router(
            Route("/todos/archive", "get", _handler),
            Route("/todos/{id}", "delete", _other),
        )
        assert router.match("DELETE", "/todos/archive").route.handler is _other

    def test_path_converter_takes_the_rest(self) -> None:
        router = self._router(Route("/files/{rest:path}", "get", _handler))
        match = router.match("GET", "/files/a/b/c.txt")
        assert match is not None
        assert match.path_params == {"rest": "a/b/c.txt"}

    def test_add_after_compile_raises(self) -> None:
        router = self._router()
        with pytest.raises(ConfigurationError):
            router.add(Route("/late", "get", _handler))

    def test_unknown_method_raises_on_add(self) -> None:
        with pytest.raises(ConfigurationError):
            Router().add(Route("/todos", "fetch", _handler))


class TestHeadFallback:
    def _router(self, *routes: Route) -> Router:
        router = Router()
        for route in routes:
            router.add(route)
        router.compile()
        return router

    def test_head_uses_get_route(self) -> None:
        router = self._router(Route("/todos", "get", _handler))
        match = router.match("HEAD", "/todos")
        assert match is not None
        assert match.route.handler is _handler

    def test_explicit_head_beats_get(self) -> None:
        router = self._router(
            Route("/todos", "get", _handler),
            Route("/todos", "head", _other),
        )
        assert router.match("HEAD", "/todos").route.handler is _other

    def test_get_beats_all_for_head(self) -> None:
        router = self._router(
            Route("/todos", "all", _other),
            Route("/todos", "get", _handler),
        )
        assert router.match("HEAD", "/todos").route.handler is _handler

    def test_head_does_not_fall_back_to_post(self) -> None:
        router = self._router(Route("/todos", "post", _handler))
        assert router.match("HEAD", "/todos") is None


class TestParamNamesAndTypes:
    def _router(self, *routes: Route) -> Router:
        router = Router()
        for route in routes:
            router.add(route)
        router.compile()
        return router

    def test_each_route_keeps_its_own_names(self) -> None:
        router = self._router(
            Route("/todos/{id}", "get", _handler),
            Route("/todos/{todo_id}", "put", _other),
        )
        assert router.match("GET", "/todos/7").path_params == {"id": "7"}
        assert router.match("PUT", "/todos/7").path_params == {"todo_id": "7"}

    def test_converter_is_not_shared_across_routes(self) -> None:
        router = self._router(
            Route("/todos/{id}", "get", _handler),
            Route("/todos/{todo_id:int}", "put", _other),
        )
        match = router.match("PUT", "/todos/7")
        assert match.route.handler is _other
        assert match.path_params == {"todo_id": 7}
        # The int constraint still applies to the PUT route
        assert router.match("PUT", "/todos/abc") is None
        assert router.match("GET", "/todos/abc").path_params == {"id": "abc"}

    def test_typed_param_tried_before_str(self) -> None:
        router = self._router(
            Route("/items/{slug}", "get", _other),
            Route("/items/{item_id:int}", "get", _handler),
        )
        assert router.match("GET", "/items/12").route.handler is _handler
        assert router.match("GET", "/items/widget").route.handler is _other

    def test_values_are_converted(self) -> None:
        router = self._router(
            Route("/prices/{amount:float}", "get", _handler),
            Route("/files/{rest:path}", "get", _other),
        )
        assert router.match("GET", "/prices/2.5").path_params == {"amount": 2.5}
        assert router.match("GET", "/files/a/b").path_params == {"rest": "a/b"}

    def test_nested_params_keep_order(self) -> None:
        router = self._router(Route("/users/{user_id:int}/todos/{slug}", "get", _handler))
        assert router.match("GET", "/users/3/todos/milk").path_params == {
            "user_id": 3,
            "slug": "milk",
        }

    def test_path_param_must_be_last(self) -> None:
        with pytest.raises(ConfigurationError, match="last segment"):
            parse_path("/files/{rest:path}/meta")
