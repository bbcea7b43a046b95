"""
Unit tests for the regex router.
"""

import re

import pytest

from muxserver.http import RequestContext, RouteConfigError
from muxserver.http.router import Router, Route, RouteMatch, not_found
from muxserver.http.request import HTTPRequest
from muxserver.http.response import ResponseWriter


def make_request(method: str, path: str) -> HTTPRequest:
    """Helper to create a request for testing."""
    return HTTPRequest(method=method, path=path)


def dispatch(router: Router, path: str, method: str = "GET") -> ResponseWriter:
    """Run one request through the router and return the writer."""
    writer = ResponseWriter()
    router.dispatch(writer, make_request(method, path))
    return writer


def hello_router() -> Router:
    router = Router()

    @router.route(r"^/hello$")
    def hello(ctx):
        ctx.text(200, "Hello world")

    @router.route(r"/hello/([\w._-]+)$")
    def hello_name(ctx):
        ctx.text(200, f"Hello {ctx.captures[0]}")

    return router


class TestRoute:
    """Tests for a single Route."""

    def test_match_returns_captures(self):
        route = Route(re.compile(r"/hello/([\w._-]+)$"), not_found)

        assert route.match("/hello/Patrick") == ("Patrick",)
        assert route.match("/hello") is None

    def test_match_without_groups(self):
        route = Route(re.compile(r"^/hello$"), not_found)

        assert route.match("/hello") == ()

    def test_unmatched_group_is_empty_string(self):
        """A group that did not participate captures ""."""
        route = Route(re.compile(r"^/files(/(\w+))?$"), not_found)

        assert route.match("/files") == ("", "")
        assert route.match("/files/a") == ("/a", "a")

    def test_search_is_unanchored(self):
        """Without ^ the pattern may match anywhere in the path."""
        route = Route(re.compile(r"/hello/([\w._-]+)$"), not_found)

        assert route.match("/x/hello/Patrick") == ("Patrick",)

    def test_source(self):
        route = Route(re.compile(r"^/hello$"), not_found)
        assert route.source == r"^/hello$"


class TestRegistration:
    """Tests for building the route table."""

    def test_register_appends_in_order(self):
        router = Router()
        first = router.register(r"^/a$", not_found)
        second = router.register(r"^/b$", not_found)

        assert router.routes == (first, second)
        assert first.source == r"^/a$"

    def test_invalid_pattern_raises(self):
        router = Router()

        with pytest.raises(RouteConfigError) as exc_info:
            router.register(r"/hello/([\w", not_found)

        assert exc_info.value.pattern == r"/hello/([\w"
        assert router.routes == ()

    def test_route_config_error_is_value_error(self):
        with pytest.raises(ValueError):
            Router().register("(", not_found)

    def test_non_callable_handler_raises(self):
        with pytest.raises(RouteConfigError):
            Router().register(r"^/$", "not a function")

    def test_non_callable_default_handler_raises(self):
        with pytest.raises(RouteConfigError):
            Router(default_handler=42)

    def test_decorator_returns_function(self):
        router = Router()

        @router.route(r"^/ping$")
        def ping(ctx):
            ctx.text(200, "pong")

        assert router.routes[0].handler is ping
        assert dispatch(router, "/ping").to_response().text == "pong\n"

    def test_register_after_dispatch_raises(self):
        router = hello_router()
        assert not router.sealed

        dispatch(router, "/hello")

        assert router.sealed
        with pytest.raises(RouteConfigError):
            router.register(r"^/late$", not_found)
        assert len(router.routes) == 2

    def test_seal_explicitly(self):
        router = Router()
        router.seal()

        with pytest.raises(RouteConfigError):
            router.register(r"^/$", not_found)


class TestMatching:
    """Tests for Router.match()."""

    def test_first_match_wins(self):
        router = Router()
        broad = router.register(r"^/hello", not_found)
        router.register(r"^/hello/([\w._-]+)$", not_found)

        found = router.match("/hello/Patrick")

        assert isinstance(found, RouteMatch)
        assert found.route is broad
        assert found.captures == ()

    def test_registration_order_not_specificity(self):
        router = Router()
        specific = router.register(r"^/hello/Patrick$", not_found)
        router.register(r"^/hello/(\w+)$", not_found)

        assert router.match("/hello/Patrick").route is specific
        assert router.match("/hello/Bob").captures == ("Bob",)

    def test_no_match(self):
        assert hello_router().match("/goodbye") is None

    def test_empty_router(self):
        assert Router().match("/") is None


class TestDispatch:
    """Tests for dispatching requests."""

    def test_exact_route(self):
        writer = dispatch(hello_router(), "/hello")
        response = writer.to_response()

        assert response.status == 200
        assert response.headers["Content-Type"] == "text/plain"
        assert response.text == "Hello world\n"

    def test_capture_route(self):
        response = dispatch(hello_router(), "/hello/Patrick").to_response()

        assert response.status == 200
        assert response.text == "Hello Patrick\n"

    def test_capture_allows_dots_and_dashes(self):
        response = dispatch(hello_router(), "/hello/j.r-r_t").to_response()
        assert response.text == "Hello j.r-r_t\n"

    def test_unmatched_path_gets_default_404(self):
        response = dispatch(hello_router(), "/goodbye").to_response()

        assert response.status == 404
        assert response.headers["Content-Type"] == "text/plain"
        assert response.text == "Not found\n"

    def test_bare_prefix_is_not_found(self):
        """The capture needs at least one character."""
        response = dispatch(hello_router(), "/hello/").to_response()
        assert response.status == 404

    def test_nested_name_is_not_found(self):
        response = dispatch(hello_router(), "/hello/a/b").to_response()
        assert response.status == 404

    def test_every_method_is_routed(self):
        for method in ("GET", "POST", "DELETE"):
            response = dispatch(hello_router(), "/hello", method).to_response()
            assert response.text == "Hello world\n"

    def test_custom_default_handler(self):
        seen = []

        def fallback(ctx):
            seen.append(ctx.captures)
            ctx.text(410, "Gone")

        router = Router(default_handler=fallback)
        response = dispatch(router, "/anything").to_response()

        assert seen == [()]
        assert response.status == 410
        assert response.text == "Gone\n"

    def test_exactly_one_handler_runs(self):
        calls = []
        router = Router()
        router.register(r"^/a", lambda ctx: calls.append("first"))
        router.register(r"^/a$", lambda ctx: calls.append("second"))

        dispatch(router, "/a")

        assert calls == ["first"]

    def test_handler_receives_request_context(self):
        received = []
        router = Router()
        router.register(r"^/items/(\d+)$", received.append)

        dispatch(router, "/items/42")

        ctx = received[0]
        assert isinstance(ctx, RequestContext)
        assert ctx.captures == ("42",)
        assert ctx.path == "/items/42"

    def test_router_is_callable_handler(self):
        router = hello_router()
        writer = ResponseWriter()

        router(writer, make_request("GET", "/hello"))

        assert writer.status == 200

    def test_dispatch_is_repeatable(self):
        router = hello_router()
        first = dispatch(router, "/hello/Patrick").to_response()
        second = dispatch(router, "/hello/Patrick").to_response()

        assert (first.status, first.headers, first.body) == (
            second.status, second.headers, second.body
        )


class TestPrintRoutes:
    """Tests for the route table printout."""

    def test_lists_routes_and_default(self, capsys):
        hello_router().print_routes()

        out = capsys.readouterr().out
        assert "Registered Routes:" in out
        assert r"^/hello$" in out
        assert "hello_name" in out
        assert "(default)" in out
        assert "not_found" in out
