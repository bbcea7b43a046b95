"""
Unit tests for the four example servers.
"""

import pytest

from muxserver.http import HTTPRequest, ResponseWriter, Router, ServeMux
from muxserver.stages import STAGES, HelloApp, build_stage


def get(app, path: str):
    writer = ResponseWriter()
    app(writer, HTTPRequest(method="GET", path=path))
    return writer.to_response()


HELLO_STAGES = ["servemux", "response", "router"]


class TestHelloStages:
    """Behaviour shared by the servemux, response and router stages."""

    @pytest.mark.parametrize("stage", HELLO_STAGES)
    def test_hello(self, stage):
        response = get(build_stage(stage), "/hello")

        assert response.status == 200
        assert response.headers["Content-Type"] == "text/plain"
        assert response.body == b"Hello world\n"

    @pytest.mark.parametrize("stage", HELLO_STAGES)
    def test_hello_name(self, stage):
        response = get(build_stage(stage), "/hello/Patrick")

        assert response.status == 200
        assert response.body == b"Hello Patrick\n"

    @pytest.mark.parametrize("stage", HELLO_STAGES)
    def test_unknown_path(self, stage):
        response = get(build_stage(stage), "/goodbye")

        assert response.status == 404
        assert response.headers["Content-Type"] == "text/plain"
        assert response.body == b"Not found\n"

    @pytest.mark.parametrize("stage", HELLO_STAGES)
    def test_stages_agree(self, stage):
        expected = get(build_stage("router"), "/hello/Patrick")
        actual = get(build_stage(stage), "/hello/Patrick")

        assert (actual.status, actual.headers, actual.body) == (
            expected.status, expected.headers, expected.body
        )


class TestEmptyName:
    """A bare "/hello/" differs between the multiplexer and the router."""

    @pytest.mark.parametrize("stage", ["servemux", "response"])
    def test_servemux_greets_nobody(self, stage):
        response = get(build_stage(stage), "/hello/")

        assert response.status == 200
        assert response.body == b"Hello \n"

    def test_router_rejects_empty_name(self):
        assert get(build_stage("router"), "/hello/").status == 404

    def test_servemux_keeps_nested_segments(self):
        assert get(build_stage("servemux"), "/hello/a/b").body == b"Hello a/b\n"

    @pytest.mark.parametrize("stage", ["servemux", "response"])
    def test_servemux_redirects_unclean_path(self, stage):
        response = get(build_stage(stage), "//hello/Patrick")

        assert response.status == 301
        assert response.headers["Location"] == "/hello/Patrick"

    def test_router_sees_raw_path(self):
        """The unanchored name pattern still finds /hello/ in "//hello/Patrick"."""
        response = get(build_stage("router"), "//hello/Patrick")

        assert response.status == 200
        assert response.body == b"Hello Patrick\n"

    def test_handler_stage_ignores_dot_segments(self):
        assert get(HelloApp(), "/x/../hello/Patrick").status == 200


class TestHandlerStage:
    """The single handler object answers everything."""

    @pytest.mark.parametrize("path", ["/", "/hello", "/hello/Patrick", "/x/y/z"])
    def test_every_path(self, path):
        response = get(HelloApp(), path)

        assert response.status == 200
        assert response.headers["Content-Type"] == "text/plain"
        assert response.body == b"Hello world\n"


class TestRegistry:
    """Tests for STAGES and build_stage()."""

    def test_names(self):
        assert set(STAGES) == {"servemux", "response", "handler", "router"}

    def test_types(self):
        assert isinstance(build_stage("servemux"), ServeMux)
        assert isinstance(build_stage("response"), ServeMux)
        assert isinstance(build_stage("handler"), HelloApp)
        assert isinstance(build_stage("router"), Router)

    def test_fresh_app_each_time(self):
        assert build_stage("router") is not build_stage("router")

    def test_unknown_stage(self):
        with pytest.raises(KeyError):
            build_stage("nope")

    def test_router_table(self):
        router = build_stage("router")
        assert [route.source for route in router.routes] == [
            r"^/hello$",
            r"/hello/([\w._-]+)$",
        ]
