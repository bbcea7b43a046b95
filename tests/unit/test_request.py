"""
Unit tests for HTTP request parsing.
"""

import pytest

from muxserver.http.request import HTTPRequest, RequestParser, HTTPParseError, parse_request


class TestRequestParser:
    """Tests for RequestParser."""

    def test_parse_get_request(self, sample_get_request):
        """Test parsing a GET request."""
        request = RequestParser().parse(sample_get_request, ("127.0.0.1", 50000))

        assert request.method == "GET"
        assert request.path == "/hello/Patrick"
        assert request.version == "HTTP/1.1"
        assert request.raw_query == "greeting=hi&greeting=hey"
        assert request.query_params == {"greeting": ["hi", "hey"]}
        assert request.client_address == ("127.0.0.1", 50000)
        assert request.body == b""

    def test_parse_headers_lowercase(self, sample_get_request):
        request = RequestParser().parse(sample_get_request)

        assert request.headers["host"] == "localhost:9000"
        assert request.host == "localhost:9000"
        assert request.user_agent == "pytest"
        assert request.get_header("ACCEPT") == "text/plain"

    def test_parse_post_request(self, sample_post_request):
        """Test parsing a POST request with a body."""
        request = RequestParser().parse(sample_post_request)

        assert request.method == "POST"
        assert request.path == "/hello"
        assert request.body == b"name=Patrick"
        assert not request.is_keep_alive

    def test_path_is_url_decoded(self):
        request = parse_request(b"GET /hello/Jos%C3%A9 HTTP/1.1\r\n\r\n")
        assert request.path == "/hello/José"

    def test_repeated_headers_are_joined(self):
        data = (
            b"GET / HTTP/1.1\r\n"
            b"Accept: text/plain\r\n"
            b"Accept: text/html\r\n"
            b"\r\n"
        )
        request = parse_request(data)

        assert request.headers["accept"] == "text/plain, text/html"

    def test_header_continuation_line(self):
        data = (
            b"GET / HTTP/1.1\r\n"
            b"X-Long: first\r\n"
            b"  second\r\n"
            b"\r\n"
        )
        request = parse_request(data)

        assert request.headers["x-long"] == "first second"

    def test_body_cut_to_content_length(self):
        data = b"POST /x HTTP/1.1\r\nContent-Length: 3\r\n\r\nabcdef"
        assert parse_request(data).body == b"abc"

    def test_incomplete_request(self):
        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(b"GET / HTTP/1.1\r\nHost: x\r\n")
        assert exc_info.value.status_code == 400

    def test_empty_request_line(self):
        with pytest.raises(HTTPParseError):
            parse_request(b"\r\n\r\n")

    def test_invalid_request_line(self):
        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(b"GARBAGE\r\n\r\n")
        assert exc_info.value.status_code == 400

    def test_unknown_method(self):
        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(b"BREW /pot HTTP/1.1\r\n\r\n")
        assert exc_info.value.status_code == 405

    def test_unsupported_version(self):
        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(b"GET / HTTP/2.0\r\n\r\n")
        assert exc_info.value.status_code == 505

    def test_request_too_large(self):
        data = b"GET / HTTP/1.1\r\n\r\n" + b"x" * 100
        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(data, max_size=50)
        assert exc_info.value.status_code == 413

    def test_invalid_content_length(self):
        with pytest.raises(HTTPParseError):
            parse_request(b"POST / HTTP/1.1\r\nContent-Length: many\r\n\r\n")

    def test_short_body(self):
        with pytest.raises(HTTPParseError):
            parse_request(b"POST / HTTP/1.1\r\nContent-Length: 10\r\n\r\nabc")

    def test_double_slash_is_path_not_host(self):
        request = parse_request(b"GET //hello/Patrick?x=1 HTTP/1.1\r\nHost: x\r\n\r\n")

        assert request.path == "//hello/Patrick"
        assert request.raw_query == "x=1"

    def test_dot_segments_kept(self):
        """Cleaning paths is up to the handler, not the parser."""
        request = parse_request(b"GET /x/../hello/Patrick HTTP/1.1\r\n\r\n")
        assert request.path == "/x/../hello/Patrick"

    def test_absolute_form_target(self):
        request = parse_request(b"GET http://localhost:9000/hello?a=b HTTP/1.1\r\n\r\n")

        assert request.path == "/hello"
        assert request.raw_query == "a=b"

    def test_absolute_form_without_path(self):
        assert parse_request(b"GET http://localhost:9000 HTTP/1.1\r\n\r\n").path == "/"

    def test_relative_target_rejected(self):
        with pytest.raises(HTTPParseError):
            parse_request(b"GET hello HTTP/1.1\r\n\r\n")


class TestHTTPRequest:
    """Tests for HTTPRequest."""

    @pytest.mark.parametrize(
        "version,connection,expected",
        [
            ("HTTP/1.1", "", True),
            ("HTTP/1.1", "close", False),
            ("HTTP/1.0", "", False),
            ("HTTP/1.0", "keep-alive", True),
        ],
    )
    def test_keep_alive(self, version, connection, expected):
        headers = {"connection": connection} if connection else {}
        request = HTTPRequest(method="GET", path="/", version=version, headers=headers)

        assert request.is_keep_alive is expected

    def test_get_query(self):
        request = HTTPRequest(
            method="GET", path="/", query_params={"name": ["a", "b"]}
        )

        assert request.get_query("name") == "a"
        assert request.get_query("missing") is None
        assert request.get_query("missing", "x") == "x"

    def test_get_header_default(self):
        request = HTTPRequest(method="GET", path="/")
        assert request.get_header("X-Missing", "none") == "none"
