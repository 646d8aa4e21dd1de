"""Tests for perch.http.context — RequestContext reply rules and hit lines."""

import io
from datetime import UTC, datetime, timedelta, timezone
from typing import Any

import pytest

from perch.errors import CriticalError
from perch.http.context import DEFAULT_CONTENT_TYPE, RequestContext, http_date
from perch.http.exchange import Exchange
from perch.log import Level, Logger

FIXED = datetime(2026, 10, 19, 9, 30, 0, tzinfo=UTC)
FIXED_HTTP = "Mon, 19 Oct 2026 09:30:00 GMT"


def _exchange(method: str = "GET", path: str = "/post/42", body: bytes = b"") -> Exchange:
    scope: dict[str, Any] = {
        "type": "http",
        "http_version": "1.1",
        "method": method,
        "path": path,
        "query_string": b"",
        "headers": [(b"user-agent", b"pytest")],
        "client": ("10.0.0.1", 5000),
    }

    async def receive() -> dict[str, Any]:
        return {"type": "http.request", "body": body, "more_body": False}

    return Exchange.from_asgi(scope, receive)


def _ctx(method: str = "GET", path: str = "/post/42", body: bytes = b"") -> tuple[RequestContext, io.StringIO]:
    sink = io.StringIO()
    return RequestContext(_exchange(method, path, body), Logger(sink), now=FIXED), sink


class TestHttpDate:
    def test_utc(self) -> None:
        assert http_date(FIXED) == FIXED_HTTP

    def test_naive_is_treated_as_utc(self) -> None:
        assert http_date(datetime(2026, 10, 19, 9, 30, 0)) == FIXED_HTTP

    def test_other_zone_is_converted(self) -> None:
        eastern = FIXED.astimezone(timezone(timedelta(hours=-4)))
        assert http_date(eastern) == FIXED_HTTP


class TestRequestAccess:
    async def test_accessors(self) -> None:
        ctx, _ = _ctx("POST", "/submit", b"payload")
        assert ctx.method == "POST"
        assert ctx.path == "/submit"
        assert ctx.protocol == "HTTP/1.1"
        assert ctx.remote_addr == "10.0.0.1:5000"
        assert ctx.headers["User-Agent"] == "pytest"
        assert await ctx.body() == b"payload"

    def test_initial_state(self) -> None:
        ctx, _ = _ctx()
        assert ctx.status == 200
        assert ctx.content_length == 0
        assert ctx.content_type == DEFAULT_CONTENT_TYPE
        assert ctx.timestamp == FIXED
        assert ctx.replied is False
        assert ctx.response is None


class TestReply:
    def test_ok_with_body(self) -> None:
        ctx, _ = _ctx()
        ctx.ok("post:42")

        response = ctx.response
        assert response is not None
        assert response.status == 200
        assert response.body == b"post:42"
        assert response.header("Date") == FIXED_HTTP
        assert response.header("Content-Type") == DEFAULT_CONTENT_TYPE
        assert response.header("Content-Length") == "7"
        assert not response.has_header("Connection")
        assert ctx.replied is True
        assert ctx.content_length == 7

    def test_length_counts_bytes(self) -> None:
        ctx, _ = _ctx()
        ctx.ok("héllo")
        assert ctx.response.header("Content-Length") == "6"

    def test_bytes_body(self) -> None:
        ctx, _ = _ctx()
        ctx.reply(201, b"\x00\x01")
        assert ctx.response.status == 201
        assert ctx.response.body == b"\x00\x01"

    def test_empty_body_has_no_entity_headers(self) -> None:
        ctx, _ = _ctx()
        ctx.reply(204)

        response = ctx.response
        assert response.header("Date") == FIXED_HTTP
        assert not response.has_header("Content-Type")
        assert not response.has_header("Content-Length")

    @pytest.mark.parametrize("status", [400, 404, 500, 503])
    def test_error_status_closes_connection(self, status: int) -> None:
        ctx, _ = _ctx()
        ctx.reply(status, "nope")
        assert ctx.response.header("Connection") == "close"

    @pytest.mark.parametrize("status", [200, 302, 399])
    def test_success_keeps_connection(self, status: int) -> None:
        ctx, _ = _ctx()
        ctx.reply(status, "fine")
        assert not ctx.response.has_header("Connection")

    def test_not_found(self) -> None:
        ctx, _ = _ctx()
        ctx.not_found("<h1>Not found</h1>")
        assert ctx.response.status == 404
        assert ctx.response.text == "<h1>Not found</h1>"

    def test_content_type_override(self) -> None:
        ctx, _ = _ctx()
        ctx.content_type = "application/json"
        ctx.ok('{"id": 42}')
        assert ctx.response.header("Content-Type") == "application/json"

    def test_handler_headers_are_kept(self) -> None:
        ctx, _ = _ctx()
        ctx.set_header("X-Post", "1")
        ctx.set_header("x-post", "42")
        ctx.add_header("Set-Cookie", "a=1")
        ctx.add_header("Set-Cookie", "b=2")
        ctx.ok("done")

        response = ctx.response
        assert response.header_list("X-Post") == ["42"]
        assert response.header_list("Set-Cookie") == ["a=1", "b=2"]

    def test_head_discards_body(self) -> None:
        ctx, _ = _ctx("HEAD")
        ctx.ok("post:42")

        response = ctx.response
        assert response.status == 200
        assert response.body == b""
        assert ctx.content_length == 0
        assert not response.has_header("Content-Length")
        assert response.header("Date") == FIXED_HTTP

    @pytest.mark.parametrize("status", [101, 204, 304])
    def test_bodyless_status_drops_body(self, status: int) -> None:
        ctx, _ = _ctx()
        ctx.reply(status, "should not be sent")

        response = ctx.response
        assert response.status == status
        assert response.body == b""
        assert ctx.content_length == 0
        assert not response.has_header("Content-Length")
        assert not response.has_header("Content-Type")

    def test_bytearray_and_memoryview_bodies(self) -> None:
        ctx, _ = _ctx()
        ctx.ok(bytearray(b"abc"))
        assert ctx.response.body == b"abc"

        other, _ = _ctx()
        other.ok(memoryview(b"xyz"))
        assert other.response.body == b"xyz"

    @pytest.mark.parametrize("body", [3, None, 4.5, ["a"]])
    def test_non_text_body_rejected(self, body: object) -> None:
        ctx, _ = _ctx()
        with pytest.raises(TypeError, match="reply body must be str or bytes"):
            ctx.reply(200, body)  # type: ignore[arg-type]

        assert ctx.replied is False
        assert ctx.response is None


class TestDoubleReply:
    def test_second_reply_is_critical(self) -> None:
        ctx, sink = _ctx()
        ctx.ok("first")

        with pytest.raises(CriticalError, match="already been replied to"):
            ctx.reply(500, "second")

        lines = sink.getvalue().splitlines()
        assert len(lines) == 1
        assert lines[0].startswith("C ")

    def test_first_response_survives(self) -> None:
        ctx, _ = _ctx()
        ctx.ok("first")

        with pytest.raises(CriticalError):
            ctx.not_found("second")

        assert ctx.status == 200
        assert ctx.response.body == b"first"
        assert ctx.response.header("Content-Length") == "5"


class TestLogHit:
    def test_hit_line(self) -> None:
        ctx, sink = _ctx(path="/post/42")
        ctx.ok("hello")
        ctx.log_hit()

        line = sink.getvalue().splitlines()[0]
        assert line.startswith("I ")
        assert line.endswith(" hit: 10.0.0.1:5000 GET /post/42 HTTP/1.1 200 5")

    def test_empty_body_size_is_dash(self) -> None:
        ctx, sink = _ctx()
        ctx.reply(204)
        ctx.log_hit()
        assert sink.getvalue().rstrip("\n").endswith(" 204 -")

    def test_filtered_below_info(self) -> None:
        ctx, sink = _ctx()
        ctx.log.set_level(Level.WARN)
        ctx.ok("quiet")
        ctx.log_hit()
        assert sink.getvalue() == ""
