"""Tests for the blog example."""

import io

from perch.testing import TestClient


class TestBlogApp:
    """Verify every route in the blog example works through the ASGI pipeline."""

    async def test_index(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/")
            assert response.status == 200
            assert '<a href="/post/1">Hello, perch</a>' in response.text

    async def test_show_post(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/post/42")
            assert response.status == 200
            assert response.text == "post:42"

    async def test_non_numeric_post(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/post/abc")
            assert response.status == 404
            assert response.text == "<h1>Not found</h1>"

    async def test_head(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.head("/post/42")
            assert response.status == 200
            assert response.body == b""
            assert not response.has_header("content-length")

    async def test_fault_then_recovery(self, example_app) -> None:
        sink = io.StringIO()
        example_app.log.set_sink(sink)
        async with TestClient(example_app) as client:
            broken = await client.get("/post/0")
            fine = await client.get("/post/1")

        assert broken.status == 500
        assert broken.text == "Internal server error"
        assert fine.status == 200
        assert "handler crashed: LookupError: post 0 does not exist" in sink.getvalue()

    async def test_create_post(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.post("/post", body=b"new post")
            assert response.status == 201
            assert response.text == "new post"
            assert response.header("location") == "/post/3"
            assert response.header("content-type") == "text/plain; charset=utf-8"

    async def test_delete_post(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.delete("/post/1")
            assert response.status == 204
            assert not response.has_header("content-length")

    async def test_create_post_is_post_only(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.put("/post", body=b"x")
            assert response.status == 404
