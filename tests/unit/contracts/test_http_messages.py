"""Tests for the immutable Request/Response contracts."""

import dataclasses

import httpx
import pytest

from waypoint.contracts import Request, RequestOptions, Response
from waypoint.redirect.policy import RedirectPolicy


class TestRequestBuild:
    def test_normalizes_inputs(self) -> None:
        request = Request.build("post", "https://a.example/x", headers=[("X-A", "1"), ("X-A", "2")], body="text")

        assert request.method == "POST"
        assert request.url == httpx.URL("https://a.example/x")
        assert request.headers.get_list("x-a") == ["1", "2"]
        assert request.body == b"text"

    def test_defaults(self) -> None:
        request = Request.build("GET", "https://a.example/")

        assert len(request.headers) == 0
        assert request.body is None

    def test_invalid_url_rejected(self) -> None:
        with pytest.raises(httpx.InvalidURL):
            Request.build("GET", "https://a.example:notaport/")


class TestRequestIsAValue:
    def test_frozen(self) -> None:
        request = Request.build("GET", "https://a.example/")

        with pytest.raises(dataclasses.FrozenInstanceError):
            request.method = "POST"  # type: ignore[misc]

    def test_with_url_copies_headers(self) -> None:
        original = Request.build("GET", "https://a.example/", headers={"X-A": "1"})

        moved = original.with_url(httpx.URL("https://b.example/"))
        moved.headers["X-A"] = "2"

        assert original.headers["X-A"] == "1"
        assert original.url == httpx.URL("https://a.example/")

    def test_without_headers_removes_all_values(self) -> None:
        original = Request.build("GET", "https://a.example/", headers=[("X-A", "1"), ("x-a", "2"), ("X-B", "3")])

        trimmed = original.without_headers("X-A", "X-Missing")

        assert "X-A" not in trimmed.headers
        assert trimmed.headers["X-B"] == "3"
        assert original.headers.get_list("X-A") == ["1", "2"]

    def test_with_method_and_without_body(self) -> None:
        original = Request.build("POST", "https://a.example/", body=b"data")

        changed = original.with_method("get").without_body()

        assert changed.method == "GET"
        assert changed.body is None
        assert original.method == "POST"
        assert original.body == b"data"

    def test_copy_is_equal_but_independent(self) -> None:
        original = Request.build("GET", "https://a.example/", headers={"X-A": "1"})

        clone = original.copy()

        assert clone == original
        assert clone.headers is not original.headers


class TestResponse:
    def test_location_present(self) -> None:
        response = Response(status_code=302, headers=httpx.Headers({"location": "/next"}))

        assert response.location == "/next"

    @pytest.mark.parametrize("headers", [{}, {"Location": ""}])
    def test_location_absent_or_empty(self, headers: dict[str, str]) -> None:
        assert Response(status_code=302, headers=httpx.Headers(headers)).location is None

    def test_repeated_location_uses_first_value(self) -> None:
        response = Response(status_code=302, headers=httpx.Headers([("Location", "/a"), ("Location", "/b")]))

        assert response.location == "/a"


class TestRequestOptions:
    def test_default_has_no_override(self) -> None:
        assert RequestOptions().redirect_policy is None

    def test_carries_policy(self) -> None:
        policy = RedirectPolicy(max_redirects=2)

        assert RequestOptions(redirect_policy=policy).redirect_policy is policy
