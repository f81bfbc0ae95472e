"""Tests for building the next redirect hop request.

Coverage goals:
- Location resolution (path-absolute, relative, absolute)
- Authorization stripping on scheme/host change
- 303 See Other downgrade, and its absence for 301/302/307/308
- The originating request is never modified
- Error taxonomy for missing inputs and malformed targets
"""

import httpx
import pytest

from tests.fixtures import make_response
from waypoint.contracts import InvalidRedirectInput, MalformedRedirectTarget, Request
from waypoint.redirect.rebuild import build_next_request, is_same_origin, resolve_location


class TestResolveLocation:
    @pytest.mark.parametrize(
        ("base", "location", "expected"),
        [
            ("https://a.example/x", "/y", "https://a.example/y"),
            ("https://a.example/x/z", "/y?q=1", "https://a.example/y?q=1"),
            ("https://a.example:8443/x", "/y", "https://a.example:8443/y"),
            ("https://a.example/x", "https://b.example/y", "https://b.example/y"),
            ("https://a.example/dir/x", "y", "https://a.example/dir/y"),
            ("https://a.example/dir/x", "../y", "https://a.example/y"),
            ("http://[::1]:8080/x", "/y", "http://[::1]:8080/y"),
        ],
    )
    def test_resolution(self, base: str, location: str, expected: str) -> None:
        assert resolve_location(httpx.URL(base), location) == httpx.URL(expected)

    def test_double_slash_is_a_path_on_the_same_host(self) -> None:
        """A leading "/" is appended verbatim, so "//evil.example" stays on the origin."""
        target = resolve_location(httpx.URL("https://a.example/x"), "//evil.example/y")

        assert target.host == "a.example"
        assert target.path == "//evil.example/y"

    @pytest.mark.parametrize("location", [None, ""])
    def test_missing_location(self, location: str | None) -> None:
        with pytest.raises(MalformedRedirectTarget):
            resolve_location(httpx.URL("https://a.example/"), location)

    def test_unparseable_location(self) -> None:
        with pytest.raises(MalformedRedirectTarget) as exc_info:
            resolve_location(httpx.URL("https://a.example/"), "https://b.example:notaport/")

        assert exc_info.value.location == "https://b.example:notaport/"
        assert isinstance(exc_info.value.__cause__, httpx.InvalidURL)

    def test_location_without_host(self) -> None:
        with pytest.raises(MalformedRedirectTarget, match="not an absolute URL"):
            resolve_location(httpx.URL("https://a.example/"), "mailto:someone@example.com")


class TestIsSameOrigin:
    @pytest.mark.parametrize(
        ("source", "target", "expected"),
        [
            ("https://a.example/x", "https://a.example/y", True),
            ("https://a.example/x", "https://A.EXAMPLE/y", True),
            ("https://a.example/x", "https://a.example:443/y", True),
            ("https://a.example/x", "https://b.example/y", False),
            ("https://a.example/x", "http://a.example/y", False),
            ("https://a.example/x", "https://a.example:8443/y", False),
        ],
    )
    def test_comparison(self, source: str, target: str, expected: bool) -> None:
        assert is_same_origin(httpx.URL(source), httpx.URL(target)) is expected


class TestBuildNextRequest:
    def test_relative_location_keeps_origin_and_credentials(self) -> None:
        request = Request.build("GET", "https://a.example/x", headers={"Authorization": "Bearer T"})

        next_request = build_next_request(request, make_response(302, location="/y"))

        assert next_request.url == httpx.URL("https://a.example/y")
        assert next_request.headers["Authorization"] == "Bearer T"

    def test_cross_host_strips_authorization(self) -> None:
        request = Request.build("GET", "https://a.example/x", headers={"Authorization": "Bearer T"})

        next_request = build_next_request(request, make_response(302, location="https://b.example/y"))

        assert next_request.url == httpx.URL("https://b.example/y")
        assert "Authorization" not in next_request.headers

    def test_scheme_change_strips_authorization(self) -> None:
        request = Request.build("GET", "https://a.example/x", headers={"Authorization": "Bearer T"})

        next_request = build_next_request(request, make_response(301, location="http://a.example/x"))

        assert "Authorization" not in next_request.headers

    def test_host_comparison_is_case_insensitive(self) -> None:
        request = Request.build("GET", "https://a.example/x", headers={"Authorization": "Bearer T"})

        next_request = build_next_request(request, make_response(307, location="https://A.Example/y"))

        assert next_request.headers["Authorization"] == "Bearer T"

    def test_other_headers_survive_cross_origin(self) -> None:
        request = Request.build(
            "GET",
            "https://a.example/x",
            headers={"Authorization": "Bearer T", "Accept": "application/json"},
        )

        next_request = build_next_request(request, make_response(302, location="https://b.example/y"))

        assert next_request.headers["Accept"] == "application/json"

    def test_see_other_downgrades_post(self, authorized_post: Request) -> None:
        next_request = build_next_request(authorized_post, make_response(303, location="/result"))

        assert next_request.method == "GET"
        assert next_request.body is None
        assert "Content-Type" not in next_request.headers
        assert "Content-Length" not in next_request.headers
        # Same origin: credentials and unrelated headers stay
        assert next_request.headers["Authorization"] == "Bearer T"
        assert next_request.headers["X-Trace"] == "abc"

    def test_see_other_downgrade_applies_cross_origin_too(self, authorized_post: Request) -> None:
        next_request = build_next_request(authorized_post, make_response(303, location="https://b.example/result"))

        assert next_request.method == "GET"
        assert next_request.body is None
        assert "Authorization" not in next_request.headers
        assert "Content-Type" not in next_request.headers

    @pytest.mark.parametrize("status_code", [301, 302, 307, 308])
    def test_non_see_other_keeps_method_and_body(self, authorized_post: Request, status_code: int) -> None:
        next_request = build_next_request(authorized_post, make_response(status_code, location="/other"))

        assert next_request.method == "POST"
        assert next_request.body == b'{"key": "v1"}'
        assert next_request.headers["Content-Type"] == "application/json"
        assert next_request.headers["Content-Length"] == "13"

    def test_original_request_is_untouched(self, authorized_post: Request) -> None:
        build_next_request(authorized_post, make_response(303, location="https://b.example/result"))

        assert authorized_post.method == "POST"
        assert authorized_post.url == httpx.URL("https://a.example/x")
        assert authorized_post.body == b'{"key": "v1"}'
        assert authorized_post.headers["Authorization"] == "Bearer T"
        assert authorized_post.headers["Content-Type"] == "application/json"

    def test_rebuilt_headers_are_independent(self) -> None:
        request = Request.build("GET", "https://a.example/x", headers={"X-Trace": "abc"})

        next_request = build_next_request(request, make_response(302, location="/y"))
        next_request.headers["X-Trace"] = "changed"

        assert request.headers["X-Trace"] == "abc"

    @pytest.mark.parametrize(
        ("request_", "response"),
        [
            (None, make_response(302, location="/y")),
            (Request.build("GET", "https://a.example/"), None),
            (None, None),
        ],
    )
    def test_missing_input(self, request_: Request | None, response) -> None:
        with pytest.raises(InvalidRedirectInput):
            build_next_request(request_, response)

    def test_malformed_target_carries_response(self) -> None:
        request = Request.build("GET", "https://a.example/x")
        response = make_response(302, location="https://b.example:notaport/")

        with pytest.raises(MalformedRedirectTarget) as exc_info:
            build_next_request(request, response)

        assert exc_info.value.response is response
