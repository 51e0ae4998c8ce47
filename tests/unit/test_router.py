"""
Unit tests for URL routing.
"""

import pytest

from userapi.http.request import HTTPRequest
from userapi.http.response import ok
from userapi.http.router import Router
from userapi.http.status_codes import HTTPStatus


def dummy_handler(request: HTTPRequest):
    return ok({"params": request.path_params})


class TestRouterBasics:
    """Basic routing tests."""

    def test_add_route(self):
        """Test adding a route."""
        router = Router()
        route = router.add_route("/users", dummy_handler, method="GET")

        assert route.path == "/users"
        assert route.method == "GET"
        assert route.handler == dummy_handler

    def test_match_simple_route(self):
        router = Router()
        router.add_route("/users", dummy_handler, method="GET")

        match = router.match("GET", "/users")

        assert match is not None
        assert match.route.path == "/users"
        assert match.params == {}

    def test_no_match_wrong_method(self):
        router = Router()
        router.add_route("/users", dummy_handler, method="GET")

        assert router.match("POST", "/users") is None

    def test_no_match_wrong_path(self):
        router = Router()
        router.add_route("/users", dummy_handler, method="GET")

        assert router.match("GET", "/posts") is None

    def test_root_path(self):
        router = Router()
        router.add_route("/", dummy_handler, method="GET")

        assert router.match("GET", "/") is not None
        assert router.match("GET", "/users") is None

    def test_trailing_slash_normalized(self):
        router = Router()
        router.add_route("/users/:id", dummy_handler, method="GET")

        match = router.match("GET", "/users/3/")

        assert match is not None
        assert match.params == {"id": "3"}


class TestPathParameters:
    """Tests for path parameter extraction."""

    def test_single_parameter(self):
        router = Router()
        router.add_route("/users/:id", dummy_handler, method="GET")

        match = router.match("GET", "/users/123")

        assert match is not None
        assert match.params == {"id": "123"}

    def test_parameter_is_one_segment(self):
        router = Router()
        router.add_route("/users/:id", dummy_handler, method="GET")

        assert router.match("GET", "/users/1/posts") is None
        assert router.match("GET", "/users") is None

    def test_non_numeric_parameter_still_matches(self):
        """Converting the id is the handler's job, not the router's."""
        router = Router()
        router.add_route("/users/:id", dummy_handler, method="GET")

        match = router.match("GET", "/users/abc")

        assert match.params == {"id": "abc"}


class TestRouterHandle:
    """Tests for Router.handle dispatch."""

    def test_handle_sets_path_params(self):
        router = Router()
        router.add_route("/users/:id", dummy_handler, method="GET")

        response = router.handle(HTTPRequest(method="GET", path="/users/7"))

        assert response.status == HTTPStatus.OK
        assert response.json == {"params": {"id": "7"}}

    def test_handle_not_found(self):
        router = Router()
        router.add_route("/users", dummy_handler, method="GET")

        response = router.handle(HTTPRequest(method="GET", path="/posts"))

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.json == {"error": "No route matches /posts"}

    def test_handle_method_not_allowed(self):
        router = Router()
        router.add_route("/users/:id", dummy_handler, method="GET")
        router.add_route("/users/:id", dummy_handler, method="DELETE")

        response = router.handle(HTTPRequest(method="PATCH", path="/users/1"))

        assert response.status == HTTPStatus.METHOD_NOT_ALLOWED
        assert response.headers["Allow"] == "DELETE, GET"

    def test_handler_exception_propagates(self):
        router = Router()

        def broken(request):
            raise RuntimeError("boom")

        router.add_route("/users", broken, method="GET")

        with pytest.raises(RuntimeError):
            router.handle(HTTPRequest(method="GET", path="/users"))


class TestURLGeneration:
    """Tests for url_for."""

    def test_url_for(self):
        router = Router()
        router.add_route("/users/:id", dummy_handler, method="GET", name="get_user")

        assert router.url_for("get_user", id="42") == "/users/42"

    def test_url_for_int_param(self):
        router = Router()
        router.add_route("/users/:id", dummy_handler, method="GET", name="get_user")

        assert router.url_for("get_user", id=3) == "/users/3"

    def test_url_for_unknown_route(self):
        assert Router().url_for("nonexistent") is None


class TestRouteListing:

    def test_describe_routes(self):
        router = Router()
        router.add_route("/users", dummy_handler, method="GET")
        router.add_route("/users/:id", dummy_handler, method="delete")

        lines = router.describe_routes()

        assert lines == ["GET      /users", "DELETE   /users/:id"]
