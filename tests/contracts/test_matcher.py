"""
Tests for PathMatcher - resolving frontend URLs to backend endpoints.
"""

import pytest

from contractscope.contracts.matcher import (
    PathMatcher,
    calculate_confidence,
    endpoint_key,
    methods_compatible,
    normalize_method,
)


@pytest.fixture
def matcher() -> PathMatcher:
    m = PathMatcher()
    m.add_endpoint("GET", "/api/users")
    m.add_endpoint("GET", "/api/users/{id}")
    m.add_endpoint("POST", "/api/users")
    m.add_endpoint("get", "/api/users/:userId/posts/:postId")
    return m


class TestAddEndpoint:
    """Tests for endpoint registration."""

    def test_normalizes_method_and_path(self):
        m = PathMatcher()
        ep = m.add_endpoint("get", "api/items/<item_id>/")
        assert ep.method == "GET"
        assert ep.path == "/api/items/:item_id"
        assert ep.params == ("item_id",)
        assert ep.key == "GET:/api/items/:item_id"

    def test_registration_order_kept(self, matcher):
        assert [e.path for e in matcher.endpoints] == [
            "/api/users",
            "/api/users/:id",
            "/api/users",
            "/api/users/:userId/posts/:postId",
        ]

    def test_endpoints_property_is_a_copy(self, matcher):
        matcher.endpoints.clear()
        assert len(matcher.endpoints) == 4


class TestMatch:
    """Tests for best-match resolution."""

    def test_exact_match(self, matcher):
        match = matcher.match("GET", "/api/users")
        assert match is not None
        assert match.endpoint_path == "/api/users"
        assert match.endpoint_method == "GET"
        assert match.confidence == 1.0
        assert match.path_params == {}

    def test_parameter_match(self, matcher):
        match = matcher.match("get", "/api/users/123")
        assert match.endpoint_path == "/api/users/:id"
        assert match.path_params == {"id": "123"}
        assert match.confidence == pytest.approx(0.9)

    def test_multiple_params(self, matcher):
        match = matcher.match("GET", "/api/users/7/posts/99")
        assert match.path_params == {"userId": "7", "postId": "99"}

    def test_method_must_be_compatible(self, matcher):
        assert matcher.match("DELETE", "/api/users") is None
        assert matcher.match("POST", "/api/users").endpoint_method == "POST"

    def test_no_match(self, matcher):
        assert matcher.match("GET", "/api/orders") is None
        assert matcher.match("GET", "/api/users/1/2") is None

    def test_url_normalized_before_matching(self, matcher):
        match = matcher.match("GET", "api/users/")
        assert match.endpoint_path == "/api/users"
        assert match.url == "/api/users"

    def test_unknown_call_method_matches_any_backend_method(self):
        m = PathMatcher()
        m.add_endpoint("PUT", "/api/users/:id")
        match = m.match("", "/api/users/5")
        assert match is not None
        assert match.method == "ANY"
        assert match.endpoint_key == "PUT:/api/users/:id"

    def test_any_and_use_backends(self):
        m = PathMatcher()
        m.add_endpoint("ANY", "/health")
        m.add_endpoint("USE", "/static/:file")
        assert m.match("POST", "/health").endpoint_method == "ANY"
        assert m.match("GET", "/static/app.js").endpoint_method == "USE"

    def test_first_registered_wins_ties(self):
        m = PathMatcher()
        m.add_endpoint("GET", "/api/:resource/:id")
        m.add_endpoint("GET", "/api/:kind/:key")
        match = m.match("GET", "/api/users/1")
        assert match.endpoint_path == "/api/:resource/:id"

    def test_static_segments_beat_parameters(self):
        m = PathMatcher()
        m.add_endpoint("GET", "/api/:resource")
        m.add_endpoint("GET", "/api/users")
        assert m.match("GET", "/api/users").endpoint_path == "/api/users"

    def test_template_call_matches_itself(self, matcher):
        """A call written as a template resolves to the same template."""
        match = matcher.match("GET", "/api/users/{id}")
        assert match.endpoint_path == "/api/users/:id"
        assert match.confidence == 1.0


class TestMatchAll:
    """Tests for overlap diagnostics."""

    def test_returns_every_compatible_match_in_order(self):
        m = PathMatcher()
        m.add_endpoint("GET", "/api/:resource")
        m.add_endpoint("ANY", "/api/users")
        m.add_endpoint("POST", "/api/users")
        matches = m.match_all("GET", "/api/users")
        assert [(x.endpoint_method, x.endpoint_path) for x in matches] == [
            ("GET", "/api/:resource"),
            ("ANY", "/api/users"),
        ]

    def test_empty(self, matcher):
        assert matcher.match_all("GET", "/nope") == []


class TestConfidence:
    """Tests for confidence scoring."""

    def test_static_beats_parameterized(self, matcher):
        static = matcher.match("GET", "/api/users")
        param = matcher.match("GET", "/api/users/123")
        assert static.confidence >= param.confidence

    def test_never_exceeds_one(self):
        assert calculate_confidence("/a/b/c", "/a/b/c") == 1.0

    def test_all_parameter_path(self):
        assert calculate_confidence("/1/2", "/:a/:b") == pytest.approx(0.8 + 0.1 * 1 / 1)

    def test_segment_count_penalty(self):
        # Not reachable through match(), but the scorer stays defined
        assert calculate_confidence("/api/users/1/x", "/api/users/:id") == pytest.approx(0.7 + 0.1)

    def test_partial_static_bonus(self):
        # Static segments: "", "api", "v1"; the URL has "v2" at the third
        assert calculate_confidence("/api/v2/1", "/api/v1/:id") == pytest.approx(0.8 + 0.1 * 2 / 3)


class TestSweeps:
    """Tests for unmatched sweeps."""

    def test_find_unmatched_endpoints(self, matcher):
        unmatched = matcher.find_unmatched_endpoints([("GET", "/api/users"), ("GET", "/api/users/1")])
        assert [e.key for e in unmatched] == ["POST:/api/users", "GET:/api/users/:userId/posts/:postId"]

    def test_find_unmatched_calls(self, matcher):
        calls = [("GET", "/api/users"), ("PATCH", "/api/users"), ("GET", "/x")]
        assert matcher.find_unmatched_calls(calls) == [("PATCH", "/api/users"), ("GET", "/x")]


class TestHelpers:
    """Tests for method helpers."""

    def test_normalize_method(self):
        assert normalize_method("get") == "GET"
        assert normalize_method(" post ") == "POST"
        assert normalize_method("") == "ANY"
        assert normalize_method(None) == "ANY"

    def test_methods_compatible(self):
        assert methods_compatible("GET", "GET")
        assert methods_compatible("ANY", "DELETE")
        assert methods_compatible("GET", "ANY")
        assert methods_compatible("PATCH", "USE")
        assert not methods_compatible("USE", "GET")
        assert not methods_compatible("GET", "POST")

    def test_endpoint_key(self):
        assert endpoint_key("get", "/api/users/{id}/") == "GET:/api/users/:id"
