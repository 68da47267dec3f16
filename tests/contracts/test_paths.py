"""
Tests for route-template normalization and pattern compilation.
"""

import re

import pytest

from contractscope.contracts.paths import (
    compile_path,
    extract_path_params,
    is_param_segment,
    normalize_path,
    path_to_pattern,
    split_segments,
)


class TestNormalizePath:
    """Tests for normalize_path."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("/api/users", "/api/users"),
            ("api/users", "/api/users"),
            ("/api/users/", "/api/users"),
            ("/api/users//", "/api/users"),
            ("//api/users", "/api/users"),
            ("  /api/users  ", "/api/users"),
            ("/", "/"),
            ("", "/"),
            ("///", "/"),
        ],
    )
    def test_slashes(self, raw, expected):
        """Leading slash is enforced, trailing slashes stripped, root kept."""
        assert normalize_path(raw) == expected

    @pytest.mark.parametrize("name", ["id", "userId", "_private", "post_id2"])
    def test_parameter_syntaxes_agree(self, name):
        """{name}, :name and <name> all normalize to :name."""
        expected = f"/x/:{name}"
        assert normalize_path(f"/x/{{{name}}}") == expected
        assert normalize_path(f"/x/:{name}") == expected
        assert normalize_path(f"/x/<{name}>") == expected

    def test_mixed_syntaxes_in_one_path(self):
        assert normalize_path("/orgs/{org}/repos/<repo>/issues/:num") == "/orgs/:org/repos/:repo/issues/:num"

    def test_invalid_parameter_names_left_alone(self):
        """Names must start with a letter or underscore."""
        assert normalize_path("/x/{1abc}") == "/x/{1abc}"
        assert normalize_path("/x/<>") == "/x/<>"

    @pytest.mark.parametrize(
        "raw",
        [
            "", "/", "api", "/api/users/", "//a//b//", "/x/{id}/", "<id>", "  /a/:b/  ", "/a/{b}/<c>",
            "/api/users/ /", "/a/\t/", "/ / /", " /a/ \t /",
        ],
    )
    def test_idempotent(self, raw):
        once = normalize_path(raw)
        assert normalize_path(once) == once

    def test_whitespace_between_trailing_slashes(self):
        """Whitespace left after stripping trailing slashes is removed too."""
        assert normalize_path("/api/users/ /") == "/api/users"
        assert normalize_path("/a/\t/") == "/a"
        assert normalize_path("/ / /") == "/"


class TestPathToPattern:
    """Tests for pattern compilation."""

    def test_parameter_becomes_segment_wildcard(self):
        assert path_to_pattern("/api/users/:id") == "^/api/users/[^/]+$"

    def test_literals_are_escaped(self):
        pattern = compile_path("/api/v1.0/items")
        assert pattern.fullmatch("/api/v1.0/items")
        assert not pattern.fullmatch("/api/v1x0/items")

    def test_parameter_matches_exactly_one_segment(self):
        pattern = compile_path("/api/users/:id")
        assert pattern.fullmatch("/api/users/123")
        assert not pattern.fullmatch("/api/users/123/posts")
        assert not pattern.fullmatch("/api/users/")

    def test_anchored(self):
        pattern = compile_path("/api/users")
        assert not pattern.fullmatch("/v2/api/users")
        assert re.match(pattern, "/api/users/extra") is None

    def test_brace_and_angle_syntax_compile_too(self):
        assert compile_path("/a/{b}/<c>").fullmatch("/a/1/2")


class TestParams:
    """Tests for parameter helpers."""

    def test_extract_in_declaration_order(self):
        assert extract_path_params("/api/users/:userId/posts/{postId}") == ["userId", "postId"]

    def test_extract_none(self):
        assert extract_path_params("/api/users") == []

    def test_is_param_segment(self):
        assert is_param_segment(":id")
        assert is_param_segment("{id}")
        assert is_param_segment("<id>")
        assert not is_param_segment("users")
        assert not is_param_segment("")

    def test_split_keeps_leading_empty_segment(self):
        assert split_segments("/api/users") == ["", "api", "users"]
        assert split_segments("/") == ["", ""]
