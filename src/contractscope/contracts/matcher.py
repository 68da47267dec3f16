"""
Endpoint matcher for frontend call URLs.

Resolves a (method, url) pair from a frontend call site to the backend
route template that serves it, with a deterministic confidence score and
the path-parameter bindings.

Usage:
    matcher = PathMatcher()
    matcher.add_endpoint("GET", "/api/users/{id}")

    match = matcher.match("get", "/api/users/123")
    match.endpoint_path   # "/api/users/:id"
    match.path_params     # {"id": "123"}
"""

import re
from dataclasses import dataclass, field
from typing import Iterable, Optional

from contractscope.contracts.paths import (
    compile_path,
    extract_path_params,
    is_param_segment,
    normalize_path,
    split_segments,
)
from contractscope.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

ANY_METHOD = "ANY"
MOUNT_METHOD = "USE"  # Express-style catch-all mount

BASE_CONFIDENCE = 0.8
EXACT_CONFIDENCE = 1.0
SEGMENT_COUNT_PENALTY = 0.1
STATIC_SEGMENT_BONUS = 0.1


@dataclass(frozen=True)
class MatchableEndpoint:
    """A backend route compiled for matching."""

    method: str
    path: str
    pattern: re.Pattern
    params: tuple[str, ...] = ()

    @property
    def key(self) -> str:
        return endpoint_key(self.method, self.path)


@dataclass
class EndpointMatch:
    """Result of matching a frontend URL against a backend endpoint."""

    endpoint_path: str  # Normalized backend path
    url: str  # Normalized frontend URL
    method: str  # Frontend method
    endpoint_method: str  # Backend method (may be ANY/USE)
    confidence: float
    path_params: dict[str, str] = field(default_factory=dict)

    @property
    def endpoint_key(self) -> str:
        return endpoint_key(self.endpoint_method, self.endpoint_path)


def endpoint_key(method: str, path: str) -> str:
    """Identity of a backend endpoint: "METHOD:/normalized/path"."""
    return f"{normalize_method(method)}:{normalize_path(path)}"


def normalize_method(method: str | None) -> str:
    """Upper-case a method; an unknown (empty) method becomes ANY."""
    method = (method or "").strip().upper()
    return method or ANY_METHOD


def methods_compatible(frontend_method: str, backend_method: str) -> bool:
    """Exact match, ANY on either side, or a USE mount on the backend."""
    if frontend_method == backend_method:
        return True
    if ANY_METHOD in (frontend_method, backend_method):
        return True
    return backend_method == MOUNT_METHOD


class PathMatcher:
    """
    Matches frontend URLs to registered backend endpoints.

    Endpoints are kept in registration order; when two endpoints match a URL
    with equal confidence the first registered wins.
    """

    def __init__(self) -> None:
        self._endpoints: list[MatchableEndpoint] = []

    @property
    def endpoints(self) -> list[MatchableEndpoint]:
        return list(self._endpoints)

    def add_endpoint(self, method: str, path: str) -> Optional[MatchableEndpoint]:
        """
        Register a backend endpoint.

        Returns:
            The compiled endpoint, or None if its template could not be compiled
        """
        normalized = normalize_path(path)
        try:
            pattern = compile_path(normalized)
        except re.error as e:
            logger.debug("endpoint_pattern_invalid", method=method, path=path, error=str(e))
            return None

        endpoint = MatchableEndpoint(
            method=normalize_method(method),
            path=normalized,
            pattern=pattern,
            params=tuple(extract_path_params(normalized)),
        )
        self._endpoints.append(endpoint)
        return endpoint

    def match(self, method: str, url: str) -> Optional[EndpointMatch]:
        """Best match for a frontend call, or None."""
        best: Optional[EndpointMatch] = None
        for candidate in self.match_all(method, url):
            if best is None or candidate.confidence > best.confidence:
                best = candidate
        return best

    def match_all(self, method: str, url: str) -> list[EndpointMatch]:
        """Every compatible match, in registration order."""
        method = normalize_method(method)
        url = normalize_path(url)

        matches: list[EndpointMatch] = []
        for ep in self._endpoints:
            if not methods_compatible(method, ep.method):
                continue
            if not ep.pattern.fullmatch(url):
                continue
            matches.append(EndpointMatch(
                endpoint_path=ep.path,
                url=url,
                method=method,
                endpoint_method=ep.method,
                confidence=calculate_confidence(url, ep.path),
                path_params=extract_matched_params(url, ep),
            ))
        return matches

    def find_unmatched_endpoints(self, calls: Iterable[tuple[str, str]]) -> list[MatchableEndpoint]:
        """Endpoints that are not the best match of any (method, url) call."""
        matched = set()
        for method, url in calls:
            found = self.match(method, url)
            if found is not None:
                matched.add(found.endpoint_key)
        return [ep for ep in self._endpoints if ep.key not in matched]

    def find_unmatched_calls(self, calls: Iterable[tuple[str, str]]) -> list[tuple[str, str]]:
        """(method, url) calls that match no endpoint."""
        return [(method, url) for method, url in calls if self.match(method, url) is None]


def calculate_confidence(url: str, endpoint_path: str) -> float:
    """
    Confidence that a normalized URL belongs to a normalized endpoint path.

    0.8 for a pattern match, 1.0 for a verbatim match, minus 0.1 when the
    segment counts differ, plus up to 0.1 for static segments matching at
    the same position. Never above 1.0.
    """
    confidence = EXACT_CONFIDENCE if url == endpoint_path else BASE_CONFIDENCE

    url_segments = split_segments(url)
    path_segments = split_segments(endpoint_path)

    if len(url_segments) != len(path_segments):
        confidence -= SEGMENT_COUNT_PENALTY

    total_static = 0
    matched_static = 0
    for i, seg in enumerate(path_segments):
        if is_param_segment(seg):
            continue
        total_static += 1
        if i < len(url_segments) and url_segments[i] == seg:
            matched_static += 1

    if total_static:
        confidence += STATIC_SEGMENT_BONUS * matched_static / total_static

    return min(confidence, 1.0)


def extract_matched_params(url: str, endpoint: MatchableEndpoint) -> dict[str, str]:
    """Bind the endpoint's parameter names to the URL segments at their positions."""
    params: dict[str, str] = {}
    url_segments = split_segments(url)
    names = iter(endpoint.params)

    for i, seg in enumerate(split_segments(endpoint.path)):
        if not is_param_segment(seg):
            continue
        name = next(names, None)
        if name is None:
            break
        if i < len(url_segments):
            params[name] = url_segments[i]
    return params
