"""
Tests for ExtractorRegistry.
"""

from pathlib import Path

import pytest

from contractscope.contracts.models import CallInput, EndpointInput
from contractscope.contracts.registry import CallExtractor, EndpointExtractor, ExtractorRegistry
from contractscope.shared.domain.exceptions import ConfigurationError


class RouteFileExtractor:
    """Reads "METHOD /path" lines from *.routes files."""

    id = "routes"
    languages = ("routes",)

    def can_extract(self, path: Path) -> bool:
        return path.suffix == ".routes"

    def extract_endpoints(self, path: Path) -> list[EndpointInput]:
        endpoints = []
        for line_no, line in enumerate(path.read_text().splitlines(), start=1):
            method, route = line.split()
            endpoints.append(EndpointInput(method=method, path=route, file=str(path), line=line_no))
        return endpoints


class CallFileExtractor:
    """Reads "METHOD url" lines from *.calls files."""

    id = "calls"
    languages = ("calls",)

    def can_extract(self, path: Path) -> bool:
        return path.suffix == ".calls"

    def extract_calls(self, path: Path) -> list[CallInput]:
        calls = []
        for line_no, line in enumerate(path.read_text().splitlines(), start=1):
            method, url = line.split()
            calls.append(CallInput(method=method, url=url, file=str(path), line=line_no))
        return calls


class BrokenExtractor:
    id = "broken"
    languages = ("routes",)

    def can_extract(self, path: Path) -> bool:
        return True

    def extract_endpoints(self, path: Path) -> list[EndpointInput]:
        raise RuntimeError("parser crashed")


@pytest.fixture
def registry() -> ExtractorRegistry:
    r = ExtractorRegistry()
    r.register_endpoint_extractor(RouteFileExtractor())
    r.register_call_extractor(CallFileExtractor())
    return r


@pytest.fixture
def source_tree(tmp_path: Path) -> Path:
    (tmp_path / "api.routes").write_text("GET /api/users\nPOST /api/users\n")
    (tmp_path / "web.calls").write_text("GET /api/users\n")
    (tmp_path / "README.md").write_text("# docs\n")
    (tmp_path / "sub").mkdir()
    return tmp_path


class TestRegistration:
    """Tests for registering extractors."""

    def test_protocols(self):
        assert isinstance(RouteFileExtractor(), EndpointExtractor)
        assert isinstance(CallFileExtractor(), CallExtractor)

    def test_lookup(self, registry):
        assert isinstance(registry.get_endpoint_extractor("routes"), RouteFileExtractor)
        assert registry.get_call_extractor("routes") is None
        assert [e.id for e in registry.endpoint_extractors] == ["routes"]
        assert [e.id for e in registry.call_extractors] == ["calls"]
        assert registry.supported_languages() == {"routes", "calls"}

    def test_duplicate_id_rejected(self, registry):
        with pytest.raises(ConfigurationError):
            registry.register_endpoint_extractor(RouteFileExtractor())
        with pytest.raises(ConfigurationError):
            registry.register_call_extractor(CallFileExtractor())

    def test_registries_are_independent(self, registry):
        assert ExtractorRegistry().endpoint_extractors == []


class TestCollect:
    """Tests for collect()."""

    def test_collects_from_capable_extractors(self, registry, source_tree):
        analysis_input = registry.collect(sorted(source_tree.iterdir()))

        assert [(e.method, e.path, e.line) for e in analysis_input.endpoints] == [
            ("GET", "/api/users", 1),
            ("POST", "/api/users", 2),
        ]
        assert [(c.method, c.url) for c in analysis_input.calls] == [("GET", "/api/users")]

    def test_accepts_string_paths_and_skips_missing(self, registry, source_tree):
        analysis_input = registry.collect([str(source_tree / "api.routes"), str(source_tree / "gone.routes")])
        assert len(analysis_input.endpoints) == 2

    def test_failing_extractor_is_skipped(self, registry, source_tree):
        registry.register_endpoint_extractor(BrokenExtractor())
        analysis_input = registry.collect(sorted(source_tree.iterdir()))
        assert len(analysis_input.endpoints) == 2
        assert len(analysis_input.calls) == 1
