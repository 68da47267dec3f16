"""
Explicit registry of endpoint and call extractors.

Extractors are plugins that read source files and produce the flat
EndpointInput / CallInput records the analyzer consumes. The host builds
one registry at startup and hands it to whatever drives extraction:

    registry = ExtractorRegistry()
    registry.register_endpoint_extractor(FastAPIExtractor())
    registry.register_call_extractor(FetchExtractor())

    analysis_input = registry.collect(repo.rglob("*"))
    result = analyze_contracts(analysis_input)
"""

from pathlib import Path
from typing import Iterable, Protocol, runtime_checkable

from contractscope.contracts.models import AnalysisInput, CallInput, EndpointInput
from contractscope.shared.domain.exceptions import ConfigurationError
from contractscope.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class EndpointExtractor(Protocol):
    """Produces backend endpoints from a source file."""

    id: str
    languages: tuple[str, ...]

    def can_extract(self, path: Path) -> bool:
        ...

    def extract_endpoints(self, path: Path) -> list[EndpointInput]:
        ...


@runtime_checkable
class CallExtractor(Protocol):
    """Produces frontend call sites from a source file."""

    id: str
    languages: tuple[str, ...]

    def can_extract(self, path: Path) -> bool:
        ...

    def extract_calls(self, path: Path) -> list[CallInput]:
        ...


class ExtractorRegistry:
    """
    Holds extractors by id, in registration order.

    Not a global: each host owns its registry instance.
    """

    def __init__(self) -> None:
        self._endpoint_extractors: dict[str, EndpointExtractor] = {}
        self._call_extractors: dict[str, CallExtractor] = {}

    def register_endpoint_extractor(self, extractor: EndpointExtractor) -> EndpointExtractor:
        """
        Register an endpoint extractor.

        Raises:
            ConfigurationError: If an endpoint extractor with the same id exists
        """
        if extractor.id in self._endpoint_extractors:
            raise ConfigurationError(
                f"Endpoint extractor '{extractor.id}' is already registered",
                context={"extractor": extractor.id},
            )
        self._endpoint_extractors[extractor.id] = extractor
        logger.debug("extractor_registered", kind="endpoint", extractor=extractor.id, languages=list(extractor.languages))
        return extractor

    def register_call_extractor(self, extractor: CallExtractor) -> CallExtractor:
        """
        Register a call extractor.

        Raises:
            ConfigurationError: If a call extractor with the same id exists
        """
        if extractor.id in self._call_extractors:
            raise ConfigurationError(
                f"Call extractor '{extractor.id}' is already registered",
                context={"extractor": extractor.id},
            )
        self._call_extractors[extractor.id] = extractor
        logger.debug("extractor_registered", kind="call", extractor=extractor.id, languages=list(extractor.languages))
        return extractor

    def get_endpoint_extractor(self, extractor_id: str) -> EndpointExtractor | None:
        return self._endpoint_extractors.get(extractor_id)

    def get_call_extractor(self, extractor_id: str) -> CallExtractor | None:
        return self._call_extractors.get(extractor_id)

    @property
    def endpoint_extractors(self) -> list[EndpointExtractor]:
        return list(self._endpoint_extractors.values())

    @property
    def call_extractors(self) -> list[CallExtractor]:
        return list(self._call_extractors.values())

    def supported_languages(self) -> set[str]:
        """Every language some registered extractor handles."""
        languages: set[str] = set()
        for extractor in [*self._endpoint_extractors.values(), *self._call_extractors.values()]:
            languages.update(extractor.languages)
        return languages

    def collect(self, paths: Iterable[Path | str]) -> AnalysisInput:
        """
        Run every capable extractor over every file.

        A failing extractor is logged and skipped for that file; the
        remaining extractors still run.
        """
        analysis_input = AnalysisInput()
        files = 0

        for raw in paths:
            path = Path(raw)
            if not path.is_file():
                continue
            files += 1

            for ep_extractor in self._endpoint_extractors.values():
                if not ep_extractor.can_extract(path):
                    continue
                try:
                    analysis_input.endpoints.extend(ep_extractor.extract_endpoints(path))
                except Exception as e:
                    logger.warning("extractor_failed", extractor=ep_extractor.id, file=str(path), error=str(e))

            for call_extractor in self._call_extractors.values():
                if not call_extractor.can_extract(path):
                    continue
                try:
                    analysis_input.calls.extend(call_extractor.extract_calls(path))
                except Exception as e:
                    logger.warning("extractor_failed", extractor=call_extractor.id, file=str(path), error=str(e))

        logger.info(
            "extraction_completed",
            files=files,
            endpoints=len(analysis_input.endpoints),
            calls=len(analysis_input.calls),
        )
        return analysis_input
