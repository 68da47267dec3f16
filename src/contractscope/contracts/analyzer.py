"""
Contract Analyzer for frontend/backend API calls.

Resolves frontend call sites to backend endpoints and identifies:
1. Contracts (endpoint + every call resolved to it)
2. Unused endpoints (backend has, no frontend call resolves to it)
3. Unresolved calls (frontend calls, no backend endpoint matches)
4. Field-level schema mismatches between backend responses and the
   response shapes frontend calls expect

Each run is self-contained: a fresh PathMatcher and contract map are built
per call to analyze(), so separate runs can execute concurrently.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from contractscope.contracts.matcher import PathMatcher, endpoint_key, normalize_method
from contractscope.contracts.models import (
    AnalysisInput,
    AnalysisResult,
    BackendEndpoint,
    CallInput,
    Contract,
    ContractStatus,
    EndpointInput,
    FrontendCall,
    UnmatchedCall,
    UnmatchedEndpoint,
    calculate_health,
    utcnow,
)
from contractscope.contracts.paths import normalize_path, path_to_pattern
from contractscope.contracts.schema import (
    FieldMismatch,
    MismatchType,
    TypeSchema,
    compare,
)
from contractscope.shared.infrastructure.config import settings
from contractscope.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ContractAnalyzerConfig:
    """Configuration for contract analysis."""

    root_field_marker: str = "$"
    compare_schemas: bool = True

    # Contract confidence scoring
    base_confidence: float = 0.5
    many_calls_threshold: int = 5
    many_calls_bonus: float = 0.3
    several_calls_threshold: int = 2
    several_calls_bonus: float = 0.2
    single_call_bonus: float = 0.1
    response_schema_bonus: float = 0.1
    request_schema_bonus: float = 0.1

    @classmethod
    def from_settings(cls) -> "ContractAnalyzerConfig":
        return cls(root_field_marker=settings.root_field_marker)


class ContractAnalyzer:
    """
    Builds contracts from one batch of backend endpoints and frontend calls.

    Usage:
        analyzer = ContractAnalyzer()
        result = analyzer.analyze(endpoints, calls)

        for contract in result.contracts:
            print(contract.method, contract.endpoint, contract.mismatch_count())
    """

    def __init__(self, config: Optional[ContractAnalyzerConfig] = None):
        self.config = config or ContractAnalyzerConfig.from_settings()

    def analyze(
        self,
        endpoints: Iterable[EndpointInput],
        calls: Iterable[CallInput],
    ) -> AnalysisResult:
        """
        Run contract analysis.

        Args:
            endpoints: Backend endpoints from endpoint extractors
            calls: Frontend call sites from call extractors, in source order

        Returns:
            AnalysisResult; never raises for well-typed input
        """
        endpoints = list(endpoints)
        calls = list(calls)

        logger.info(
            "contract_analysis_started",
            endpoints=len(endpoints),
            calls=len(calls),
        )

        result = AnalysisResult()
        matcher = PathMatcher()

        # method:normalized-path -> first endpoint declared for it
        endpoint_index: dict[str, EndpointInput] = {}
        for ep in endpoints:
            if matcher.add_endpoint(ep.method, ep.path) is None:
                continue
            endpoint_index.setdefault(endpoint_key(ep.method, ep.path), ep)

        matched_keys: set[str] = set()
        contracts: dict[str, Contract] = {}

        for call in calls:
            match = matcher.match(call.method, call.url)
            if match is None:
                logger.debug("frontend_call_unmatched", method=call.method, url=call.url, file=call.file)
                result.unmatched_frontend.append(UnmatchedCall(
                    method=call.method,
                    url=call.url,
                    file=call.file,
                    line=call.line,
                ))
                continue

            key = match.endpoint_key
            endpoint = endpoint_index.get(key)
            if endpoint is None:
                logger.warning("matched_endpoint_not_indexed", key=key, url=call.url)
                continue
            matched_keys.add(key)

            contract = contracts.get(key)
            if contract is None:
                contract = self._new_contract(endpoint)
                contracts[key] = contract

            contract.frontend_calls.append(FrontendCall(
                file=call.file,
                line=call.line,
                contract_id=contract.id,
                call_type=call.call_type,
                url=call.url,
                is_dynamic=call.is_dynamic,
                variables=list(call.variables),
                expected_schema=call.expected_schema,
            ))
            contract.last_seen = utcnow()

            if self.config.compare_schemas:
                contract.mismatches.extend(
                    self._compare(contract.backend.response_schema, call.expected_schema)
                )

        for ep in endpoints:
            if endpoint_key(ep.method, ep.path) in matched_keys:
                continue
            result.unmatched_backend.append(UnmatchedEndpoint(
                method=ep.method,
                path=ep.path,
                file=ep.file,
                line=ep.line,
                handler=ep.handler,
            ))

        for contract in contracts.values():
            if contract.mismatches:
                contract.status = ContractStatus.MISMATCH
                result.total_mismatches += len(contract.mismatches)
            contract.confidence = self.calculate_confidence(contract)
            contract.health = calculate_health(contract)
            result.contracts.append(contract)

        logger.info(
            "contract_analysis_completed",
            contracts=len(result.contracts),
            unmatched_backend=len(result.unmatched_backend),
            unmatched_frontend=len(result.unmatched_frontend),
            total_mismatches=result.total_mismatches,
        )

        return result

    def _new_contract(self, ep: EndpointInput) -> Contract:
        endpoint = normalize_path(ep.path)
        return Contract(
            method=normalize_method(ep.method),
            endpoint=endpoint,
            endpoint_pattern=path_to_pattern(endpoint),
            backend=BackendEndpoint(
                file=ep.file,
                line=ep.line,
                framework=ep.framework,
                handler=ep.handler,
                request_schema=ep.request_schema,
                response_schema=ep.response_schema,
            ),
        )

    def _compare(
        self,
        backend: Optional[TypeSchema],
        frontend: Optional[TypeSchema],
    ) -> list[FieldMismatch]:
        # Comparison needs both sides; an absent schema suppresses it
        if backend is None or frontend is None:
            return []
        return compare(backend, frontend, self.config.root_field_marker)

    def calculate_confidence(self, contract: Contract) -> float:
        """
        Confidence that the contract's calls really belong to its endpoint.

        Mismatches do not lower it; see Contract.health for that.
        """
        cfg = self.config
        confidence = cfg.base_confidence

        call_count = contract.frontend_call_count()
        if call_count >= cfg.many_calls_threshold:
            confidence += cfg.many_calls_bonus
        elif call_count >= cfg.several_calls_threshold:
            confidence += cfg.several_calls_bonus
        elif call_count >= 1:
            confidence += cfg.single_call_bonus

        if contract.backend.response_schema is not None:
            confidence += cfg.response_schema_bonus
        if contract.backend.request_schema is not None:
            confidence += cfg.request_schema_bonus

        return min(round(confidence, 4), 1.0)


def analyze_contracts(
    analysis_input: AnalysisInput,
    config: Optional[ContractAnalyzerConfig] = None,
) -> AnalysisResult:
    """
    Convenience function to analyze one batch of inputs.

    Args:
        analysis_input: Endpoints and calls to analyze
        config: Optional analyzer configuration

    Returns:
        AnalysisResult with contracts and unmatched items
    """
    analyzer = ContractAnalyzer(config)
    return analyzer.analyze(analysis_input.endpoints, analysis_input.calls)


def detect_mismatches(
    backend: Optional[TypeSchema],
    frontend: Optional[TypeSchema],
    field_path: str = "",
) -> list[FieldMismatch]:
    """Compare two schemas, returning nothing unless both are present."""
    if backend is None or frontend is None:
        return []
    return compare(backend, frontend, field_path)


_SEVERITY_BY_TYPE = {
    MismatchType.TYPE_MISMATCH: "error",
    MismatchType.MISSING_IN_BACKEND: "error",
    MismatchType.MISSING_IN_FRONTEND: "warning",
    MismatchType.OPTIONALITY_MISMATCH: "warning",
    MismatchType.NULLABILITY_MISMATCH: "warning",
}


def severity_of(mismatch_type: MismatchType | str) -> str:
    """Severity level ("error"/"warning"; "info" if unknown) for a mismatch type."""
    try:
        mismatch_type = MismatchType(mismatch_type)
    except ValueError:
        return "info"
    return _SEVERITY_BY_TYPE.get(mismatch_type, "info")


def summarize_mismatches(mismatches: Iterable[FieldMismatch]) -> list[str]:
    """Human-readable one-line summaries, one per mismatch."""
    summaries: list[str] = []
    for m in mismatches:
        if m.mismatch_type == MismatchType.MISSING_IN_FRONTEND:
            summary = (
                f"Field '{m.field_path}' exists in backend ({m.backend_type}) "
                f"but not expected by frontend"
            )
        elif m.mismatch_type == MismatchType.MISSING_IN_BACKEND:
            summary = (
                f"Frontend expects field '{m.field_path}' ({m.frontend_type}) "
                f"but backend doesn't provide it"
            )
        elif m.mismatch_type == MismatchType.TYPE_MISMATCH:
            summary = (
                f"Type mismatch at '{m.field_path}': backend sends {m.backend_type}, "
                f"frontend expects {m.frontend_type}"
            )
        elif m.mismatch_type == MismatchType.OPTIONALITY_MISMATCH:
            summary = f"Optionality mismatch at '{m.field_path}': {m.description}"
        elif m.mismatch_type == MismatchType.NULLABILITY_MISMATCH:
            summary = f"Nullability mismatch at '{m.field_path}': {m.description}"
        else:
            summary = m.description
        summaries.append(summary)
    return summaries
