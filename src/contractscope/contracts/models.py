"""
Contract domain models.

Core entities produced by a contract analysis run:

    EndpointInput[] + CallInput[]  ->  ContractAnalyzer  ->  AnalysisResult
                                                              ├── Contract[]
                                                              ├── UnmatchedEndpoint[]
                                                              └── UnmatchedCall[]

A Contract binds one backend endpoint to every frontend call site resolved
to it, plus the schema mismatches found between them.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable, Optional

from contractscope.contracts.schema import (
    ROOT_PATH,
    FieldMismatch,
    MismatchSeverity,
    TypeSchema,
    compare,
)
from contractscope.shared.utils.ids import generate_id

VALID_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")


def is_valid_method(method: str) -> bool:
    """Check if a method is one of the standard REST methods."""
    return (method or "").upper() in VALID_METHODS


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _schema_dict(schema: Optional[TypeSchema]) -> Optional[dict[str, Any]]:
    return schema.to_dict() if schema is not None else None


class ContractStatus(str, Enum):
    """
    Lifecycle status of a contract.

    The analyzer only moves discovered -> mismatch. VERIFIED and IGNORED are
    applied by users through the storage layer.
    """

    DISCOVERED = "discovered"
    MISMATCH = "mismatch"
    VERIFIED = "verified"
    IGNORED = "ignored"


@dataclass
class EndpointInput:
    """A backend route as produced by an endpoint extractor."""

    method: str
    path: str
    file: str = ""
    line: int = 0
    handler: str = ""
    framework: str = ""
    request_schema: Optional[TypeSchema] = None
    response_schema: Optional[TypeSchema] = None


@dataclass
class CallInput:
    """A frontend call site as produced by a call extractor."""

    method: str
    url: str
    file: str = ""
    line: int = 0
    is_dynamic: bool = False
    expected_schema: Optional[TypeSchema] = None
    variables: list[str] = field(default_factory=list)
    call_type: str = "fetch"


@dataclass
class AnalysisInput:
    """One batch of extracted endpoints and calls."""

    endpoints: list[EndpointInput] = field(default_factory=list)
    calls: list[CallInput] = field(default_factory=list)


@dataclass
class BackendEndpoint:
    """Backend metadata attached to a contract."""

    file: str
    line: int
    framework: str = ""
    handler: str = ""
    request_schema: Optional[TypeSchema] = None
    response_schema: Optional[TypeSchema] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "line": self.line,
            "framework": self.framework,
            "handler": self.handler,
            "request_schema": _schema_dict(self.request_schema),
            "response_schema": _schema_dict(self.response_schema),
        }


@dataclass
class FrontendCall:
    """A frontend call site resolved to a contract."""

    file: str
    line: int
    contract_id: str = ""
    call_type: str = "fetch"
    url: str = ""
    is_dynamic: bool = False
    variables: list[str] = field(default_factory=list)
    expected_schema: Optional[TypeSchema] = None
    id: str = field(default_factory=lambda: generate_id("fc"))
    created_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "contract_id": self.contract_id,
            "file": self.file,
            "line": self.line,
            "call_type": self.call_type,
            "url": self.url,
            "is_dynamic": self.is_dynamic,
            "variables": list(self.variables),
            "expected_schema": _schema_dict(self.expected_schema),
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class Contract:
    """
    A frontend/backend API contract.

    Two scores live side by side and are never mixed:
        confidence: how sure we are the calls belong to this endpoint
        health:     how well the frontend expectations fit the backend
    """

    method: str
    endpoint: str  # Normalized path: /api/users/:id
    endpoint_pattern: str  # Regex: ^/api/users/[^/]+$
    backend: BackendEndpoint
    frontend_calls: list[FrontendCall] = field(default_factory=list)
    mismatches: list[FieldMismatch] = field(default_factory=list)
    status: ContractStatus = ContractStatus.DISCOVERED
    confidence: float = 0.0
    health: float = 1.0
    id: str = field(default_factory=lambda: generate_id("ct"))
    first_seen: datetime = field(default_factory=utcnow)
    last_seen: datetime = field(default_factory=utcnow)

    def has_mismatches(self) -> bool:
        return bool(self.mismatches)

    def mismatch_count(self) -> int:
        return len(self.mismatches)

    def frontend_call_count(self) -> int:
        return len(self.frontend_calls)

    def error_count(self) -> int:
        """Number of error-severity mismatches."""
        return sum(1 for m in self.mismatches if m.severity == MismatchSeverity.ERROR)

    def warning_count(self) -> int:
        """Number of warning-severity mismatches."""
        return sum(1 for m in self.mismatches if m.severity == MismatchSeverity.WARNING)

    def update_mismatches(self, root: str = ROOT_PATH) -> None:
        """
        Recompute mismatches from the backend response schema and every
        call's expected schema.

        Promotes the status to MISMATCH when anything is found; a contract
        that was verified or ignored keeps its status.
        """
        self.mismatches = []

        if self.backend.response_schema is not None:
            for call in self.frontend_calls:
                if call.expected_schema is None:
                    continue
                self.mismatches.extend(compare(self.backend.response_schema, call.expected_schema, root))

        if self.mismatches and self.status == ContractStatus.DISCOVERED:
            self.status = ContractStatus.MISMATCH
        self.health = calculate_health(self)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON/YAML serialization."""
        return {
            "id": self.id,
            "method": self.method,
            "endpoint": self.endpoint,
            "endpoint_pattern": self.endpoint_pattern,
            "backend": self.backend.to_dict(),
            "frontend_calls": [c.to_dict() for c in self.frontend_calls],
            "mismatches": [m.to_dict() for m in self.mismatches],
            "status": self.status.value,
            "confidence": round(self.confidence, 4),
            "health": round(self.health, 4),
            "first_seen": self.first_seen.isoformat(),
            "last_seen": self.last_seen.isoformat(),
        }


def calculate_health(contract: Contract) -> float:
    """1.0 minus 0.2 per error and 0.05 per warning, floored at 0.0."""
    health = 1.0 - 0.2 * contract.error_count() - 0.05 * contract.warning_count()
    return max(round(health, 4), 0.0)


@dataclass
class UnmatchedEndpoint:
    """A backend endpoint no frontend call resolved to."""

    method: str
    path: str
    file: str = ""
    line: int = 0
    handler: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "method": self.method,
            "path": self.path,
            "file": self.file,
            "line": self.line,
            "handler": self.handler,
        }


@dataclass
class UnmatchedCall:
    """A frontend call that matched no backend endpoint."""

    method: str
    url: str
    file: str = ""
    line: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"method": self.method, "url": self.url, "file": self.file, "line": self.line}


@dataclass
class AnalysisResult:
    """
    Result of one contract analysis run.

    Contracts are listed in the order their first call was seen.
    """

    contracts: list[Contract] = field(default_factory=list)
    unmatched_backend: list[UnmatchedEndpoint] = field(default_factory=list)
    unmatched_frontend: list[UnmatchedCall] = field(default_factory=list)
    total_mismatches: int = 0
    analyzed_at: datetime = field(default_factory=utcnow)

    def has_errors(self) -> bool:
        """Check if any contract has an error-severity mismatch."""
        return any(c.error_count() for c in self.contracts)

    def summary(self) -> str:
        """Generate summary text."""
        lines = [
            f"Contracts: {len(self.contracts)}",
            f"Unmatched backend endpoints: {len(self.unmatched_backend)}",
            f"Unmatched frontend calls: {len(self.unmatched_frontend)}",
            f"Total Mismatches: {self.total_mismatches}",
        ]
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "contracts": [c.to_dict() for c in self.contracts],
            "unmatched_backend": [e.to_dict() for e in self.unmatched_backend],
            "unmatched_frontend": [c.to_dict() for c in self.unmatched_frontend],
            "total_mismatches": self.total_mismatches,
            "analyzed_at": self.analyzed_at.isoformat(),
        }


@dataclass
class ContractStats:
    """Aggregate statistics over a set of contracts."""

    total: int = 0
    discovered: int = 0
    verified: int = 0
    mismatch: int = 0
    ignored: int = 0
    by_method: dict[str, int] = field(default_factory=dict)
    total_calls: int = 0
    total_errors: int = 0
    total_warnings: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "discovered": self.discovered,
            "verified": self.verified,
            "mismatch": self.mismatch,
            "ignored": self.ignored,
            "by_method": dict(self.by_method),
            "total_calls": self.total_calls,
            "total_errors": self.total_errors,
            "total_warnings": self.total_warnings,
        }


@dataclass
class ContractFilters:
    """Filter options for selecting contracts."""

    method: str | None = None
    status: ContractStatus | None = None
    has_mismatches: bool | None = None
    endpoint: str | None = None  # Substring match
    limit: int = 0  # 0 = no limit
    offset: int = 0


def compute_stats(contracts: Iterable[Contract]) -> ContractStats:
    """Aggregate statistics for a set of contracts."""
    stats = ContractStats()
    for c in contracts:
        stats.total += 1
        if c.status == ContractStatus.DISCOVERED:
            stats.discovered += 1
        elif c.status == ContractStatus.VERIFIED:
            stats.verified += 1
        elif c.status == ContractStatus.MISMATCH:
            stats.mismatch += 1
        elif c.status == ContractStatus.IGNORED:
            stats.ignored += 1

        stats.by_method[c.method] = stats.by_method.get(c.method, 0) + 1
        stats.total_calls += c.frontend_call_count()
        stats.total_errors += c.error_count()
        stats.total_warnings += c.warning_count()
    return stats


def filter_contracts(contracts: Iterable[Contract], filters: ContractFilters) -> list[Contract]:
    """Select contracts matching every set filter, then apply offset/limit."""
    selected = []
    for c in contracts:
        if filters.method and c.method != filters.method.upper():
            continue
        if filters.status is not None and c.status != filters.status:
            continue
        if filters.has_mismatches is not None and c.has_mismatches() != filters.has_mismatches:
            continue
        if filters.endpoint and filters.endpoint not in c.endpoint:
            continue
        selected.append(c)

    selected = selected[filters.offset:] if filters.offset > 0 else selected
    if filters.limit > 0:
        selected = selected[:filters.limit]
    return selected
