"""
Contract analysis - frontend/backend API contract matching and schema diffing.

Resolves frontend call sites to the backend endpoints that serve them,
groups them into contracts and reports structural mismatches between what
the backend sends and what the frontend expects.

Usage:
    from contractscope.contracts import load_analysis_input, analyze_contracts

    result = analyze_contracts(load_analysis_input("extracted.yaml"))
    for contract in result.contracts:
        print(contract.method, contract.endpoint, contract.mismatch_count())
"""

from contractscope.contracts.analyzer import (
    ContractAnalyzer,
    ContractAnalyzerConfig,
    analyze_contracts,
    detect_mismatches,
    severity_of,
    summarize_mismatches,
)
from contractscope.contracts.loader import dump_result, load_analysis_input, parse_analysis_input
from contractscope.contracts.matcher import EndpointMatch, PathMatcher
from contractscope.contracts.models import (
    AnalysisInput,
    AnalysisResult,
    BackendEndpoint,
    CallInput,
    Contract,
    ContractFilters,
    ContractStats,
    ContractStatus,
    EndpointInput,
    FrontendCall,
    UnmatchedCall,
    UnmatchedEndpoint,
    compute_stats,
    filter_contracts,
)
from contractscope.contracts.paths import normalize_path, path_to_pattern
from contractscope.contracts.registry import CallExtractor, EndpointExtractor, ExtractorRegistry
from contractscope.contracts.report import SarifReportGenerator, generate_sarif_report
from contractscope.contracts.schema import (
    FieldMismatch,
    MismatchSeverity,
    MismatchType,
    SchemaType,
    TypeSchema,
    array_schema,
    compare,
    object_schema,
    primitive_schema,
)

__all__ = [
    # Schema
    "TypeSchema",
    "SchemaType",
    "FieldMismatch",
    "MismatchType",
    "MismatchSeverity",
    "object_schema",
    "array_schema",
    "primitive_schema",
    "compare",
    # Paths / matcher
    "normalize_path",
    "path_to_pattern",
    "PathMatcher",
    "EndpointMatch",
    # Models
    "EndpointInput",
    "CallInput",
    "AnalysisInput",
    "BackendEndpoint",
    "FrontendCall",
    "Contract",
    "ContractStatus",
    "UnmatchedEndpoint",
    "UnmatchedCall",
    "AnalysisResult",
    "ContractStats",
    "ContractFilters",
    "compute_stats",
    "filter_contracts",
    # Analyzer
    "ContractAnalyzer",
    "ContractAnalyzerConfig",
    "analyze_contracts",
    "detect_mismatches",
    "severity_of",
    "summarize_mismatches",
    # Input / output
    "load_analysis_input",
    "parse_analysis_input",
    "dump_result",
    "SarifReportGenerator",
    "generate_sarif_report",
    # Extraction plugins
    "EndpointExtractor",
    "CallExtractor",
    "ExtractorRegistry",
]
