"""
SARIF Report Generator for Contract Analysis.

Generates SARIF (Static Analysis Results Interchange Format) reports
from contract analysis results so CI systems and editors can display
mismatches at the frontend call sites.

SARIF Specification: https://sarifweb.azurewebsites.net/
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from contractscope.contracts.analyzer import summarize_mismatches
from contractscope.contracts.models import AnalysisResult, Contract
from contractscope.contracts.schema import FieldMismatch, MismatchSeverity, MismatchType
from contractscope.shared.domain.exceptions import ReportError
from contractscope.shared.infrastructure.config import settings

SEVERITY_TO_SARIF_LEVEL = {
    MismatchSeverity.ERROR: "error",
    MismatchSeverity.WARNING: "warning",
    MismatchSeverity.INFO: "note",
}

UNMATCHED_ENDPOINT = "unmatched_endpoint"
UNMATCHED_CALL = "unmatched_call"

RULES = {
    MismatchType.MISSING_IN_FRONTEND.value: {
        "id": "CONTRACT001",
        "name": "MissingInFrontend",
        "shortDescription": "Backend field not used by the frontend",
        "fullDescription": "The backend response contains a field that the frontend call site does not declare in its expected type.",
        "level": "warning",
    },
    MismatchType.MISSING_IN_BACKEND.value: {
        "id": "CONTRACT002",
        "name": "MissingInBackend",
        "shortDescription": "Frontend expects a field the backend doesn't send",
        "fullDescription": "The frontend call site expects a field that the backend response schema does not provide. Reading it will yield undefined at runtime.",
        "level": "error",
    },
    MismatchType.TYPE_MISMATCH.value: {
        "id": "CONTRACT003",
        "name": "TypeMismatch",
        "shortDescription": "Field type differs between backend and frontend",
        "fullDescription": "The backend sends a value of a different type than the frontend expects. Nested fields below it were not compared.",
        "level": "error",
    },
    MismatchType.OPTIONALITY_MISMATCH.value: {
        "id": "CONTRACT004",
        "name": "OptionalityMismatch",
        "shortDescription": "Optional backend field required by the frontend",
        "fullDescription": "The backend may omit this field but the frontend treats it as always present.",
        "level": "warning",
    },
    MismatchType.NULLABILITY_MISMATCH.value: {
        "id": "CONTRACT005",
        "name": "NullabilityMismatch",
        "shortDescription": "Nullable backend field not handled by the frontend",
        "fullDescription": "The backend may send null for this field but the frontend type does not allow it.",
        "level": "warning",
    },
    UNMATCHED_ENDPOINT: {
        "id": "CONTRACT101",
        "name": "UnmatchedEndpoint",
        "shortDescription": "Backend endpoint not called by any frontend code",
        "fullDescription": "No frontend call site resolved to this endpoint. It may be dead code or called from outside the analysed repositories.",
        "level": "note",
    },
    UNMATCHED_CALL: {
        "id": "CONTRACT102",
        "name": "UnmatchedCall",
        "shortDescription": "Frontend call matches no backend endpoint",
        "fullDescription": "The frontend calls a URL that no known backend route serves.",
        "level": "warning",
    },
}


class SarifReportGenerator:
    """
    Generates SARIF reports from contract analysis results.

    Usage:
        generator = SarifReportGenerator()
        sarif = generator.generate(analysis_result)
        generator.save(sarif, "contracts.sarif")
    """

    SARIF_VERSION = "2.1.0"
    SARIF_SCHEMA = "https://raw.githubusercontent.com/oasis-tcs/sarif-spec/master/Schemata/sarif-schema-2.1.0.json"

    def __init__(
        self,
        tool_name: str | None = None,
        tool_version: str | None = None,
        include_unmatched: bool = True,
    ):
        """
        Initialize SARIF generator.

        Args:
            tool_name: Name of the tool generating the report
            tool_version: Version of the tool
            include_unmatched: Also report unmatched endpoints and calls
        """
        self.tool_name = tool_name or settings.sarif_tool_name
        self.tool_version = tool_version or settings.sarif_tool_version
        self.include_unmatched = include_unmatched

    def generate(
        self,
        result: AnalysisResult,
        project_root: Path | None = None,
    ) -> dict[str, Any]:
        """
        Generate SARIF report from analysis result.

        Args:
            result: Contract analysis result
            project_root: Optional project root for relative paths

        Returns:
            SARIF report as dictionary
        """
        results: list[dict[str, Any]] = []
        used_rules: set[str] = set()

        for contract in result.contracts:
            summaries = summarize_mismatches(contract.mismatches)
            for mismatch, summary in zip(contract.mismatches, summaries):
                results.append(self._mismatch_result(contract, mismatch, summary, project_root))
                used_rules.add(mismatch.mismatch_type.value)

        if self.include_unmatched:
            for ep in result.unmatched_backend:
                results.append(self._result(
                    UNMATCHED_ENDPOINT,
                    f"{ep.method} {ep.path} is not called by any frontend code",
                    [self._build_location(ep.file, ep.line, project_root, "backend endpoint")],
                    {"method": ep.method, "path": ep.path, "handler": ep.handler},
                ))
                used_rules.add(UNMATCHED_ENDPOINT)

            for call in result.unmatched_frontend:
                results.append(self._result(
                    UNMATCHED_CALL,
                    f"{call.method or 'ANY'} {call.url} matches no backend endpoint",
                    [self._build_location(call.file, call.line, project_root, "frontend call")],
                    {"method": call.method, "url": call.url},
                ))
                used_rules.add(UNMATCHED_CALL)

        return {
            "$schema": self.SARIF_SCHEMA,
            "version": self.SARIF_VERSION,
            "runs": [
                {
                    "tool": {
                        "driver": {
                            "name": self.tool_name,
                            "version": self.tool_version,
                            "rules": self._build_rules(used_rules),
                        },
                    },
                    "invocations": [
                        {
                            "executionSuccessful": True,
                            "endTimeUtc": datetime.now(timezone.utc).isoformat(),
                        },
                    ],
                    "results": results,
                    "properties": {
                        "summary": {
                            "contracts": len(result.contracts),
                            "unmatchedBackend": len(result.unmatched_backend),
                            "unmatchedFrontend": len(result.unmatched_frontend),
                            "totalMismatches": result.total_mismatches,
                            "analyzedAt": result.analyzed_at.isoformat(),
                        },
                    },
                },
            ],
        }

    def _build_rules(self, used: set[str]) -> list[dict[str, Any]]:
        rules = []
        # RULES order keeps the output stable
        for key, info in RULES.items():
            if key not in used:
                continue
            rules.append({
                "id": info["id"],
                "name": info["name"],
                "shortDescription": {"text": info["shortDescription"]},
                "fullDescription": {"text": info["fullDescription"]},
                "defaultConfiguration": {"level": info["level"]},
            })
        return rules

    def _mismatch_result(
        self,
        contract: Contract,
        mismatch: FieldMismatch,
        summary: str,
        project_root: Path | None,
    ) -> dict[str, Any]:
        locations = [
            self._build_location(call.file, call.line, project_root, "frontend call")
            for call in contract.frontend_calls
            if call.file
        ]
        entry = self._result(
            mismatch.mismatch_type.value,
            f"{contract.method} {contract.endpoint}: {summary}",
            locations,
            {
                "contractId": contract.id,
                "mismatchId": mismatch.id,
                "fieldPath": mismatch.field_path,
                "backendType": mismatch.backend_type,
                "frontendType": mismatch.frontend_type,
            },
            level=SEVERITY_TO_SARIF_LEVEL.get(mismatch.severity, "warning"),
        )
        if contract.backend.file:
            entry["relatedLocations"] = [
                self._build_location(contract.backend.file, contract.backend.line, project_root, "backend endpoint")
            ]
        return entry

    def _result(
        self,
        rule_key: str,
        message: str,
        locations: list[dict[str, Any]],
        properties: dict[str, Any],
        level: str | None = None,
    ) -> dict[str, Any]:
        rule = RULES[rule_key]
        entry: dict[str, Any] = {
            "ruleId": rule["id"],
            "level": level or rule["level"],
            "message": {"text": message},
            "properties": properties,
        }
        if locations:
            entry["locations"] = locations
        return entry

    def _build_location(
        self,
        file_path: str,
        line: int | None,
        project_root: Path | None,
        description: str,
    ) -> dict[str, Any]:
        """Build SARIF location object."""
        uri = file_path
        if project_root and file_path:
            try:
                uri = str(Path(file_path).relative_to(project_root))
            except ValueError:
                uri = file_path

        location: dict[str, Any] = {
            "physicalLocation": {
                "artifactLocation": {"uri": uri},
            },
            "message": {"text": f"Location of {description}"},
        }
        if line:
            location["physicalLocation"]["region"] = {"startLine": line}
        return location

    def save(self, sarif: dict[str, Any], output_path: str | Path, indent: int = 2) -> None:
        """
        Save SARIF report to file.

        Raises:
            ReportError: If the file cannot be written
        """
        output_path = Path(output_path)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, "w", encoding="utf-8") as f:
                json.dump(sarif, f, indent=indent)
        except OSError as e:
            raise ReportError(f"Cannot write SARIF report to {output_path}: {e}") from e

    def to_json(self, sarif: dict[str, Any], indent: int = 2) -> str:
        """Convert SARIF report to JSON string."""
        return json.dumps(sarif, indent=indent)


def generate_sarif_report(
    result: AnalysisResult,
    output_path: str | Path | None = None,
    project_root: Path | None = None,
) -> dict[str, Any]:
    """
    Convenience function to generate SARIF report.

    Args:
        result: Contract analysis result
        output_path: Optional output file path
        project_root: Optional project root for relative paths

    Returns:
        SARIF report dictionary
    """
    generator = SarifReportGenerator()
    sarif = generator.generate(result, project_root)

    if output_path:
        generator.save(sarif, output_path)

    return sarif
