"""
Analysis input loading and result dumping.

Input files (JSON or YAML) hold the flat records produced by extractors:

    endpoints:
      - method: GET
        path: /api/users/{id}
        file: api/users.py
        line: 12
        framework: fastapi
        responseSchema:
          type: object
          properties:
            id: {type: string}
          required: [id]
    calls:
      - method: GET
        url: /api/users/123
        file: web/src/users.ts
        line: 40
        expectedSchema: {type: object, properties: {id: {type: string}}}

Keys may be camelCase or snake_case.
"""

import json
import re
from pathlib import Path
from typing import Any, Optional

import yaml

from contractscope.contracts.models import AnalysisInput, AnalysisResult, CallInput, EndpointInput
from contractscope.contracts.schema import TypeSchema
from contractscope.shared.domain.exceptions import ContractScopeError, InputError
from contractscope.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

SUPPORTED_SUFFIXES = {".json", ".yaml", ".yml"}


_UPPER_AFTER_START = re.compile(r"(?<!^)(?=[A-Z])")


def to_snake_case(key: str) -> str:
    """
    Convert a camelCase record key to snake_case.

    Examples:
        >>> to_snake_case("responseSchema")
        'response_schema'
        >>> to_snake_case("is_dynamic")
        'is_dynamic'
    """
    return _UPPER_AFTER_START.sub("_", key).lower()


def _snake_keys(data: dict[str, Any]) -> dict[str, Any]:
    return {to_snake_case(str(k)): v for k, v in data.items()}


def _schema(data: dict[str, Any], key: str, where: str) -> Optional[TypeSchema]:
    raw = data.get(key)
    if raw is None:
        return None
    try:
        return TypeSchema.from_dict(raw)
    except ContractScopeError as e:
        raise InputError(f"Invalid {key} in {where}: {e}", context={"where": where, **e.context}) from e


def _line(data: dict[str, Any], where: str) -> int:
    try:
        return int(data.get("line") or 0)
    except (TypeError, ValueError) as e:
        raise InputError(f"Invalid line number in {where}: {data.get('line')!r}") from e


def endpoint_from_dict(data: dict[str, Any], index: int = 0) -> EndpointInput:
    """Create an EndpointInput from an input-file record."""
    where = f"endpoints[{index}]"
    if not isinstance(data, dict):
        raise InputError(f"{where} must be a mapping")
    data = _snake_keys(data)

    if not data.get("path"):
        raise InputError(f"Missing required field 'path' in {where}")

    return EndpointInput(
        method=str(data.get("method") or "ANY"),
        path=str(data["path"]),
        file=str(data.get("file", "")),
        line=_line(data, where),
        handler=str(data.get("handler", "")),
        framework=str(data.get("framework", "")),
        request_schema=_schema(data, "request_schema", where),
        response_schema=_schema(data, "response_schema", where),
    )


def call_from_dict(data: dict[str, Any], index: int = 0) -> CallInput:
    """Create a CallInput from an input-file record."""
    where = f"calls[{index}]"
    if not isinstance(data, dict):
        raise InputError(f"{where} must be a mapping")
    data = _snake_keys(data)

    if not data.get("url"):
        raise InputError(f"Missing required field 'url' in {where}")

    return CallInput(
        method=str(data.get("method") or ""),
        url=str(data["url"]),
        file=str(data.get("file", "")),
        line=_line(data, where),
        is_dynamic=bool(data.get("is_dynamic", False)),
        expected_schema=_schema(data, "expected_schema", where),
        variables=[str(v) for v in data.get("variables") or ()],
        call_type=str(data.get("call_type") or "fetch"),
    )


def parse_analysis_input(data: Any) -> AnalysisInput:
    """Build an AnalysisInput from already-decoded JSON/YAML data."""
    if data is None:
        return AnalysisInput()
    if not isinstance(data, dict):
        raise InputError(f"Analysis input must be a mapping, got {type(data).__name__}")

    endpoints = data.get("endpoints") or []
    calls = data.get("calls") or []
    if not isinstance(endpoints, list) or not isinstance(calls, list):
        raise InputError("'endpoints' and 'calls' must be lists")

    return AnalysisInput(
        endpoints=[endpoint_from_dict(e, i) for i, e in enumerate(endpoints)],
        calls=[call_from_dict(c, i) for i, c in enumerate(calls)],
    )


def load_analysis_input(path: str | Path) -> AnalysisInput:
    """
    Load endpoints and calls from a JSON or YAML file.

    Raises:
        InputError: If the file is missing, unreadable or malformed
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise InputError(
            f"Unsupported input format '{suffix}'. Use one of: {', '.join(sorted(SUPPORTED_SUFFIXES))}",
            context={"path": str(path)},
        )

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise InputError(f"Cannot read analysis input {path}: {e}", context={"path": str(path)}) from e

    try:
        data = json.loads(text) if suffix == ".json" else yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise InputError(f"Cannot parse analysis input {path}: {e}", context={"path": str(path)}) from e

    analysis_input = parse_analysis_input(data)
    logger.debug(
        "analysis_input_loaded",
        path=str(path),
        endpoints=len(analysis_input.endpoints),
        calls=len(analysis_input.calls),
    )
    return analysis_input


def dump_result(result: AnalysisResult, fmt: str = "json") -> str:
    """Serialize an AnalysisResult as JSON or YAML text."""
    payload = result.to_dict()
    if fmt == "yaml":
        return yaml.safe_dump(payload, sort_keys=False, allow_unicode=True)
    return json.dumps(payload, indent=2)
