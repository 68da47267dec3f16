"""Shared test fixtures for the ContractScope test suite."""

import json
from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from contractscope.contracts.schema import TypeSchema, object_schema, primitive_schema


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def user_schema() -> TypeSchema:
    """Backend response for GET /api/users/:id - {id: string, name: string}, both required."""
    return object_schema(
        {
            "id": primitive_schema("string"),
            "name": primitive_schema("string"),
        },
        required=["id", "name"],
    )


@pytest.fixture
def sample_input_data() -> dict:
    """Extractor output with one healthy contract, one broken contract and strays."""
    return {
        "endpoints": [
            {
                "method": "GET",
                "path": "/api/users",
                "file": "api/users.py",
                "line": 10,
                "handler": "list_users",
                "framework": "fastapi",
            },
            {
                "method": "GET",
                "path": "/api/users/{id}",
                "file": "api/users.py",
                "line": 20,
                "handler": "get_user",
                "framework": "fastapi",
                "responseSchema": {
                    "type": "object",
                    "properties": {
                        "id": {"type": "string"},
                        "age": {"type": "integer"},
                    },
                    "required": ["id", "age"],
                },
            },
            {
                "method": "DELETE",
                "path": "/api/users/{id}",
                "file": "api/users.py",
                "line": 30,
                "handler": "delete_user",
            },
        ],
        "calls": [
            {"method": "GET", "url": "/api/users", "file": "web/src/list.ts", "line": 5},
            {
                "method": "GET",
                "url": "/api/users/42",
                "file": "web/src/user.ts",
                "line": 12,
                "expectedSchema": {
                    "type": "object",
                    "properties": {
                        "id": {"type": "string"},
                        "age": {"type": "string"},
                    },
                },
            },
            {"method": "POST", "url": "/api/orders", "file": "web/src/orders.ts", "line": 7},
        ],
    }


@pytest.fixture
def sample_input_json(tmp_path: Path, sample_input_data: dict) -> Path:
    path = tmp_path / "extracted.json"
    path.write_text(json.dumps(sample_input_data), encoding="utf-8")
    return path


@pytest.fixture
def sample_input_yaml(tmp_path: Path, sample_input_data: dict) -> Path:
    path = tmp_path / "extracted.yaml"
    path.write_text(yaml.safe_dump(sample_input_data), encoding="utf-8")
    return path
