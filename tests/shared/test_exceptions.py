"""Tests for the exception hierarchy and id generation."""

import pytest

from contractscope.shared.domain.exceptions import (
    ConfigurationError,
    ContractScopeError,
    InputError,
    InvalidSchemaError,
    ReportError,
)
from contractscope.shared.utils.ids import generate_id


class TestExceptions:
    """Tests for ContractScopeError subclasses."""

    @pytest.mark.parametrize("error_class", [InvalidSchemaError, InputError, ConfigurationError, ReportError])
    def test_hierarchy(self, error_class):
        error = error_class("boom", context={"file": "a.json"})
        assert isinstance(error, ContractScopeError)
        assert str(error) == "boom"
        assert error.context == {"file": "a.json"}

    def test_context_defaults_to_empty(self):
        assert ContractScopeError("boom").context == {}


class TestGenerateId:
    """Tests for generate_id."""

    def test_prefix_and_length(self):
        value = generate_id("ct")
        prefix, _, suffix = value.partition("_")
        assert prefix == "ct"
        assert len(suffix) == 16

    def test_unique(self):
        assert len({generate_id("mis") for _ in range(100)}) == 100
