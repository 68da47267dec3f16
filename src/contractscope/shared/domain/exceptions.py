"""
Domain exceptions for ContractScope.

Exceptions are raised at construction and loading boundaries only.
The analysis core reports "no answer" as empty values, never as errors.
All application errors inherit from ContractScopeError.
"""


class ContractScopeError(Exception):
    """Base class for all ContractScope exceptions."""

    def __init__(self, message: str, context: dict | None = None):
        super().__init__(message)
        self.context = context or {}


class InvalidSchemaError(ContractScopeError):
    """Raised when a TypeSchema is constructed in an inconsistent state."""

    pass


class InputError(ContractScopeError):
    """Raised when an analysis input file cannot be read or is malformed."""

    pass


class ConfigurationError(ContractScopeError):
    """Raised when configuration is invalid or corrupt."""

    pass


class ReportError(ContractScopeError):
    """Raised when report generation fails."""

    pass
