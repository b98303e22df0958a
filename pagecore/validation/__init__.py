"""Document validation utilities."""

from pagecore.validation.lib import (
    DENY_PATTERNS,
    Diagnostic,
    Severity,
    errors_only,
    has_errors,
    is_valid,
    validate_document,
)

__all__ = [
    "Diagnostic",
    "Severity",
    "DENY_PATTERNS",
    "validate_document",
    "errors_only",
    "has_errors",
    "is_valid",
]
