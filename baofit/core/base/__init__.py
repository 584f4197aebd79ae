"""
Base exceptions and validation helpers with minimal dependencies.
"""

from .exceptions import (
    BaoFitError,
    ValidationError,
    ConfigurationError,
    DataError,
    BinningError,
    InterpolationError,
    FitError,
    validate_not_none,
    validate_positive,
    validate_range,
)

__all__ = [
    "BaoFitError",
    "ValidationError",
    "ConfigurationError",
    "DataError",
    "BinningError",
    "InterpolationError",
    "FitError",
    "validate_not_none",
    "validate_positive",
    "validate_range",
]
