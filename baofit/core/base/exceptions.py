"""
Exception hierarchy for baofit.

Every fatal condition met while reading data, building the model or running
the fit is reported through one of these classes. None of them is meant to be
caught and recovered from inside the package: a dataset that violates one of
its invariants must never reach the likelihood.
"""

from typing import Optional, Any, Dict, Union

Number = Union[int, float]


def _with_context(details: Optional[Dict[str, Any]], **context) -> Dict[str, Any]:
    """Merge the non-None ``context`` entries into a copy of ``details``."""
    merged = dict(details or {})
    merged.update((k, v) for k, v in context.items() if v is not None)
    return merged


class BaoFitError(Exception):
    """Base exception for all baofit errors.

    Parameters
    ----------
    message : str
        Human-readable description of the failure
    details : dict, optional
        Context such as file name, line number or bin index, shown after the
        message
    cause : Exception, optional
        Lower-level exception that triggered this one
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 cause: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.details = dict(details or {})
        self.cause = cause

    def __str__(self) -> str:
        text = self.message
        if self.details:
            context = ", ".join(f"{k}={v}" for k, v in self.details.items())
            text = f"{text} (Details: {context})"
        if self.cause is not None:
            text = f"{text} (Caused by: {self.cause})"
        return text

    def add_detail(self, key: str, value: Any) -> "BaoFitError":
        """Attach one more piece of context and return the same error."""
        self.details[key] = value
        return self

    def get_detail(self, key: str, default: Any = None) -> Any:
        return self.details.get(key, default)


class ValidationError(BaoFitError):
    """An argument or a data value is outside its allowed domain."""

    def __init__(self, message: str, field: Optional[str] = None,
                 value: Optional[Any] = None, **kwargs):
        details = _with_context(kwargs.pop('details', None), field=field, value=value)
        super().__init__(message, details=details, **kwargs)
        self.field = field
        self.value = value


class ConfigurationError(BaoFitError):
    """Invalid or missing run configuration.

    Raised for bad command-line options, configuration files and
    non-physical cosmological parameters.
    """

    def __init__(self, message: str, config_file: Optional[str] = None,
                 parameter: Optional[str] = None, **kwargs):
        details = _with_context(kwargs.pop('details', None),
                                config_file=config_file, parameter=parameter)
        super().__init__(message, details=details, **kwargs)
        self.config_file = config_file
        self.parameter = parameter


class DataError(BaoFitError):
    """An input file cannot be opened, parsed or applied to the dataset.

    ``file_path`` and the 1-based ``line_number`` point at the offending
    input when known.
    """

    def __init__(self, message: str, file_path: Optional[str] = None,
                 line_number: Optional[int] = None, **kwargs):
        details = _with_context(kwargs.pop('details', None),
                                file_path=None if file_path is None else str(file_path),
                                line=line_number)
        super().__init__(message, details=details, **kwargs)
        self.file_path = file_path
        self.line_number = line_number


class BinningError(ValidationError):
    """Out-of-range bin lookup or inconsistent bin fill."""

    def __init__(self, message: str, value: Optional[Any] = None,
                 index: Optional[int] = None, **kwargs):
        details = _with_context(kwargs.pop('details', None), index=index)
        super().__init__(message, value=value, details=details, **kwargs)
        self.index = index


class InterpolationError(BaoFitError):
    """A tabulated function cannot be interpolated."""


class FitError(BaoFitError):
    """The minimization cannot be set up or run."""

    def __init__(self, message: str, step: Optional[str] = None, **kwargs):
        details = _with_context(kwargs.pop('details', None), step=step)
        super().__init__(message, details=details, **kwargs)
        self.step = step


def validate_not_none(value: Any, name: str) -> Any:
    """Return ``value``, raising :class:`ValidationError` if it is None."""
    if value is None:
        raise ValidationError(f"'{name}' cannot be None", field=name)
    return value


def validate_positive(value: Number, name: str) -> Number:
    """Return ``value`` if it is strictly positive.

    NaN is rejected along with zero and negative numbers.
    """
    if not value > 0:
        raise ValidationError(f"'{name}' must be positive, got {value}", field=name, value=value)
    return value


def validate_range(value: Number, min_val: Optional[Number], max_val: Optional[Number],
                   name: str) -> Number:
    """Return ``value`` if it lies in the closed interval ``[min_val, max_val]``.

    A bound of None leaves that side open.
    """
    if min_val is not None and value < min_val:
        raise ValidationError(f"'{name}' must be >= {min_val}, got {value}", field=name, value=value)
    if max_val is not None and value > max_val:
        raise ValidationError(f"'{name}' must be <= {max_val}, got {value}", field=name, value=value)
    return value
