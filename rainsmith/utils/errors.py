"""Standardized errors for RainSmith.

Every error raised by the package derives from RainSmithError, so callers can
catch the whole family at once. Data-sufficiency and grid errors are fatal to
the computation that raised them; zonal no-data is reported as NaN instead.
"""

from typing import Any, NoReturn, Optional


class RainSmithError(Exception):
    """Base exception for RainSmith errors."""

    def __init__(
        self,
        message: str,
        suggestion: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        """Initialize RainSmith error.

        Args:
            message: Primary error message.
            suggestion: Optional suggestion for fixing the error.
            details: Optional dictionary with additional error details.
        """
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        """Format error message with suggestion if available."""
        if self.suggestion:
            return f"{self.message}\n\nSuggestion: {self.suggestion}"
        return self.message


class DataValidationError(RainSmithError):
    """Error raised when data validation fails."""

    pass


class ParameterError(RainSmithError):
    """Error raised when parameters are invalid."""

    pass


class InsufficientDataError(DataValidationError):
    """A requested year or period has zero contributing raster samples."""

    pass


class InsufficientBaselineWindowError(ParameterError):
    """Fewer than two years were requested for a climatological baseline."""

    pass


class GridMismatchError(DataValidationError):
    """Two fields being combined do not share spatial reference/resolution."""

    pass


class RegionAreaError(DataValidationError):
    """A region has zero valid pixels for a zonal reduction."""

    pass


class RasterSourceError(RainSmithError):
    """The raster source failed while serving a request."""

    pass


# Longest value representation quoted in a parameter error message
MAX_VALUE_REPR = 80


def _short_repr(value: Any) -> str:
    text = repr(value)
    if len(text) > MAX_VALUE_REPR:
        return text[: MAX_VALUE_REPR - 3] + "..."
    return text


def raise_parameter_error(
    parameter_name: str,
    value: Any,
    valid_values: Optional[list[str]] = None,
    constraint: Optional[str] = None,
    suggestion: Optional[str] = None,
) -> NoReturn:
    """Raise ParameterError for a rejected argument or config value.

    The message names the parameter and quotes the offending value, cut
    short for long inputs such as key lists read from a config file.

    Args:
        parameter_name: Name of the invalid parameter.
        value: Invalid value that was provided.
        valid_values: Accepted values, listed in the message (optional).
        constraint: Constraint that was violated (optional).
        suggestion: How to fix the error (optional).

    Raises:
        ParameterError: Always.
    """
    lines = [f"Invalid value for parameter '{parameter_name}': {_short_repr(value)}"]
    if constraint:
        lines.append(f"Constraint: {constraint}")
    if valid_values:
        lines.append(f"Valid values: {', '.join(map(str, valid_values))}")
    raise ParameterError(
        "\n".join(lines),
        suggestion=suggestion,
        details={"parameter": parameter_name, "value": value},
    )
