"""Utility modules for RainSmith."""

from rainsmith.utils.errors import (
    DataValidationError,
    GridMismatchError,
    InsufficientBaselineWindowError,
    InsufficientDataError,
    ParameterError,
    RainSmithError,
    RasterSourceError,
    RegionAreaError,
    raise_parameter_error,
)

__all__ = [
    "RainSmithError",
    "DataValidationError",
    "ParameterError",
    "InsufficientDataError",
    "InsufficientBaselineWindowError",
    "GridMismatchError",
    "RegionAreaError",
    "RasterSourceError",
    "raise_parameter_error",
]
