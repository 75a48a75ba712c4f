"""Layer 1: Objects - Immutable data representations.

This layer contains only data structures. No I/O libraries, no pyproj,
no plotting. Only standard library + numpy + pandas.
"""

from rainsmith.objects.anomaly import (
    AnomalyResult,
    ClimatologyBaseline,
    SeverityCategory,
    ZonalSummary,
)
from rainsmith.objects.rastergrid import GridSpec, RasterField
from rainsmith.objects.region import Region
from rainsmith.objects.timeseries import RasterSeries

__all__ = [
    "AnomalyResult",
    "ClimatologyBaseline",
    "GridSpec",
    "RasterField",
    "RasterSeries",
    "Region",
    "SeverityCategory",
    "ZonalSummary",
]
