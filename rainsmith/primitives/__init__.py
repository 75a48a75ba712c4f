"""Layer 2: Primitives - Pure operations.

This layer holds the statistical stages of the deviation pipeline. It can
import numpy, pandas and pyproj. No file I/O or plotting.
"""

from rainsmith.primitives.anomaly import compute_anomaly
from rainsmith.primitives.classification import (
    SEVERITY_RULES,
    classify_deviation,
    classify_value,
)
from rainsmith.primitives.climatology import (
    MIN_BASELINE_YEARS,
    WelfordAccumulator,
    build_baseline,
    check_baseline_window,
)
from rainsmith.primitives.raster_ops import (
    add,
    check_same_grid,
    divide,
    greater_or_equal,
    greater_than,
    less_or_equal,
    less_than,
    logical_and,
    multiply,
    subtract,
)
from rainsmith.primitives.region import (
    coerce_bbox,
    region_from_bbox,
    region_from_grid,
    region_from_mask,
)
from rainsmith.primitives.spatial_reference import (
    SpatialReference,
    pixel_area_km2,
    transform_bbox,
    transform_coordinates,
)
from rainsmith.primitives.temporal import aggregate_period, aggregate_year, annual_totals
from rainsmith.primitives.zonal import (
    annual_regional_means,
    deviation_histogram,
    summarize,
    summarize_by_category,
    summarize_scalar,
    weighted_mean,
)

__all__ = [
    "MIN_BASELINE_YEARS",
    "SEVERITY_RULES",
    "SpatialReference",
    "WelfordAccumulator",
    "add",
    "aggregate_period",
    "aggregate_year",
    "annual_regional_means",
    "annual_totals",
    "build_baseline",
    "check_baseline_window",
    "check_same_grid",
    "classify_deviation",
    "classify_value",
    "coerce_bbox",
    "compute_anomaly",
    "deviation_histogram",
    "divide",
    "greater_or_equal",
    "greater_than",
    "less_or_equal",
    "less_than",
    "logical_and",
    "multiply",
    "pixel_area_km2",
    "region_from_bbox",
    "region_from_grid",
    "region_from_mask",
    "subtract",
    "summarize",
    "summarize_by_category",
    "summarize_scalar",
    "transform_bbox",
    "transform_coordinates",
    "weighted_mean",
]
