"""Area-weighted zonal statistics over a region.

Pixel weights are the region's per-pixel areas, so geographic grids are not
biased towards high-latitude pixels. A reduction with no valid pixel is a
valid result reported as NaN, not an error.
"""

import logging
from typing import Mapping

import numpy as np
import pandas as pd

from rainsmith.objects.anomaly import (
    ClimatologyBaseline,
    SeverityCategory,
    ZonalSummary,
)
from rainsmith.objects.rastergrid import RasterField
from rainsmith.objects.region import Region
from rainsmith.utils.errors import GridMismatchError, ParameterError, RegionAreaError

logger = logging.getLogger(__name__)


def _weights(field: RasterField, region: Region) -> tuple[np.ndarray, np.ndarray]:
    if not field.grid.matches(region.grid):
        raise GridMismatchError(
            f"'{field.name}' is not on the grid of region '{region.name}'",
            suggestion="Build the region on the grid of the fields it summarizes.",
        )
    ok = region.mask & field.valid
    return ok, region.pixel_area_km2


def weighted_mean(field: RasterField, region: Region) -> float:
    """Area-weighted mean of field over region.

    Raises:
        RegionAreaError: If no valid pixel with positive area lies in region.
    """
    ok, area = _weights(field, region)
    w = area[ok]
    total_w = float(w.sum())
    if total_w <= 0.0:
        raise RegionAreaError(
            f"'{field.name}' has no valid pixels in region '{region.name}'",
            details={"field": field.name, "region": region.name},
        )
    return float(np.sum(field.data[ok] * w) / total_w)


def summarize_scalar(
    fields: Mapping[str, RasterField], region: Region
) -> dict[str, float]:
    """Area-weighted regional mean of each field.

    Fields with no valid pixel in the region map to NaN.
    """
    means: dict[str, float] = {}
    for name, field in fields.items():
        try:
            means[name] = weighted_mean(field, region)
        except RegionAreaError as exc:
            logger.warning(f"{exc.message}; reporting no-data")
            means[name] = float("nan")
    return means


def summarize_by_category(
    classified: RasterField, region: Region
) -> dict[SeverityCategory, float]:
    """Total area (km²) of each severity category inside region.

    Every category is present in the result; absent ones report 0.0.
    """
    ok, area = _weights(classified, region)
    codes = classified.data[ok]
    areas = area[ok]
    result: dict[SeverityCategory, float] = {}
    for category in SeverityCategory:
        result[category] = float(areas[codes == float(category)].sum())
    unclassified = np.setdiff1d(np.unique(codes), [float(c) for c in SeverityCategory])
    if unclassified.size:
        raise ParameterError(
            f"'{classified.name}' holds values that are not severity codes: "
            f"{unclassified[:5].tolist()}",
            suggestion="Pass the output of classify_deviation().",
        )
    return result


def summarize(
    fields: Mapping[str, RasterField],
    classified: RasterField,
    region: Region,
) -> ZonalSummary:
    """Compute both the scalar means and the per-category areas."""
    summary = ZonalSummary(
        region_name=region.name,
        means=summarize_scalar(fields, region),
        category_areas=summarize_by_category(classified, region),
    )
    logger.info(f"Summarized {len(fields)} fields over region '{region.name}'")
    return summary


def annual_regional_means(baseline: ClimatologyBaseline, region: Region) -> pd.Series:
    """Regional mean annual total for each baseline year.

    Returns:
        Series indexed by year (name 'precipitation'), NaN for years with
        no valid pixel in region.
    """
    if not baseline.annual_totals:
        raise ParameterError(
            "Baseline carries no annual totals",
            suggestion="Use a baseline produced by build_baseline().",
        )
    totals = zip(baseline.years, baseline.annual_totals)
    values = summarize_scalar({str(year): total for year, total in totals}, region)
    return pd.Series(
        [values[str(y)] for y in baseline.years],
        index=pd.Index(baseline.years, name="year"),
        name="precipitation",
    )


def deviation_histogram(
    percentage: RasterField, region: Region, max_buckets: int = 50
) -> tuple[np.ndarray, np.ndarray]:
    """Pixel-count histogram of percentage deviation inside region.

    Returns:
        (counts, bin_edges) as from numpy.histogram; empty arrays when the
        region has no valid pixel.
    """
    if max_buckets < 1:
        raise ParameterError(f"max_buckets must be >= 1, got {max_buckets}")
    ok, _ = _weights(percentage, region)
    values = percentage.data[ok]
    if values.size == 0:
        return np.array([], dtype=np.int64), np.array([], dtype=np.float64)
    n_bins = int(min(max_buckets, max(1, np.unique(values).size)))
    return np.histogram(values, bins=n_bins)
