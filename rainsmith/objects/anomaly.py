"""Result objects of the deviation pipeline.

ClimatologyBaseline, AnomalyResult and ZonalSummary are produced once by a
pipeline stage and read by the next; none of them is mutated afterwards.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from types import MappingProxyType
from typing import Mapping

import numpy as np

from rainsmith.objects.rastergrid import RasterField
from rainsmith.utils.errors import DataValidationError, GridMismatchError


class SeverityCategory(IntEnum):
    """Drought/wet severity classes of percentage deviation, driest first."""

    SEVERE_DROUGHT = 1
    MODERATE_DROUGHT = 2
    MILD_DROUGHT = 3
    NORMAL = 4
    MILD_WET = 5
    MODERATE_WET = 6
    SEVERE_WET = 7

    @property
    def label(self) -> str:
        return _SEVERITY_LABELS[self]


_SEVERITY_LABELS = {
    SeverityCategory.SEVERE_DROUGHT: "Severe drought",
    SeverityCategory.MODERATE_DROUGHT: "Moderate drought",
    SeverityCategory.MILD_DROUGHT: "Mild drought",
    SeverityCategory.NORMAL: "Normal",
    SeverityCategory.MILD_WET: "Mild wet",
    SeverityCategory.MODERATE_WET: "Moderate wet",
    SeverityCategory.SEVERE_WET: "Severe wet",
}


@dataclass(frozen=True, eq=False)
class ClimatologyBaseline:
    """Per-pixel climatological mean and sample standard deviation.

    Attributes:
        mean: Mean of the annual totals.
        stddev: Sample (ddof=1) standard deviation of the annual totals.
        year_start: First baseline year (inclusive).
        year_end: Last baseline year (inclusive).
        sample_count: Number of annual totals summarized.
        annual_totals: The annual total fields, in year order.
    """

    mean: RasterField
    stddev: RasterField
    year_start: int
    year_end: int
    sample_count: int
    annual_totals: tuple[RasterField, ...] = ()

    def __post_init__(self) -> None:
        """Check the baseline invariants."""
        expected = self.year_end - self.year_start + 1
        if self.sample_count != expected:
            raise DataValidationError(
                f"sample_count={self.sample_count} does not match year range "
                f"{self.year_start}-{self.year_end} ({expected} years)"
            )
        if not self.mean.grid.matches(self.stddev.grid):
            raise GridMismatchError("Baseline mean and stddev are on different grids")
        object.__setattr__(self, "annual_totals", tuple(self.annual_totals))
        if self.annual_totals and len(self.annual_totals) != self.sample_count:
            raise DataValidationError(
                f"Got {len(self.annual_totals)} annual totals for "
                f"{self.sample_count} baseline years"
            )

    @property
    def grid(self):
        return self.mean.grid

    @property
    def years(self) -> list[int]:
        return list(range(self.year_start, self.year_end + 1))

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"ClimatologyBaseline(years={self.year_start}-{self.year_end}, "
            f"n={self.sample_count}, shape={self.mean.shape})"
        )


@dataclass(frozen=True, eq=False)
class AnomalyResult:
    """Absolute, percentage and standardized deviation of a period total.

    Attributes:
        absolute: current - mean (mm).
        percentage: absolute / mean * 100, no-data where mean == 0.
        z_score: absolute / stddev, no-data where stddev == 0.
        current: Current-period total the anomaly was derived from.
        baseline: Baseline the anomaly was derived from.
    """

    absolute: RasterField
    percentage: RasterField
    z_score: RasterField
    current: RasterField
    baseline: ClimatologyBaseline

    def fields(self) -> dict[str, RasterField]:
        """Continuous fields keyed by name, in reporting order."""
        return {
            "rainfall_30yr_mean": self.baseline.mean,
            "rainfall_current": self.current,
            "absolute_deviation": self.absolute,
            "percentage_deviation": self.percentage,
            "z_score": self.z_score,
        }

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"AnomalyResult(shape={self.absolute.shape}, "
            f"baseline={self.baseline.year_start}-{self.baseline.year_end})"
        )


@dataclass(frozen=True)
class ZonalSummary:
    """Regional summary of an anomaly run.

    Attributes:
        region_name: Name of the summarized region.
        means: Field name -> area-weighted regional mean (NaN when no valid pixels).
        category_areas: SeverityCategory -> area in km². Every category is
            present; categories not given are stored as 0.0.
    """

    region_name: str
    means: Mapping[str, float] = field(default_factory=dict)
    category_areas: Mapping[SeverityCategory, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Freeze mappings and fill absent categories with zero area."""
        areas = {category: 0.0 for category in SeverityCategory}
        for key, value in self.category_areas.items():
            area = float(value)
            if not np.isfinite(area) or area < 0:
                raise DataValidationError(
                    f"Area of category {key} must be finite and non-negative, "
                    f"got {value}"
                )
            areas[SeverityCategory(key)] = area
        object.__setattr__(
            self, "means", MappingProxyType({k: float(v) for k, v in self.means.items()})
        )
        object.__setattr__(self, "category_areas", MappingProxyType(areas))

    @property
    def valid_area_km2(self) -> float:
        """Area of the region's classified (valid) pixels."""
        return float(sum(self.category_areas.values()))

    def dominant_category(self) -> "SeverityCategory | None":
        """Category covering the largest area, or None if nothing was classified."""
        if self.valid_area_km2 == 0.0:
            return None
        return max(self.category_areas, key=lambda c: self.category_areas[c])

    def __repr__(self) -> str:
        """String representation."""
        n_nodata = sum(1 for v in self.means.values() if np.isnan(v))
        return (
            f"ZonalSummary(region='{self.region_name}', n_fields={len(self.means)}, "
            f"n_nodata={n_nodata}, valid_km2={self.valid_area_km2:.1f})"
        )
