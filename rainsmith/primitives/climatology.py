"""Climatological baseline: per-pixel mean and variability of annual totals.

Mean and sample variance are accumulated with Welford's online algorithm,
which avoids the cancellation of the naive sum-of-squares formula when
annual totals are large relative to their spread.
"""

import logging
from typing import Optional

import numpy as np

from rainsmith.objects.anomaly import ClimatologyBaseline
from rainsmith.objects.rastergrid import GridSpec, RasterField
from rainsmith.objects.timeseries import RasterSeries
from rainsmith.primitives.temporal import annual_totals
from rainsmith.utils.errors import GridMismatchError, InsufficientBaselineWindowError

logger = logging.getLogger(__name__)

MIN_BASELINE_YEARS = 2


class WelfordAccumulator:
    """Pixel-wise running mean and variance over a stream of fields.

    No-data pixels in an update are skipped for that pixel only, so each
    pixel keeps its own observation count.
    """

    def __init__(self, grid: GridSpec):
        self.grid = grid
        self.count = np.zeros(grid.shape, dtype=np.int64)
        self._mean = np.zeros(grid.shape, dtype=np.float64)
        self._m2 = np.zeros(grid.shape, dtype=np.float64)

    def update(self, field: RasterField) -> None:
        if not field.grid.matches(self.grid):
            raise GridMismatchError(
                f"Field '{field.name}' is not on the accumulator grid"
            )
        x = field.data
        ok = ~np.isnan(x)
        self.count[ok] += 1
        delta = np.where(ok, x - self._mean, 0.0)
        n = np.maximum(self.count, 1)
        self._mean += np.where(ok, delta / n, 0.0)
        self._m2 += np.where(ok, delta * (x - self._mean), 0.0)

    def mean(self) -> np.ndarray:
        """Mean where at least one value was seen, NaN elsewhere."""
        return np.where(self.count >= 1, self._mean, np.nan)

    def variance(self, ddof: int = 1) -> np.ndarray:
        """Variance where count > ddof, NaN elsewhere."""
        denom = self.count - ddof
        out = np.full(self.grid.shape, np.nan, dtype=np.float64)
        np.divide(self._m2, denom, out=out, where=denom > 0)
        # Rounding can leave tiny negative M2 for near-constant series
        return np.where(out < 0, 0.0, out)

    def std(self, ddof: int = 1) -> np.ndarray:
        return np.sqrt(self.variance(ddof=ddof))


def check_baseline_window(year_start: int, year_end: int) -> int:
    """Return the window length, raising if it is too short for a baseline.

    Raises:
        InsufficientBaselineWindowError: If the window has fewer than 2 years.
    """
    n_years = int(year_end) - int(year_start) + 1
    if n_years < MIN_BASELINE_YEARS:
        raise InsufficientBaselineWindowError(
            f"Baseline {year_start}-{year_end} spans {max(n_years, 0)} year(s); "
            f"at least {MIN_BASELINE_YEARS} are required for a standard deviation",
            suggestion="Use a multi-year window such as 1991-2020.",
            details={"year_start": year_start, "year_end": year_end},
        )
    return n_years


def build_baseline(
    series: RasterSeries,
    year_start: int,
    year_end: int,
    max_workers: Optional[int] = None,
) -> ClimatologyBaseline:
    """Build the climatological baseline for [year_start, year_end].

    Args:
        series: Raster series covering the baseline window.
        year_start: First baseline year (inclusive).
        year_end: Last baseline year (inclusive).
        max_workers: Thread count for per-year aggregation (None = sequential).

    Returns:
        ClimatologyBaseline with mean and sample standard deviation.

    Raises:
        InsufficientBaselineWindowError: If the window has fewer than 2 years.
        InsufficientDataError: If any year has no samples.
    """
    year_start, year_end = int(year_start), int(year_end)
    n_years = check_baseline_window(year_start, year_end)

    years = list(range(year_start, year_end + 1))
    totals = annual_totals(series, years, max_workers=max_workers)

    acc = WelfordAccumulator(series.grid)
    for total in totals:
        acc.update(total)

    mean = RasterField(
        data=acc.mean(),
        grid=series.grid,
        name="rainfall_30yr_mean",
        metadata={"year_start": year_start, "year_end": year_end},
    )
    stddev = RasterField(
        data=acc.std(ddof=1),
        grid=series.grid,
        name="rainfall_30yr_stddev",
        metadata={"year_start": year_start, "year_end": year_end},
    )
    logger.info(
        f"Built baseline {year_start}-{year_end} from {n_years} annual totals "
        f"({mean.n_valid} valid pixels)"
    )
    return ClimatologyBaseline(
        mean=mean,
        stddev=stddev,
        year_start=year_start,
        year_end=year_end,
        sample_count=n_years,
        annual_totals=tuple(totals),
    )
