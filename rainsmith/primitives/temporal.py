"""Temporal aggregation of raster series into period totals.

A pixel's total is the sum of its observed samples in the window. A pixel
with no observed sample is no-data rather than zero, so "no rainfall" and
"no observation" stay distinguishable.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from rainsmith.objects.rastergrid import RasterField
from rainsmith.objects.timeseries import DateLike, RasterSeries
from rainsmith.utils.errors import InsufficientDataError

logger = logging.getLogger(__name__)


def _sum_observed(series: RasterSeries) -> np.ndarray:
    stack = series.stack()
    n_obs = np.sum(~np.isnan(stack), axis=0)
    total = np.nansum(stack, axis=0)
    return np.where(n_obs > 0, total, np.nan)


def aggregate_period(
    series: RasterSeries,
    start: DateLike,
    end: DateLike,
    name: str = "precipitation_total",
) -> RasterField:
    """Sum a series over [start, end], both days inclusive.

    Args:
        series: Input raster series.
        start: First day of the period.
        end: Last day of the period.
        name: Name of the returned field.

    Returns:
        Per-pixel total. Metadata carries 'start', 'end' and 'n_samples'.

    Raises:
        InsufficientDataError: If no sample falls inside the period.
        ParameterError: If start is after end.
    """
    window = series.filter_dates(start, end)
    start_date = pd.Timestamp(start).date()
    end_date = pd.Timestamp(end).date()
    if window.is_empty:
        raise InsufficientDataError(
            f"No raster samples between {start_date} and {end_date}",
            suggestion="Check the archive covers the requested period.",
            details={"start": str(start_date), "end": str(end_date)},
        )
    logger.debug(f"Aggregating {len(window)} samples for {start_date}..{end_date}")
    return RasterField(
        data=_sum_observed(window),
        grid=series.grid,
        name=name,
        metadata={
            "start": str(start_date),
            "end": str(end_date),
            "n_samples": len(window),
        },
    )


def aggregate_year(
    series: RasterSeries, year: int, name: str = "precipitation_annual"
) -> RasterField:
    """Sum a series over calendar year `year`.

    Raises:
        InsufficientDataError: If the year has no samples.
    """
    year = int(year)
    try:
        total = aggregate_period(
            series, f"{year:04d}-01-01", f"{year:04d}-12-31", name=name
        )
    except InsufficientDataError as exc:
        raise InsufficientDataError(
            f"No raster samples for year {year}",
            suggestion="Every baseline year needs at least one sample; "
            "narrow the baseline window or fill the archive gap.",
            details={"year": year},
        ) from exc
    return RasterField(
        data=total.data,
        grid=total.grid,
        name=name,
        metadata={"year": year, "n_samples": total.metadata["n_samples"]},
    )


def annual_totals(
    series: RasterSeries,
    years: Sequence[int],
    max_workers: Optional[int] = None,
) -> list[RasterField]:
    """Aggregate each year in `years`, returning fields in the given order.

    With max_workers > 1 the years are aggregated in a thread pool. Results
    are reassembled in input order and the first failing year (in that
    order) is re-raised.
    """
    years = [int(y) for y in years]
    if max_workers is None or max_workers <= 1 or len(years) <= 1:
        return [aggregate_year(series, y) for y in years]

    logger.debug(f"Aggregating {len(years)} years with {max_workers} workers")
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(aggregate_year, series, y) for y in years]
        try:
            return [f.result() for f in futures]
        except Exception:
            for f in futures:
                f.cancel()
            raise
