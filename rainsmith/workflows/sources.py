"""Raster source boundary.

The statistical stages never read files or call remote services; they get a
RasterSeries from an object implementing the RasterSource protocol. Retries,
timeouts and quota handling belong to concrete sources, not to rainsmith.
"""

import logging
from typing import Mapping, Optional, Protocol, Sequence, runtime_checkable

import numpy as np
import pandas as pd

from rainsmith.objects.rastergrid import GridSpec, RasterField
from rainsmith.objects.region import Region
from rainsmith.objects.timeseries import DateLike, RasterSeries
from rainsmith.utils.errors import DataValidationError, ParameterError

logger = logging.getLogger(__name__)

# CHIRPS pentads start on these days of every month
PENTAD_START_DAYS = (1, 6, 11, 16, 21, 26)


@runtime_checkable
class RasterSource(Protocol):
    """Anything that can serve a time-filtered raster series."""

    def filter(
        self,
        time_range: tuple[DateLike, DateLike],
        region: Optional[Region] = None,
        band: Optional[str] = None,
    ) -> RasterSeries:
        """Return images with timestamp in time_range (inclusive).

        If region is given, only images whose grid intersects the region
        are returned.
        """
        ...


class InMemoryRasterSource:
    """RasterSource over series already held in memory, keyed by band."""

    def __init__(
        self, bands: Mapping[str, RasterSeries], default_band: Optional[str] = None
    ):
        if not bands:
            raise DataValidationError("InMemoryRasterSource needs at least one band")
        self._bands = dict(bands)
        self.default_band = default_band or next(iter(self._bands))
        if self.default_band not in self._bands:
            raise ParameterError(f"Default band '{self.default_band}' is not loaded")

    @classmethod
    def from_array(
        cls,
        data: np.ndarray,
        timestamps: Sequence[DateLike],
        grid: GridSpec,
        band: str = "precipitation",
        nodata: Optional[float] = None,
    ) -> "InMemoryRasterSource":
        """Build a single-band source from a (time, rows, cols) array.

        Args:
            data: Array of shape (time, rows, cols).
            timestamps: One timestamp per time step.
            grid: Grid of every image.
            band: Band name.
            nodata: Sentinel value to convert to no-data (NaN).
        """
        data = np.asarray(data, dtype=np.float64)
        if data.ndim != 3:
            raise DataValidationError(
                f"data must be 3-D (time, rows, cols), got {data.ndim}-D"
            )
        if nodata is not None:
            data = np.where(data == nodata, np.nan, data)
        fields = [
            RasterField(data=image, grid=grid, name=band, metadata={"time": str(ts)})
            for image, ts in zip(data, pd.DatetimeIndex(timestamps))
        ]
        series = RasterSeries(
            timestamps=pd.DatetimeIndex(timestamps), fields=tuple(fields), grid=grid
        )
        return cls({band: series}, default_band=band)

    @property
    def bands(self) -> list[str]:
        return list(self._bands)

    def filter(
        self,
        time_range: tuple[DateLike, DateLike],
        region: Optional[Region] = None,
        band: Optional[str] = None,
    ) -> RasterSeries:
        band = band or self.default_band
        if band not in self._bands:
            raise ParameterError(
                f"Unknown band '{band}'",
                suggestion=f"Available bands: {', '.join(self._bands)}",
            )
        series = self._bands[band]
        start, end = time_range
        window = series.filter_dates(start, end)
        if region is not None:
            extent = region.bbox or region.grid.bounds
            if not series.grid.intersects(extent):
                logger.info(f"Band '{band}' does not intersect region '{region.name}'")
                return RasterSeries.empty(series.grid)
        logger.debug(f"Serving {len(window)} '{band}' images for {start}..{end}")
        return window

    def __repr__(self) -> str:
        """String representation."""
        return f"InMemoryRasterSource(bands={self.bands}, default='{self.default_band}')"


def pentad_timestamps(year_start: int, year_end: int) -> pd.DatetimeIndex:
    """Start dates of every pentad from year_start to year_end inclusive."""
    if year_end < year_start:
        raise ParameterError(f"year_end {year_end} is before year_start {year_start}")
    dates = [
        pd.Timestamp(year=year, month=month, day=day)
        for year in range(year_start, year_end + 1)
        for month in range(1, 13)
        for day in PENTAD_START_DAYS
    ]
    return pd.DatetimeIndex(dates)
