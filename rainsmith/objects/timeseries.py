"""Time-stamped raster series.

A RasterSeries is the ordered collection of (timestamp, RasterField) pairs a
raster source hands to the statistical stages. All members share one grid.
"""

from dataclasses import dataclass
from typing import Iterator, Sequence, Union

import numpy as np
import pandas as pd

from rainsmith.objects.rastergrid import GridSpec, RasterField
from rainsmith.utils.errors import DataValidationError, GridMismatchError, ParameterError

DateLike = Union[str, pd.Timestamp, "np.datetime64"]


@dataclass(frozen=True, eq=False)
class RasterSeries:
    """Ordered raster time series on a single grid.

    Attributes:
        timestamps: DatetimeIndex, one entry per field. Sorted on construction.
        fields: Tuple of RasterField, aligned with timestamps.
        grid: Shared grid of every field.
    """

    timestamps: pd.DatetimeIndex
    fields: tuple[RasterField, ...]
    grid: GridSpec

    def __post_init__(self) -> None:
        """Validate RasterSeries parameters and sort by time."""
        fields = tuple(self.fields)
        try:
            timestamps = pd.DatetimeIndex(self.timestamps)
        except (TypeError, ValueError) as exc:
            raise DataValidationError(
                f"timestamps must be convertible to DatetimeIndex, got {type(self.timestamps)}"
            ) from exc

        if len(timestamps) != len(fields):
            raise DataValidationError(
                f"Got {len(timestamps)} timestamps for {len(fields)} fields"
            )
        if timestamps.hasnans:
            raise DataValidationError("timestamps must not contain NaT")

        for i, f in enumerate(fields):
            if not isinstance(f, RasterField):
                raise DataValidationError(
                    f"fields[{i}] must be RasterField, got {type(f)}"
                )
            if not f.grid.matches(self.grid):
                raise GridMismatchError(
                    f"fields[{i}] ('{f.name}') is not on the series grid",
                    suggestion="Resample inputs onto one grid before building the series.",
                )

        # Stable sort keeps same-timestamp fields in their given order
        order = np.argsort(timestamps.values, kind="stable")
        object.__setattr__(self, "timestamps", timestamps[order])
        object.__setattr__(self, "fields", tuple(fields[i] for i in order))

    @classmethod
    def from_fields(
        cls, timestamps: Sequence[DateLike], fields: Sequence[RasterField]
    ) -> "RasterSeries":
        """Build a series taking the grid from the first field."""
        if not fields:
            raise DataValidationError(
                "Cannot infer grid from an empty field list",
                suggestion="Use RasterSeries.empty(grid) for an empty series.",
            )
        return cls(
            timestamps=pd.DatetimeIndex(timestamps),
            fields=tuple(fields),
            grid=fields[0].grid,
        )

    @classmethod
    def empty(cls, grid: GridSpec) -> "RasterSeries":
        return cls(timestamps=pd.DatetimeIndex([]), fields=(), grid=grid)

    def __len__(self) -> int:
        return len(self.fields)

    def __iter__(self) -> Iterator[tuple[pd.Timestamp, RasterField]]:
        return iter(zip(self.timestamps, self.fields))

    @property
    def is_empty(self) -> bool:
        return len(self.fields) == 0

    def filter_dates(self, start: DateLike, end: DateLike) -> "RasterSeries":
        """Return the members with start <= timestamp <= end.

        Both bounds are whole days: a timestamp at any time of the end day
        is kept.

        Raises:
            ParameterError: If start is after end.
        """
        start_ts = pd.Timestamp(start).normalize()
        end_ts = pd.Timestamp(end).normalize()
        if start_ts > end_ts:
            raise ParameterError(
                f"Period start {start_ts.date()} is after end {end_ts.date()}"
            )
        mask = (self.timestamps >= start_ts) & (
            self.timestamps < end_ts + pd.Timedelta(days=1)
        )
        idx = np.flatnonzero(mask)
        return RasterSeries(
            timestamps=self.timestamps[idx],
            fields=tuple(self.fields[i] for i in idx),
            grid=self.grid,
        )

    def years(self) -> list[int]:
        """Sorted distinct calendar years present in the series."""
        return sorted({int(y) for y in self.timestamps.year})

    def stack(self) -> np.ndarray:
        """Stack the field data into a (time, rows, cols) array."""
        if self.is_empty:
            return np.empty((0,) + self.grid.shape, dtype=np.float64)
        return np.stack([f.data for f in self.fields])

    def __repr__(self) -> str:
        """String representation."""
        if self.is_empty:
            return f"RasterSeries(length=0, grid={self.grid.shape})"
        return (
            f"RasterSeries(length={len(self)}, "
            f"start={self.timestamps[0].date()}, end={self.timestamps[-1].date()}, "
            f"grid={self.grid.shape})"
        )
