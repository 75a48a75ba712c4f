"""Shared fixtures for rainsmith tests."""

import numpy as np
import pandas as pd
import pytest

from rainsmith.objects.rastergrid import GridSpec, RasterField
from rainsmith.objects.timeseries import RasterSeries


@pytest.fixture
def utm_grid():
    """2x2 grid of 1 km pixels in UTM zone 43N (each pixel is exactly 1 km²)."""
    return GridSpec(
        crs="EPSG:32643",
        origin=(500000.0, 1002000.0),
        resolution=(1000.0, 1000.0),
        shape=(2, 2),
    )


@pytest.fixture
def pixel_grid():
    """Single 1 km² pixel."""
    return GridSpec(
        crs="EPSG:32643",
        origin=(500000.0, 1001000.0),
        resolution=(1000.0, 1000.0),
        shape=(1, 1),
    )


@pytest.fixture
def geo_grid():
    """3x4 grid of 1-degree pixels over India, lon 68-72, lat 34-37."""
    return GridSpec(
        crs="EPSG:4326",
        origin=(68.0, 37.0),
        resolution=(1.0, 1.0),
        shape=(3, 4),
    )


def make_series(grid, values_by_date, name="precipitation"):
    """Build a RasterSeries from {date: scalar or array}."""
    timestamps = []
    fields = []
    for date, value in values_by_date.items():
        data = np.broadcast_to(np.asarray(value, dtype=np.float64), grid.shape)
        timestamps.append(pd.Timestamp(date))
        fields.append(RasterField(data=data, grid=grid, name=name))
    return RasterSeries(
        timestamps=pd.DatetimeIndex(timestamps), fields=tuple(fields), grid=grid
    )


def constant_annual_series(grid, totals_by_year, samples_per_year=4):
    """Series whose samples in each year sum to the given annual total."""
    values = {}
    for year, total in totals_by_year.items():
        for i in range(samples_per_year):
            values[f"{year}-{3 * i + 1:02d}-01"] = total / samples_per_year
    return make_series(grid, values)


@pytest.fixture
def series_from():
    """Factory fixture: series_from(grid, {date: value})."""
    return make_series


@pytest.fixture
def annual_series_from():
    """Factory fixture: annual_series_from(grid, {year: total})."""
    return constant_annual_series
