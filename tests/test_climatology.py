"""Tests for the climatological baseline."""

import numpy as np
import pytest

from rainsmith.objects.anomaly import ClimatologyBaseline
from rainsmith.objects.rastergrid import RasterField
from rainsmith.primitives.climatology import (
    WelfordAccumulator,
    build_baseline,
    check_baseline_window,
)
from rainsmith.utils.errors import (
    DataValidationError,
    InsufficientBaselineWindowError,
    InsufficientDataError,
)


class TestWelfordAccumulator:
    """Tests for WelfordAccumulator."""

    def test_matches_numpy(self, utm_grid):
        """Test mean and sample std agree with numpy."""
        rng = np.random.default_rng(42)
        samples = rng.gamma(2.0, 400.0, size=(12, 2, 2))
        acc = WelfordAccumulator(utm_grid)
        for values in samples:
            acc.update(RasterField(data=values, grid=utm_grid))
        np.testing.assert_allclose(acc.mean(), samples.mean(axis=0))
        np.testing.assert_allclose(acc.std(), samples.std(axis=0, ddof=1))

    def test_skips_nodata_per_pixel(self, utm_grid):
        """Test a no-data pixel only reduces its own count."""
        acc = WelfordAccumulator(utm_grid)
        acc.update(RasterField(data=np.array([[1.0, np.nan], [1.0, 1.0]]), grid=utm_grid))
        acc.update(RasterField(data=np.array([[3.0, 5.0], [3.0, 3.0]]), grid=utm_grid))
        np.testing.assert_array_equal(acc.count, [[2, 1], [2, 2]])
        assert acc.mean()[0, 1] == 5.0
        assert np.isnan(acc.std()[0, 1])
        assert acc.std()[0, 0] == pytest.approx(np.sqrt(2.0))

    def test_large_totals_are_stable(self, utm_grid):
        """Test the spread of large totals is not lost to cancellation."""
        acc = WelfordAccumulator(utm_grid)
        for offset in (1.0, 2.0, 3.0):
            acc.update(RasterField.full(utm_grid, 1e9 + offset))
        np.testing.assert_allclose(acc.std(), 1.0, rtol=1e-6)

    def test_constant_series_has_zero_std(self, utm_grid):
        """Test identical values give exactly zero variance."""
        acc = WelfordAccumulator(utm_grid)
        for _ in range(5):
            acc.update(RasterField.full(utm_grid, 1234.5))
        np.testing.assert_array_equal(acc.variance(), 0.0)


class TestBuildBaseline:
    """Tests for build_baseline."""

    def test_mean_and_stddev(self, utm_grid, annual_series_from):
        """Test the baseline of totals 100, 200, 300."""
        series = annual_series_from(utm_grid, {2001: 100.0, 2002: 200.0, 2003: 300.0})
        baseline = build_baseline(series, 2001, 2003)
        np.testing.assert_allclose(baseline.mean.data, 200.0)
        np.testing.assert_allclose(baseline.stddev.data, 100.0)
        assert baseline.mean.grid.matches(series.grid)
        assert baseline.stddev.grid.matches(series.grid)
        assert baseline.sample_count == 3
        assert baseline.mean.name == "rainfall_30yr_mean"
        assert baseline.stddev.name == "rainfall_30yr_stddev"

    def test_ignores_years_outside_window(self, utm_grid, annual_series_from):
        """Test samples outside the window do not contribute."""
        series = annual_series_from(
            utm_grid, {2000: 9999.0, 2001: 100.0, 2002: 300.0, 2003: 9999.0}
        )
        baseline = build_baseline(series, 2001, 2002)
        np.testing.assert_allclose(baseline.mean.data, 200.0)

    def test_stddev_non_negative(self, utm_grid, annual_series_from):
        """Test standard deviation is never negative."""
        series = annual_series_from(
            utm_grid, {year: 500.0 + 0.1 * (year % 3) for year in range(1991, 2021)}
        )
        baseline = build_baseline(series, 1991, 2020)
        assert (baseline.stddev.data >= 0).all()
        assert baseline.sample_count == 30
        assert len(baseline.annual_totals) == 30

    def test_single_year_window(self, utm_grid, annual_series_from):
        """Test that a one-year window raises error."""
        series = annual_series_from(utm_grid, {2001: 100.0})
        with pytest.raises(InsufficientBaselineWindowError, match="at least 2"):
            build_baseline(series, 2001, 2001)

    def test_reversed_window(self):
        """Test that an end year before the start year raises error."""
        with pytest.raises(InsufficientBaselineWindowError):
            check_baseline_window(2020, 1991)

    def test_missing_year_fails(self, utm_grid, annual_series_from):
        """Test that a baseline year without samples raises error."""
        series = annual_series_from(utm_grid, {2001: 100.0, 2003: 300.0})
        with pytest.raises(InsufficientDataError, match="year 2002"):
            build_baseline(series, 2001, 2003)

    def test_parallel(self, utm_grid, annual_series_from):
        """Test the threaded build gives the same baseline."""
        series = annual_series_from(utm_grid, {2001: 100.0, 2002: 200.0, 2003: 300.0})
        baseline = build_baseline(series, 2001, 2003, max_workers=3)
        np.testing.assert_allclose(baseline.stddev.data, 100.0)
        assert [t.metadata["year"] for t in baseline.annual_totals] == [2001, 2002, 2003]


class TestClimatologyBaseline:
    """Tests for ClimatologyBaseline invariants."""

    def test_sample_count_must_match_years(self, utm_grid):
        """Test that an inconsistent sample count raises error."""
        field = RasterField.full(utm_grid, 1.0)
        with pytest.raises(DataValidationError, match="sample_count"):
            ClimatologyBaseline(
                mean=field, stddev=field, year_start=2001, year_end=2003, sample_count=2
            )
