"""Tests for anomaly computation."""

import numpy as np
import pytest

from rainsmith.objects.anomaly import ClimatologyBaseline
from rainsmith.objects.rastergrid import GridSpec, RasterField
from rainsmith.primitives.anomaly import compute_anomaly
from rainsmith.utils.errors import GridMismatchError


def _baseline(grid, mean, stddev):
    return ClimatologyBaseline(
        mean=RasterField(data=np.asarray(mean, dtype=float), grid=grid, name="mean"),
        stddev=RasterField(data=np.asarray(stddev, dtype=float), grid=grid, name="std"),
        year_start=1991,
        year_end=2020,
        sample_count=30,
    )


class TestComputeAnomaly:
    """Tests for compute_anomaly."""

    def test_deviations(self, utm_grid):
        """Test absolute, percentage and z-score values."""
        baseline = _baseline(utm_grid, [[200.0, 100.0], [50.0, 400.0]], np.full((2, 2), 100.0))
        current = RasterField(data=np.array([[300.0, 80.0], [50.0, 0.0]]), grid=utm_grid)
        result = compute_anomaly(current, baseline)
        np.testing.assert_allclose(result.absolute.data, [[100.0, -20.0], [0.0, -400.0]])
        np.testing.assert_allclose(result.percentage.data, [[50.0, -20.0], [0.0, -100.0]])
        np.testing.assert_allclose(result.z_score.data, [[1.0, -0.2], [0.0, -4.0]])

    def test_percentage_consistent_with_absolute(self, utm_grid):
        """Test percentage * mean / 100 reproduces the absolute deviation."""
        rng = np.random.default_rng(7)
        mean = rng.uniform(100.0, 2000.0, size=(2, 2))
        baseline = _baseline(utm_grid, mean, np.full((2, 2), 50.0))
        current = RasterField(data=rng.uniform(0.0, 3000.0, size=(2, 2)), grid=utm_grid)
        result = compute_anomaly(current, baseline)
        np.testing.assert_allclose(
            result.percentage.data * mean / 100.0, result.absolute.data, rtol=1e-9
        )

    def test_zero_mean_is_nodata(self, utm_grid):
        """Test zero mean gives no-data percentage and finite absolute."""
        baseline = _baseline(utm_grid, np.zeros((2, 2)), np.ones((2, 2)))
        current = RasterField.full(utm_grid, 5.0)
        result = compute_anomaly(current, baseline)
        assert np.isnan(result.percentage.data).all()
        np.testing.assert_allclose(result.absolute.data, 5.0)

    def test_zero_stddev_is_nodata(self, utm_grid):
        """Test zero stddev gives no-data z-score."""
        baseline = _baseline(utm_grid, np.full((2, 2), 100.0), np.zeros((2, 2)))
        current = RasterField.full(utm_grid, 120.0)
        result = compute_anomaly(current, baseline)
        assert np.isnan(result.z_score.data).all()
        np.testing.assert_allclose(result.percentage.data, 20.0)

    def test_nodata_propagates(self, utm_grid):
        """Test no-data in the current total stays no-data in every output."""
        baseline = _baseline(utm_grid, np.full((2, 2), 100.0), np.full((2, 2), 10.0))
        current = RasterField(data=np.array([[np.nan, 1.0], [1.0, 1.0]]), grid=utm_grid)
        result = compute_anomaly(current, baseline)
        for field in (result.absolute, result.percentage, result.z_score):
            assert np.isnan(field.data[0, 0])
            assert field.n_valid == 3

    def test_grid_mismatch(self, utm_grid):
        """Test that a current total on another grid raises error."""
        baseline = _baseline(utm_grid, np.ones((2, 2)), np.ones((2, 2)))
        other = GridSpec("EPSG:32643", (0.0, 0.0), (1000.0, 1000.0), (2, 2))
        with pytest.raises(GridMismatchError):
            compute_anomaly(RasterField.full(other, 1.0), baseline)

    def test_field_names(self, utm_grid):
        """Test output fields carry the reporting names."""
        baseline = _baseline(utm_grid, np.full((2, 2), 100.0), np.full((2, 2), 10.0))
        result = compute_anomaly(RasterField.full(utm_grid, 110.0), baseline)
        assert list(result.fields()) == [
            "rainfall_30yr_mean",
            "rainfall_current",
            "absolute_deviation",
            "percentage_deviation",
            "z_score",
        ]
        assert result.current.name == "rainfall_current"
        assert result.percentage.name == "percentage_deviation"
