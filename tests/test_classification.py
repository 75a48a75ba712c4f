"""Tests for severity classification."""

import numpy as np
import pytest

from rainsmith.objects.anomaly import SeverityCategory
from rainsmith.objects.rastergrid import GridSpec, RasterField
from rainsmith.primitives.classification import classify_deviation, classify_value


@pytest.fixture
def strip_grid():
    return GridSpec("EPSG:32643", (500000.0, 1001000.0), (1000.0, 1000.0), (1, 13))


class TestClassifyDeviation:
    """Tests for classify_deviation."""

    def test_boundaries(self, strip_grid):
        """Test boundary values fall on the documented side."""
        p = np.array(
            [[-50.0, -30.0, -25.0, -20.0, -15.0, -10.0, 0.0, 10.0, 15.0, 20.0, 25.0, 30.0, 31.0]]
        )
        classified = classify_deviation(RasterField(data=p, grid=strip_grid))
        np.testing.assert_array_equal(
            classified.data, [[1, 2, 2, 3, 3, 4, 4, 4, 5, 5, 6, 6, 7]]
        )

    def test_nodata_stays_nodata(self, utm_grid):
        """Test no-data percentage is never classified."""
        p = np.array([[np.nan, 0.0], [-40.0, 40.0]])
        classified = classify_deviation(RasterField(data=p, grid=utm_grid, name="pct"))
        assert np.isnan(classified.data[0, 0])
        assert classified.data[0, 1] == 4.0
        assert classified.data[1, 0] == 1.0
        assert classified.data[1, 1] == 7.0
        assert classified.name == "rainfall_conditions"
        assert classified.metadata["source"] == "pct"

    def test_every_valid_pixel_gets_one_code(self, utm_grid):
        """Test valid inputs always map to a code in 1..7."""
        rng = np.random.default_rng(3)
        p = rng.uniform(-100.0, 100.0, size=(2, 2))
        classified = classify_deviation(RasterField(data=p, grid=utm_grid))
        assert np.isin(classified.data, np.arange(1, 8)).all()


class TestClassifyValue:
    """Tests for classify_value."""

    @pytest.mark.parametrize(
        "p, expected",
        [
            (-30.0001, SeverityCategory.SEVERE_DROUGHT),
            (-30.0, SeverityCategory.MODERATE_DROUGHT),
            (-20.0, SeverityCategory.MILD_DROUGHT),
            (-10.0, SeverityCategory.NORMAL),
            (10.0, SeverityCategory.NORMAL),
            (10.0001, SeverityCategory.MILD_WET),
            (20.0, SeverityCategory.MILD_WET),
            (30.0, SeverityCategory.MODERATE_WET),
            (30.0001, SeverityCategory.SEVERE_WET),
        ],
    )
    def test_boundaries(self, p, expected):
        """Test single-value classification at the band edges."""
        assert classify_value(p) == expected

    def test_nan(self):
        """Test NaN has no category."""
        assert classify_value(float("nan")) is None

    def test_labels(self):
        """Test human-readable category labels."""
        assert SeverityCategory.SEVERE_DROUGHT.label == "Severe drought"
        assert SeverityCategory.NORMAL.label == "Normal"
        assert SeverityCategory.SEVERE_WET.label == "Severe wet"
