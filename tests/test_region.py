"""Tests for region construction and pixel areas."""

import numpy as np
import pytest

from rainsmith.objects.rastergrid import GridSpec
from rainsmith.objects.region import Region
from rainsmith.primitives.region import (
    coerce_bbox,
    region_from_bbox,
    region_from_grid,
    region_from_mask,
)
from rainsmith.primitives.spatial_reference import (
    SpatialReference,
    pixel_area_km2,
    transform_coordinates,
)
from rainsmith.utils.errors import DataValidationError, ParameterError


class TestPixelArea:
    """Tests for per-pixel area."""

    def test_projected_pixel(self, utm_grid):
        """Test a 1000 m UTM pixel covers 1 km²."""
        np.testing.assert_allclose(pixel_area_km2(utm_grid), 1.0)

    def test_equator_degree_cell(self):
        """Test a 1x1 degree cell on the equator is about 12,300 km²."""
        grid = GridSpec("EPSG:4326", (0.0, 1.0), (1.0, 1.0), (1, 1))
        area = pixel_area_km2(grid)
        assert area[0, 0] == pytest.approx(12309.0, rel=0.01)

    def test_area_shrinks_poleward(self, geo_grid):
        """Test northern rows of a geographic grid have smaller pixels."""
        area = pixel_area_km2(geo_grid)
        assert area[0, 0] < area[1, 0] < area[2, 0]
        np.testing.assert_allclose(area[:, 0], area[:, 3])

    def test_spatial_reference(self):
        """Test CRS inspection."""
        geo = SpatialReference("EPSG:4326")
        assert geo.is_geographic
        assert geo.get_epsg() == 4326
        assert geo.equals("epsg:4326")
        assert not SpatialReference("EPSG:32643").is_geographic

    def test_transform_coordinates(self):
        """Test lon/lat to UTM on the central meridian."""
        out = transform_coordinates(np.array([[75.0, 0.0]]), "EPSG:4326", "EPSG:32643")
        assert out.shape == (1, 2)
        assert out[0, 0] == pytest.approx(500000.0, abs=1e-3)
        assert out[0, 1] == pytest.approx(0.0, abs=1e-3)


class TestCoerceBbox:
    """Tests for coerce_bbox."""

    def test_valid(self):
        """Test a valid bbox becomes a float tuple."""
        assert coerce_bbox([68, 6, 97, 37]) == (68.0, 6.0, 97.0, 37.0)

    @pytest.mark.parametrize(
        "bbox",
        [[68, 6, 97], [97, 6, 68, 37], [68, 37, 97, 6], ["a", 6, 97, 37], "68,6,97,37"],
    )
    def test_invalid(self, bbox):
        """Test malformed or inverted bboxes raise error."""
        with pytest.raises(ParameterError, match="bbox"):
            coerce_bbox(bbox)


class TestRegionBuilders:
    """Tests for region_from_bbox, region_from_mask and region_from_grid."""

    def test_pixel_center_inclusion(self, geo_grid):
        """Test pixels are selected by center, edges inclusive."""
        region = region_from_bbox(geo_grid, (68.5, 35.0, 69.5, 36.5))
        expected = np.zeros((3, 4), dtype=bool)
        expected[0:2, 0:2] = True
        np.testing.assert_array_equal(region.mask, expected)
        assert region.n_pixels == 4
        assert region.bbox == (68.5, 35.0, 69.5, 36.5)

    def test_bbox_in_other_crs(self, utm_grid):
        """Test a lon/lat bbox is transformed onto a UTM grid."""
        region = region_from_bbox(
            utm_grid, (74.9, 8.9, 75.5, 9.5), name="box", bbox_crs="EPSG:4326"
        )
        assert region.n_pixels == 4
        assert region.total_area_km2 == pytest.approx(4.0)

    def test_empty_region(self, geo_grid):
        """Test a bbox outside the grid gives an empty region."""
        region = region_from_bbox(geo_grid, (0.0, 0.0, 1.0, 1.0))
        assert region.is_empty
        assert region.total_area_km2 == 0.0

    def test_from_mask(self, utm_grid):
        """Test region from an integer mask."""
        region = region_from_mask(utm_grid, [[1, 0], [0, 1]], name="diag")
        assert region.n_pixels == 2
        assert region.name == "diag"

    def test_from_mask_shape_mismatch(self, utm_grid):
        """Test that a mask of the wrong shape raises error."""
        with pytest.raises(DataValidationError, match="Mask shape"):
            region_from_mask(utm_grid, np.ones((3, 3), dtype=bool))

    def test_from_grid(self, utm_grid):
        """Test the whole-grid region."""
        region = region_from_grid(utm_grid)
        assert region.n_pixels == 4
        assert region.bbox == utm_grid.bounds

    def test_area_field(self, utm_grid):
        """Test area field is no-data outside the region."""
        region = region_from_mask(utm_grid, [[True, False], [False, False]])
        area = region.area_field()
        assert area.data[0, 0] == pytest.approx(1.0)
        assert area.n_valid == 1

    def test_negative_area_rejected(self, utm_grid):
        """Test that negative pixel areas raise error."""
        with pytest.raises(DataValidationError, match="non-negative"):
            Region(
                name="bad",
                grid=utm_grid,
                mask=np.ones((2, 2), dtype=bool),
                pixel_area_km2=np.full((2, 2), -1.0),
            )


class TestRegionConstructors:
    """Tests for Region.from_bbox and Region.from_mask."""

    def test_from_bbox(self, geo_grid):
        """Test the classmethod selects pixels by center and computes areas."""
        region = Region.from_bbox(geo_grid, (68.5, 35.0, 69.5, 36.5), name="box")
        assert isinstance(region, Region)
        assert region.name == "box"
        assert region.n_pixels == 4
        assert region.mask[0:2, 0:2].all()
        np.testing.assert_allclose(
            region.pixel_area_km2, pixel_area_km2(geo_grid), rtol=1e-12
        )

    def test_from_bbox_other_crs(self, utm_grid):
        """Test a lon/lat bbox on a UTM grid through the classmethod."""
        region = Region.from_bbox(utm_grid, (74.9, 8.9, 75.5, 9.5), bbox_crs="EPSG:4326")
        assert region.total_area_km2 == pytest.approx(4.0)

    def test_from_mask(self, utm_grid):
        """Test the classmethod builds a region with 1 km² pixels."""
        region = Region.from_mask(utm_grid, [[True, False], [True, False]], name="west")
        assert region.name == "west"
        assert region.n_pixels == 2
        assert region.total_area_km2 == pytest.approx(2.0)

    def test_from_mask_shape_mismatch(self, utm_grid):
        """Test that a mask of the wrong shape raises error."""
        with pytest.raises(DataValidationError, match="Mask shape"):
            Region.from_mask(utm_grid, np.ones((1, 2), dtype=bool))
