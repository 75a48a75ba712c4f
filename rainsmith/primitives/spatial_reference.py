"""Coordinate Reference System (CRS) handling for raster grids.

Provides pyproj-backed CRS inspection, coordinate transformation and the
per-pixel area calculation that zonal statistics weight by.
"""

from __future__ import annotations

import logging
from typing import Any

import numpy as np
from pyproj import CRS, Geod, Transformer

from rainsmith.objects.rastergrid import GridSpec

logger = logging.getLogger(__name__)

M2_PER_KM2 = 1_000_000.0


class SpatialReference:
    """Wraps a pyproj CRS with the queries the raster stages need."""

    def __init__(self, crs: Any):
        """Initialize spatial reference.

        Args:
            crs: Coordinate Reference System. Can be:
                - EPSG code (int or string like 'EPSG:4326')
                - CRS object from pyproj
                - Proj4 / WKT string
        """
        self._crs = CRS.from_user_input(crs)

    @classmethod
    def from_grid(cls, grid: GridSpec) -> "SpatialReference":
        return cls(grid.crs)

    @property
    def crs(self):
        """Get the CRS object."""
        return self._crs

    @property
    def is_geographic(self) -> bool:
        return bool(self._crs.is_geographic)

    def get_units(self) -> str:
        """Get the units of the CRS.

        Returns:
            Unit string (e.g., 'metre', 'degree')
        """
        axis_info = self._crs.axis_info
        if axis_info:
            return axis_info[0].unit_name
        return "unknown"

    def get_epsg(self) -> int | None:
        """Get EPSG code if available."""
        return self._crs.to_epsg()

    def equals(self, other: Any) -> bool:
        """True if other describes the same CRS."""
        return self._crs == CRS.from_user_input(other)

    def transform(self, coordinates: np.ndarray, target_crs: Any) -> np.ndarray:
        """Transform [N, 2] (x, y) coordinates to target CRS."""
        return transform_coordinates(coordinates, self._crs, target_crs)

    def pixel_area_km2(self, grid: GridSpec) -> np.ndarray:
        """Area of every pixel of grid, in km².

        Geographic grids use geodesic cell areas on the CRS ellipsoid, so
        pixel area shrinks towards the poles. Projected grids use the
        nominal cell size converted to metres.

        Returns:
            Float array of shape grid.shape.
        """
        rows, cols = grid.shape
        dx, dy = grid.resolution
        if self.is_geographic:
            geod = self._crs.get_geod() or Geod(ellps="WGS84")
            x0, y0 = grid.origin
            row_area = np.empty(rows, dtype=np.float64)
            for r in range(rows):
                top = y0 - r * dy
                bottom = top - dy
                lons = [x0, x0 + dx, x0 + dx, x0]
                lats = [bottom, bottom, top, top]
                area_m2, _ = geod.polygon_area_perimeter(lons, lats)
                row_area[r] = abs(area_m2) / M2_PER_KM2
            return np.repeat(row_area[:, np.newaxis], cols, axis=1)

        axis_info = self._crs.axis_info
        factor = axis_info[0].unit_conversion_factor if axis_info else 1.0
        cell_area = (dx * factor) * (dy * factor) / M2_PER_KM2
        return np.full(grid.shape, cell_area, dtype=np.float64)

    def __repr__(self) -> str:
        """String representation."""
        epsg = self.get_epsg()
        if epsg:
            return f"SpatialReference(crs=EPSG:{epsg})"
        return f"SpatialReference(crs={self._crs})"


def transform_coordinates(
    coordinates: np.ndarray,
    source_crs: Any,
    target_crs: Any,
) -> np.ndarray:
    """Transform coordinates between CRS.

    Args:
        coordinates: Input coordinates [N, 2] as (x, y)
        source_crs: Source CRS (EPSG code, CRS object, or string)
        target_crs: Target CRS (EPSG code, CRS object, or string)

    Returns:
        Transformed coordinates [N, 2]

    Examples:
        >>> coords = np.array([[68.0, 6.0], [97.0, 37.0]])
        >>> projected = transform_coordinates(coords, 'EPSG:4326', 'EPSG:3857')
    """
    coordinates = np.asarray(coordinates, dtype=np.float64)
    transformer = Transformer.from_crs(
        CRS.from_user_input(source_crs), CRS.from_user_input(target_crs), always_xy=True
    )
    x_new, y_new = transformer.transform(coordinates[:, 0], coordinates[:, 1])
    return np.column_stack([x_new, y_new])


def transform_bbox(
    bbox: tuple[float, float, float, float],
    source_crs: Any,
    target_crs: Any,
    densify: int = 21,
) -> tuple[float, float, float, float]:
    """Transform a bbox and return the envelope of its densified edges."""
    xmin, ymin, xmax, ymax = bbox
    xs = np.linspace(xmin, xmax, densify)
    ys = np.linspace(ymin, ymax, densify)
    edges = np.concatenate(
        [
            np.column_stack([xs, np.full(densify, ymin)]),
            np.column_stack([xs, np.full(densify, ymax)]),
            np.column_stack([np.full(densify, xmin), ys]),
            np.column_stack([np.full(densify, xmax), ys]),
        ]
    )
    out = transform_coordinates(edges, source_crs, target_crs)
    logger.debug(f"Transformed bbox {bbox} from {source_crs} to {target_crs}")
    return (
        float(out[:, 0].min()),
        float(out[:, 1].min()),
        float(out[:, 0].max()),
        float(out[:, 1].max()),
    )


def pixel_area_km2(grid: GridSpec) -> np.ndarray:
    """Convenience wrapper: per-pixel area in km² for grid."""
    return SpatialReference.from_grid(grid).pixel_area_km2(grid)
