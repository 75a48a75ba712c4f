"""Region construction on a raster grid.

A pixel belongs to a bbox region when its center falls inside the bbox
(edges inclusive), which matches how per-region reducers select pixels.
"""

import logging
from typing import Any, Optional

import numpy as np

from rainsmith.objects.rastergrid import GridSpec
from rainsmith.objects.region import Region
from rainsmith.primitives.spatial_reference import (
    SpatialReference,
    pixel_area_km2,
    transform_bbox,
)
from rainsmith.utils.errors import DataValidationError, raise_parameter_error

logger = logging.getLogger(__name__)


def coerce_bbox(bbox: Any) -> tuple[float, float, float, float]:
    """Validate [xmin, ymin, xmax, ymax] and return it as a float tuple."""
    if not isinstance(bbox, (list, tuple)) or len(bbox) != 4:
        raise_parameter_error(
            "bbox",
            bbox,
            constraint="must be a sequence [xmin, ymin, xmax, ymax]",
        )
    try:
        xmin, ymin, xmax, ymax = map(float, bbox)
    except (TypeError, ValueError):
        raise_parameter_error("bbox", bbox, constraint="all four values must be numeric")
    if not (xmin < xmax and ymin < ymax):
        raise_parameter_error(
            "bbox",
            bbox,
            constraint="xmin < xmax and ymin < ymax",
            suggestion="Order the values as [minLon, minLat, maxLon, maxLat].",
        )
    return (xmin, ymin, xmax, ymax)


def region_from_bbox(
    grid: GridSpec,
    bbox: Any,
    name: str = "study_area",
    bbox_crs: Optional[str] = None,
) -> Region:
    """Build a region from a bounding box.

    Args:
        grid: Grid the region is expressed on.
        bbox: [xmin, ymin, xmax, ymax].
        name: Region name.
        bbox_crs: CRS of bbox; defaults to the grid CRS.

    Returns:
        Region whose mask holds every pixel with its center inside bbox.
    """
    box = coerce_bbox(bbox)
    if bbox_crs is not None and not SpatialReference(grid.crs).equals(bbox_crs):
        box = transform_bbox(box, bbox_crs, grid.crs)

    xs, ys = grid.pixel_centers()
    xmin, ymin, xmax, ymax = box
    col_in = (xs >= xmin) & (xs <= xmax)
    row_in = (ys >= ymin) & (ys <= ymax)
    mask = np.outer(row_in, col_in)

    if not mask.any():
        logger.warning(f"Region '{name}' bbox {box} covers no pixel centers of the grid")

    return Region(
        name=name,
        grid=grid,
        mask=mask,
        pixel_area_km2=pixel_area_km2(grid),
        bbox=box,
    )


def region_from_mask(grid: GridSpec, mask: np.ndarray, name: str = "region") -> Region:
    """Build a region from a boolean pixel mask."""
    mask = np.asarray(mask)
    if mask.shape != grid.shape:
        raise DataValidationError(
            f"Mask shape {mask.shape} does not match grid {grid.shape}"
        )
    return Region(
        name=name,
        grid=grid,
        mask=mask.astype(bool),
        pixel_area_km2=pixel_area_km2(grid),
    )


def region_from_grid(grid: GridSpec, name: str = "full_grid") -> Region:
    """Region covering every pixel of grid."""
    return Region(
        name=name,
        grid=grid,
        mask=np.ones(grid.shape, dtype=bool),
        pixel_area_km2=pixel_area_km2(grid),
        bbox=grid.bounds,
    )
