"""Study region descriptor used for zonal reductions."""

from dataclasses import dataclass
from typing import Any, Optional

import numpy as np

from rainsmith.objects.rastergrid import GridSpec, RasterField
from rainsmith.utils.errors import DataValidationError


@dataclass(frozen=True, eq=False)
class Region:
    """A set of grid pixels plus the area each pixel covers.

    Build regions with Region.from_bbox or Region.from_mask, which compute
    the per-pixel area for the grid's CRS.

    Attributes:
        name: Human readable region name.
        grid: Grid the region is expressed on.
        mask: Boolean (rows, cols) array, True for member pixels.
        pixel_area_km2: Float (rows, cols) array of pixel areas in km².
        bbox: Optional (xmin, ymin, xmax, ymax) the mask was derived from.
    """

    name: str
    grid: GridSpec
    mask: np.ndarray
    pixel_area_km2: np.ndarray
    bbox: Optional[tuple[float, float, float, float]] = None

    def __post_init__(self) -> None:
        """Validate and freeze region arrays."""
        mask = np.array(self.mask, dtype=bool, copy=True)
        area = np.array(self.pixel_area_km2, dtype=np.float64, copy=True)
        if mask.shape != self.grid.shape:
            raise DataValidationError(
                f"Region mask shape {mask.shape} does not match grid {self.grid.shape}"
            )
        if area.shape != self.grid.shape:
            raise DataValidationError(
                f"Pixel area shape {area.shape} does not match grid {self.grid.shape}"
            )
        if not np.all(np.isfinite(area)) or (area < 0).any():
            raise DataValidationError("Pixel areas must be finite and non-negative")
        mask.flags.writeable = False
        area.flags.writeable = False
        object.__setattr__(self, "mask", mask)
        object.__setattr__(self, "pixel_area_km2", area)
        if self.bbox is not None:
            object.__setattr__(self, "bbox", tuple(float(v) for v in self.bbox))

    @classmethod
    def from_bbox(
        cls,
        grid: GridSpec,
        bbox: Any,
        name: str = "study_area",
        bbox_crs: Optional[str] = None,
    ) -> "Region":
        """Region of the pixels whose centers fall inside bbox.

        See rainsmith.primitives.region.region_from_bbox.
        """
        from rainsmith.primitives.region import region_from_bbox

        return region_from_bbox(grid, bbox, name=name, bbox_crs=bbox_crs)

    @classmethod
    def from_mask(cls, grid: GridSpec, mask: Any, name: str = "region") -> "Region":
        """Region of the pixels set in a boolean mask."""
        from rainsmith.primitives.region import region_from_mask

        return region_from_mask(grid, mask, name=name)

    @property
    def n_pixels(self) -> int:
        return int(self.mask.sum())

    @property
    def is_empty(self) -> bool:
        return self.n_pixels == 0

    @property
    def total_area_km2(self) -> float:
        return float(self.pixel_area_km2[self.mask].sum())

    def area_field(self) -> RasterField:
        """Per-pixel area in km², no-data outside the region."""
        data = np.where(self.mask, self.pixel_area_km2, np.nan)
        return RasterField(
            data=data, grid=self.grid, name="pixel_area_km2", metadata={"region": self.name}
        )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"Region(name='{self.name}', n_pixels={self.n_pixels}, "
            f"area_km2={self.total_area_km2:.1f})"
        )
