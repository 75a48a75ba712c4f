"""Raster grid objects: grid geometry and immutable scalar fields.

No-data is represented as NaN throughout. Infinities are rejected at
construction so that every finite value in a field is a real observation.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional

import numpy as np

from rainsmith.utils.errors import DataValidationError

# Relative tolerance used when comparing grid origins and resolutions.
GRID_RTOL = 1e-9


def _normalize_crs(crs: str) -> str:
    return crs.strip().upper().replace(" ", "")


@dataclass(frozen=True)
class GridSpec:
    """Spatial reference and layout of a regular raster grid.

    Attributes:
        crs: CRS identifier (e.g. 'EPSG:4326').
        origin: (x, y) of the upper-left corner of the upper-left pixel.
        resolution: (pixel width, pixel height), both positive, in CRS units.
        shape: (rows, cols).
    """

    crs: str
    origin: tuple[float, float]
    resolution: tuple[float, float]
    shape: tuple[int, int]

    def __post_init__(self) -> None:
        """Validate and normalise grid parameters."""
        if not isinstance(self.crs, str) or not self.crs.strip():
            raise DataValidationError("GridSpec.crs must be a non-empty string")
        object.__setattr__(self, "crs", _normalize_crs(self.crs))

        if len(self.origin) != 2 or len(self.resolution) != 2 or len(self.shape) != 2:
            raise DataValidationError(
                "origin, resolution and shape must each have exactly 2 elements"
            )
        object.__setattr__(self, "origin", (float(self.origin[0]), float(self.origin[1])))
        dx, dy = float(self.resolution[0]), float(self.resolution[1])
        if dx <= 0 or dy <= 0:
            raise DataValidationError(
                f"Resolution must be positive, got ({dx}, {dy})",
                suggestion="Pass pixel height as a positive number; rows run north to south.",
            )
        object.__setattr__(self, "resolution", (dx, dy))
        rows, cols = int(self.shape[0]), int(self.shape[1])
        if rows < 1 or cols < 1:
            raise DataValidationError(f"Grid shape must be at least 1x1, got {self.shape}")
        object.__setattr__(self, "shape", (rows, cols))

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        """Grid extent as (xmin, ymin, xmax, ymax)."""
        x0, y0 = self.origin
        dx, dy = self.resolution
        rows, cols = self.shape
        return (x0, y0 - rows * dy, x0 + cols * dx, y0)

    def matches(self, other: "GridSpec") -> bool:
        """True if both grids share spatial reference, resolution and layout."""
        return (
            self.crs == other.crs
            and self.shape == other.shape
            and np.allclose(self.resolution, other.resolution, rtol=GRID_RTOL, atol=0.0)
            and np.allclose(
                self.origin,
                other.origin,
                rtol=GRID_RTOL,
                atol=GRID_RTOL * max(self.resolution),
            )
        )

    def intersects(self, bbox: tuple[float, float, float, float]) -> bool:
        """True if the grid extent overlaps bbox (xmin, ymin, xmax, ymax)."""
        xmin, ymin, xmax, ymax = self.bounds
        bxmin, bymin, bxmax, bymax = bbox
        return bxmin < xmax and bxmax > xmin and bymin < ymax and bymax > ymin

    def pixel_centers(self) -> tuple[np.ndarray, np.ndarray]:
        """Return 1-D arrays of pixel-center x (per column) and y (per row)."""
        x0, y0 = self.origin
        dx, dy = self.resolution
        rows, cols = self.shape
        xs = x0 + (np.arange(cols) + 0.5) * dx
        ys = y0 - (np.arange(rows) + 0.5) * dy
        return xs, ys


@dataclass(frozen=True, eq=False)
class RasterField:
    """Immutable 2-D scalar field on a regular grid.

    Attributes:
        data: Float64 array of shape grid.shape; NaN marks no-data.
        grid: Grid the data is laid out on.
        name: Band/field name.
        metadata: Read-only mapping of extra properties (e.g. {'year': 2023}).
    """

    data: np.ndarray
    grid: GridSpec
    name: str = "field"
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Copy, validate and freeze the field."""
        data = np.array(self.data, dtype=np.float64, copy=True)
        if data.ndim != 2:
            raise DataValidationError(f"RasterField data must be 2-D, got {data.ndim}-D")
        if data.shape != self.grid.shape:
            raise DataValidationError(
                f"Data shape {data.shape} does not match grid shape {self.grid.shape}"
            )
        if np.isinf(data).any():
            raise DataValidationError(
                "RasterField data contains infinite values",
                suggestion="Mask invalid pixels as NaN (no-data) before building the field.",
            )
        data.flags.writeable = False
        object.__setattr__(self, "data", data)
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @property
    def shape(self) -> tuple[int, int]:
        return self.grid.shape

    @property
    def valid(self) -> np.ndarray:
        """Boolean mask of pixels holding an observation."""
        return ~np.isnan(self.data)

    @property
    def n_valid(self) -> int:
        return int(self.valid.sum())

    def with_data(
        self,
        data: np.ndarray,
        name: Optional[str] = None,
        **metadata: Any,
    ) -> "RasterField":
        """Return a new field on the same grid with new data.

        Metadata is not inherited; pass what the new field should carry.
        """
        return RasterField(
            data=data,
            grid=self.grid,
            name=name if name is not None else self.name,
            metadata=metadata,
        )

    def rename(self, name: str) -> "RasterField":
        """Return the same data under a new name, keeping metadata."""
        return RasterField(
            data=self.data, grid=self.grid, name=name, metadata=dict(self.metadata)
        )

    # Let numpy scalars on the left defer to the reflected operators below
    __array_ufunc__ = None

    def __add__(self, other: Any) -> "RasterField":
        from rainsmith.primitives import raster_ops

        return raster_ops.add(self, other)

    def __radd__(self, other: Any) -> "RasterField":
        from rainsmith.primitives import raster_ops

        return raster_ops.add(other, self)

    def __sub__(self, other: Any) -> "RasterField":
        from rainsmith.primitives import raster_ops

        return raster_ops.subtract(self, other)

    def __rsub__(self, other: Any) -> "RasterField":
        from rainsmith.primitives import raster_ops

        return raster_ops.subtract(other, self)

    def __mul__(self, other: Any) -> "RasterField":
        from rainsmith.primitives import raster_ops

        return raster_ops.multiply(self, other)

    def __rmul__(self, other: Any) -> "RasterField":
        from rainsmith.primitives import raster_ops

        return raster_ops.multiply(other, self)

    def __truediv__(self, other: Any) -> "RasterField":
        """Pixel-wise division; no-data where the divisor is zero."""
        from rainsmith.primitives import raster_ops

        return raster_ops.divide(self, other)

    def __rtruediv__(self, other: Any) -> "RasterField":
        from rainsmith.primitives import raster_ops

        return raster_ops.divide(other, self)

    @classmethod
    def full(
        cls,
        grid: GridSpec,
        value: float,
        name: str = "field",
        **metadata: Any,
    ) -> "RasterField":
        """Create a field filled with a constant value."""
        return cls(
            data=np.full(grid.shape, value, dtype=np.float64),
            grid=grid,
            name=name,
            metadata=metadata,
        )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"RasterField(name='{self.name}', shape={self.shape}, "
            f"crs={self.grid.crs}, n_valid={self.n_valid})"
        )
