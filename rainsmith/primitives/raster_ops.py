"""Pixel-wise raster arithmetic with no-data propagation.

Every operation takes two operands (RasterField or scalar), requires fields
to share a grid, and returns a new RasterField. A pixel is no-data in the
result if it is no-data in either operand. Division by zero and numeric
overflow produce no-data, never infinities.

Comparison and logical operations return 1.0 (true) / 0.0 (false).
"""

from typing import Callable, Union

import numpy as np

from rainsmith.objects.rastergrid import RasterField
from rainsmith.utils.errors import GridMismatchError

Operand = Union[RasterField, float, int]


def check_same_grid(a: RasterField, b: RasterField, context: str = "operation") -> None:
    """Raise GridMismatchError unless both fields share a grid."""
    if not a.grid.matches(b.grid):
        raise GridMismatchError(
            f"Cannot combine '{a.name}' and '{b.name}' in {context}: grids differ",
            suggestion="Resample both fields onto the same grid first; "
            "rainsmith never resamples implicitly.",
            details={"left": a.grid, "right": b.grid},
        )


def _unpack(
    a: Operand, b: Operand, context: str
) -> tuple[RasterField, np.ndarray, np.ndarray]:
    if isinstance(a, RasterField) and isinstance(b, RasterField):
        check_same_grid(a, b, context)
        return a, a.data, b.data
    if isinstance(a, RasterField):
        return a, a.data, np.float64(b)
    if isinstance(b, RasterField):
        return b, np.float64(a), b.data
    raise TypeError(f"{context} needs at least one RasterField operand")


def _finite_or_nodata(values: np.ndarray) -> np.ndarray:
    out = np.array(values, dtype=np.float64)
    out[~np.isfinite(out)] = np.nan
    return out


def _arithmetic(
    func: Callable[[np.ndarray, np.ndarray], np.ndarray], name: str
) -> Callable[..., RasterField]:
    def op(a: Operand, b: Operand, name_out: str = name) -> RasterField:
        template, x, y = _unpack(a, b, name)
        with np.errstate(over="ignore", invalid="ignore"):
            values = func(x, y)
        return template.with_data(_finite_or_nodata(values), name=name_out)

    op.__name__ = name
    op.__doc__ = f"Pixel-wise {name} with no-data propagation."
    return op


add = _arithmetic(np.add, "add")
subtract = _arithmetic(np.subtract, "subtract")
multiply = _arithmetic(np.multiply, "multiply")


def divide(a: Operand, b: Operand, name_out: str = "divide") -> RasterField:
    """Pixel-wise a / b; no-data wherever b == 0."""
    template, x, y = _unpack(a, b, "divide")
    x, y = np.broadcast_arrays(
        np.asarray(x, dtype=np.float64), np.asarray(y, dtype=np.float64)
    )
    out = np.full(template.shape, np.nan, dtype=np.float64)
    with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
        np.divide(x, y, out=out, where=(y != 0))
    return template.with_data(_finite_or_nodata(out), name=name_out)


def _comparison(
    func: Callable[[np.ndarray, np.ndarray], np.ndarray], name: str
) -> Callable[..., RasterField]:
    def op(a: Operand, b: Operand, name_out: str = name) -> RasterField:
        template, x, y = _unpack(a, b, name)
        nodata = np.isnan(x) | np.isnan(y)
        with np.errstate(invalid="ignore"):
            values = func(x, y).astype(np.float64)
        values = np.where(nodata, np.nan, values)
        return template.with_data(np.broadcast_to(values, template.shape), name=name_out)

    op.__name__ = name
    op.__doc__ = f"Pixel-wise {name} returning 1.0/0.0, no-data propagating."
    return op


less_than = _comparison(np.less, "less_than")
greater_than = _comparison(np.greater, "greater_than")
greater_or_equal = _comparison(np.greater_equal, "greater_or_equal")
less_or_equal = _comparison(np.less_equal, "less_or_equal")


def logical_and(a: Operand, b: Operand, name_out: str = "and") -> RasterField:
    """Pixel-wise logical AND of two masks (non-zero is true)."""
    template, x, y = _unpack(a, b, "logical_and")
    nodata = np.isnan(x) | np.isnan(y)
    with np.errstate(invalid="ignore"):
        values = np.logical_and(x != 0, y != 0).astype(np.float64)
    values = np.where(nodata, np.nan, values)
    return template.with_data(np.broadcast_to(values, template.shape), name=name_out)
