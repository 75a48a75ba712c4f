"""Deviation of a period total from its climatological baseline."""

import logging

from rainsmith.objects.anomaly import AnomalyResult, ClimatologyBaseline
from rainsmith.objects.rastergrid import RasterField
from rainsmith.primitives.raster_ops import check_same_grid, divide, multiply, subtract

logger = logging.getLogger(__name__)


def compute_anomaly(current: RasterField, baseline: ClimatologyBaseline) -> AnomalyResult:
    """Derive absolute, percentage and z-score deviations.

    absolute = current - mean
    percentage = absolute / mean * 100 (no-data where mean == 0)
    z_score = absolute / stddev (no-data where stddev == 0)

    Args:
        current: Current-period total on the baseline grid.
        baseline: Climatological baseline.

    Returns:
        AnomalyResult.

    Raises:
        GridMismatchError: If current and the baseline are on different grids.
    """
    check_same_grid(current, baseline.mean, "anomaly computation")
    current = current.rename("rainfall_current")

    absolute = subtract(current, baseline.mean, name_out="absolute_deviation")
    percentage = multiply(
        divide(absolute, baseline.mean), 100.0, name_out="percentage_deviation"
    )
    z_score = divide(absolute, baseline.stddev, name_out="z_score")

    logger.info(
        f"Computed anomaly against {baseline.year_start}-{baseline.year_end}: "
        f"{absolute.n_valid} absolute, {percentage.n_valid} percentage, "
        f"{z_score.n_valid} z-score pixels"
    )
    return AnomalyResult(
        absolute=absolute,
        percentage=percentage,
        z_score=z_score,
        current=current,
        baseline=baseline,
    )
