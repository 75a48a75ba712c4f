"""Rainfall deviation task.

Layer 3: Tasks - User intent translation.

Runs the full pipeline for one AnalysisConfig: fetch the archive through a
RasterSource, build the baseline, total the current period, derive and
classify the anomaly, and summarize it over the study region.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd

from rainsmith.config import DEFAULT_CONFIG, AnalysisConfig
from rainsmith.objects.anomaly import AnomalyResult, ClimatologyBaseline, ZonalSummary
from rainsmith.objects.rastergrid import GridSpec, RasterField
from rainsmith.objects.region import Region
from rainsmith.objects.timeseries import DateLike, RasterSeries
from rainsmith.primitives.anomaly import compute_anomaly
from rainsmith.primitives.classification import classify_deviation
from rainsmith.primitives.climatology import build_baseline, check_baseline_window
from rainsmith.primitives.region import region_from_bbox
from rainsmith.primitives.temporal import aggregate_period
from rainsmith.primitives.zonal import (
    annual_regional_means,
    deviation_histogram,
    summarize,
)
from rainsmith.utils.errors import RainSmithError, RasterSourceError
from rainsmith.workflows.sources import RasterSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class DeviationReport:
    """Everything a deviation run produces.

    Attributes:
        config: Configuration the run used.
        region: Region the summaries cover.
        anomaly: Absolute, percentage and z-score fields with their inputs.
        classified: Severity category field.
        summary: Regional means and per-category areas.
        annual_means: Regional mean annual total per baseline year.
        histogram: (counts, bin_edges) of percentage deviation in the region.
    """

    config: AnalysisConfig
    region: Region
    anomaly: AnomalyResult
    classified: RasterField
    summary: ZonalSummary
    annual_means: pd.Series
    histogram: tuple[np.ndarray, np.ndarray]

    @property
    def baseline(self) -> ClimatologyBaseline:
        return self.anomaly.baseline

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"DeviationReport(region='{self.region.name}', "
            f"baseline={self.baseline.year_start}-{self.baseline.year_end}, "
            f"current={self.config.current_start}..{self.config.current_end})"
        )


class DeviationTask:
    """Compare a current period's rainfall with its climatological baseline.

    Example:
        >>> config = AnalysisConfig(baseline_start=1991, baseline_end=2020)
        >>> task = DeviationTask(source, config)
        >>> report = task.run()
        >>> report.summary.means["percentage_deviation"]
    """

    def __init__(
        self,
        source: RasterSource,
        config: AnalysisConfig = DEFAULT_CONFIG,
        region: Optional[Region] = None,
    ):
        """Initialize the task.

        Args:
            source: Raster source serving the precipitation archive.
            config: Analysis configuration.
            region: Region to summarize over. Built from config.study_area on
                the archive grid when omitted.
        """
        self.source = source
        self.config = config
        self._region = region

    def _fetch(self, start: DateLike, end: DateLike) -> RasterSeries:
        try:
            return self.source.filter(
                (start, end), region=self._region, band=self.config.band
            )
        except RainSmithError:
            raise
        except Exception as exc:
            raise RasterSourceError(
                f"Raster source failed serving '{self.config.band}' "
                f"for {start}..{end}: {exc}",
                suggestion="Retry at the source; rainsmith does not retry on its own.",
                details={"start": str(start), "end": str(end)},
            ) from exc

    def region_for(self, grid: GridSpec) -> Region:
        """Region to summarize over: the one given, else built on grid from config.

        A config-built region is rebuilt on each call and never stored on
        the task.
        """
        if self._region is not None:
            return self._region
        return region_from_bbox(
            grid,
            self.config.study_area,
            name=self.config.region_name,
            bbox_crs=self.config.study_area_crs,
        )

    def baseline(self) -> ClimatologyBaseline:
        """Fetch the baseline window and build its climatology."""
        cfg = self.config
        check_baseline_window(cfg.baseline_start, cfg.baseline_end)
        series = self._fetch(f"{cfg.baseline_start}-01-01", f"{cfg.baseline_end}-12-31")
        logger.info(
            f"Baseline period images ({cfg.baseline_start}-{cfg.baseline_end}): "
            f"{len(series)}"
        )
        return build_baseline(
            series, cfg.baseline_start, cfg.baseline_end, max_workers=cfg.max_workers
        )

    def current_total(self) -> RasterField:
        """Fetch and total the current period."""
        cfg = self.config
        series = self._fetch(cfg.current_start, cfg.current_end)
        total = aggregate_period(series, cfg.current_start, cfg.current_end)
        logger.info(
            f"Current period {cfg.current_start}..{cfg.current_end}: "
            f"{total.metadata['n_samples']} images"
        )
        return total

    def run(self) -> DeviationReport:
        """Run the whole pipeline.

        Raises:
            InsufficientBaselineWindowError: Baseline window shorter than 2 years.
            InsufficientDataError: A baseline year or the current period is empty.
            GridMismatchError: Current period and baseline grids differ.
            RasterSourceError: The source failed.
        """
        baseline = self.baseline()
        current = self.current_total()
        anomaly = compute_anomaly(current, baseline)
        classified = classify_deviation(anomaly.percentage)

        region = self.region_for(baseline.grid)
        summary = summarize(anomaly.fields(), classified, region)
        report = DeviationReport(
            config=self.config,
            region=region,
            anomaly=anomaly,
            classified=classified,
            summary=summary,
            annual_means=annual_regional_means(baseline, region),
            histogram=deviation_histogram(anomaly.percentage, region),
        )
        logger.info(f"Deviation run complete: {report}")
        return report

