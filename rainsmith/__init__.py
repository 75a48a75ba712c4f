"""RainSmith: precipitation deviation analysis for raster archives.

Layers:
    objects    - immutable rasters, series, regions and results
    primitives - aggregation, baseline, anomaly, classification, zonal stats
    tasks      - DeviationTask, the end-to-end pipeline
    workflows  - raster source interface and report tables
"""

from rainsmith.config import DEFAULT_CONFIG, AnalysisConfig, load_config
from rainsmith.objects import (
    AnomalyResult,
    ClimatologyBaseline,
    GridSpec,
    RasterField,
    RasterSeries,
    Region,
    SeverityCategory,
    ZonalSummary,
)
from rainsmith.tasks import DeviationReport, DeviationTask
from rainsmith.workflows import InMemoryRasterSource, RasterSource

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_CONFIG",
    "AnalysisConfig",
    "AnomalyResult",
    "ClimatologyBaseline",
    "DeviationReport",
    "DeviationTask",
    "GridSpec",
    "InMemoryRasterSource",
    "RasterField",
    "RasterSeries",
    "RasterSource",
    "Region",
    "SeverityCategory",
    "ZonalSummary",
    "load_config",
]
