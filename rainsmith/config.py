"""Analysis configuration.

Everything a deviation run needs (study area, baseline window, current
period) lives in one frozen AnalysisConfig that is passed explicitly to the
task, never read from module state. Configs load from YAML or JSON.
"""

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Optional

import pandas as pd
import yaml

from rainsmith.primitives.climatology import check_baseline_window
from rainsmith.primitives.region import coerce_bbox
from rainsmith.utils.errors import raise_parameter_error

logger = logging.getLogger(__name__)


def _coerce(name: str, value: Any, kind: type) -> Any:
    """Convert a config value to int or float, raising ParameterError."""
    if isinstance(value, bool):
        raise_parameter_error(name, value, constraint="must be a number, not a boolean")
    try:
        return kind(value)
    except (TypeError, ValueError):
        expected = "an integer" if kind is int else "a number"
        raise_parameter_error(name, value, constraint=f"must be {expected}")


@dataclass(frozen=True)
class AnalysisConfig:
    """Parameters of one deviation analysis.

    Attributes:
        study_area: [minLon, minLat, maxLon, maxLat] of the study region.
        region_name: Name used for the region in summaries.
        study_area_crs: CRS the study_area coordinates are given in.
        baseline_start: First baseline year (inclusive).
        baseline_end: Last baseline year (inclusive).
        current_start: First day of the current period (ISO date).
        current_end: Last day of the current period (ISO date).
        band: Band of the raster archive holding precipitation.
        dataset: Dataset label used in summaries.
        scale_m: Nominal pixel size in metres, used in summaries.
        max_workers: Threads for per-year aggregation (None = sequential).
    """

    study_area: tuple[float, float, float, float] = (68.0, 6.0, 97.0, 37.0)
    region_name: str = "study_area"
    study_area_crs: str = "EPSG:4326"
    baseline_start: int = 1991
    baseline_end: int = 2020
    current_start: str = "2023-01-01"
    current_end: str = "2023-12-31"
    band: str = "precipitation"
    dataset: str = "CHIRPS Pentad Precipitation"
    scale_m: float = 5566.0
    max_workers: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate configuration values."""
        object.__setattr__(self, "study_area", coerce_bbox(self.study_area))

        baseline_start = _coerce("baseline_start", self.baseline_start, int)
        baseline_end = _coerce("baseline_end", self.baseline_end, int)
        check_baseline_window(baseline_start, baseline_end)
        object.__setattr__(self, "baseline_start", baseline_start)
        object.__setattr__(self, "baseline_end", baseline_end)

        try:
            start = pd.Timestamp(self.current_start)
            end = pd.Timestamp(self.current_end)
        except (TypeError, ValueError):
            raise_parameter_error(
                "current_start/current_end",
                (self.current_start, self.current_end),
                constraint="must be ISO dates (YYYY-MM-DD)",
            )
        if pd.isna(start) or pd.isna(end):
            raise_parameter_error(
                "current_start/current_end",
                (self.current_start, self.current_end),
                constraint="must not be empty",
            )
        if start > end:
            raise_parameter_error(
                "current_end",
                self.current_end,
                constraint=f"must not be before current_start {self.current_start}",
            )
        object.__setattr__(self, "current_start", str(start.date()))
        object.__setattr__(self, "current_end", str(end.date()))

        scale_m = _coerce("scale_m", self.scale_m, float)
        if not scale_m > 0:
            raise_parameter_error("scale_m", self.scale_m, constraint="must be positive")
        object.__setattr__(self, "scale_m", scale_m)

        if self.max_workers is not None:
            max_workers = _coerce("max_workers", self.max_workers, int)
            if max_workers < 1:
                raise_parameter_error(
                    "max_workers", self.max_workers, constraint="must be >= 1 or null"
                )
            object.__setattr__(self, "max_workers", max_workers)

    @property
    def baseline_years(self) -> int:
        return self.baseline_end - self.baseline_start + 1

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AnalysisConfig":
        """Create a config from a mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise_parameter_error(
                "config",
                unknown,
                valid_values=sorted(known),
                suggestion="Remove or rename the unknown keys.",
            )
        return cls(**data)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["study_area"] = list(self.study_area)
        return data


DEFAULT_CONFIG = AnalysisConfig()


def load_config(path: str | Path) -> AnalysisConfig:
    """Load an AnalysisConfig from a YAML or JSON file.

    The file may hold the settings at top level or under an 'analysis' key.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the suffix is not .yaml, .yml or .json.
        ParameterError: If the contents are invalid.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    suffix = path.suffix.lower()
    with open(path, encoding="utf-8") as f:
        if suffix in (".yaml", ".yml"):
            data = yaml.safe_load(f)
        elif suffix == ".json":
            data = json.load(f)
        else:
            raise ValueError(
                f"Unsupported config file format: {suffix}. Use .yaml, .yml, or .json"
            )

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise_parameter_error("config", type(data).__name__, constraint="must be a mapping")
    if "analysis" in data:
        data = data["analysis"] or {}

    config = AnalysisConfig.from_dict(data)
    logger.info(f"Loaded analysis config from {path}")
    return config
