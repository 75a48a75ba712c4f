"""Layer 4: Workflows - Boundaries of the library.

Raster source interface and in-memory implementation, plus tabular/text
views of finished runs.
"""

from rainsmith.workflows.reporting import (
    category_areas_frame,
    format_summary,
    regional_means_frame,
    summary_frames,
)
from rainsmith.workflows.sources import (
    PENTAD_START_DAYS,
    InMemoryRasterSource,
    RasterSource,
    pentad_timestamps,
)

__all__ = [
    "PENTAD_START_DAYS",
    "InMemoryRasterSource",
    "RasterSource",
    "category_areas_frame",
    "format_summary",
    "pentad_timestamps",
    "regional_means_frame",
    "summary_frames",
]
