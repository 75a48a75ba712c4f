"""Tabular and text views of a finished deviation run.

These turn a DeviationReport into pandas DataFrames and a plain-text banner
for whatever presentation layer sits on top. Nothing here writes files.
"""

from typing import TYPE_CHECKING

import numpy as np
import pandas as pd

from rainsmith.objects.anomaly import SeverityCategory, ZonalSummary

if TYPE_CHECKING:
    from rainsmith.tasks.deviationtask import DeviationReport

BANNER_WIDTH = 60


def regional_means_frame(summary: ZonalSummary) -> pd.DataFrame:
    """One row per field with its area-weighted regional mean."""
    return pd.DataFrame(
        {"field": list(summary.means), "mean": list(summary.means.values())}
    ).set_index("field")


def category_areas_frame(summary: ZonalSummary) -> pd.DataFrame:
    """One row per severity category: label, area and share of classified area."""
    total = summary.valid_area_km2
    rows = []
    for category in SeverityCategory:
        area = summary.category_areas.get(category, 0.0)
        rows.append(
            {
                "condition": int(category),
                "label": category.label,
                "area_km2": area,
                "share_pct": 100.0 * area / total if total > 0 else np.nan,
            }
        )
    return pd.DataFrame(rows).set_index("condition")


def summary_frames(report: "DeviationReport") -> dict[str, pd.DataFrame]:
    """All tables of a run keyed by name."""
    return {
        "regional_means": regional_means_frame(report.summary),
        "category_areas": category_areas_frame(report.summary),
        "annual_means": report.annual_means.to_frame(),
    }


def _period_label(start: str, end: str) -> str:
    start_ts, end_ts = pd.Timestamp(start), pd.Timestamp(end)
    full_year = (
        start_ts.year == end_ts.year
        and (start_ts.month, start_ts.day) == (1, 1)
        and (end_ts.month, end_ts.day) == (12, 31)
    )
    return str(start_ts.year) if full_year else f"{start}..{end}"


def format_summary(report: "DeviationReport") -> str:
    """Plain-text summary of a run."""
    cfg = report.config
    baseline = report.baseline
    rule = "=" * BANNER_WIDTH
    baseline_span = f"{baseline.year_start}-{baseline.year_end}"
    lines = [
        rule,
        "RAINFALL DEVIATION ANALYSIS SUMMARY",
        rule,
        f"Study Period: {baseline_span} (Baseline) vs "
        f"{_period_label(cfg.current_start, cfg.current_end)} (Current)",
        f"Dataset: {cfg.dataset}",
        f"Resolution: ~{cfg.scale_m / 1000:.1f} km",
        f"Baseline Years: {baseline.sample_count} years ({baseline_span})",
        f"Region: {report.region.name} ({report.region.total_area_km2:,.0f} km²)",
        rule,
        "Regional Statistics:",
    ]
    for name, value in report.summary.means.items():
        shown = "no data" if np.isnan(value) else f"{value:.2f}"
        lines.append(f"  {name}: {shown}")
    lines.append("Area by Rainfall Condition (km²):")
    for category, area in report.summary.category_areas.items():
        lines.append(f"  {int(category)} {category.label}: {area:,.1f}")
    lines.append(rule)
    return "\n".join(lines)
