"""Severity classification of percentage deviation.

Rules are evaluated in order and the first match wins. The drought side is
closed on the left (p >= bound) and the wet side closed on the right
(p <= bound), so -30 is moderate drought, 10 is normal and 30 is moderate
wet. Keep this asymmetry: reports built on these classes depend on it.
"""

import math
from typing import Callable, Optional

import numpy as np

from rainsmith.objects.anomaly import SeverityCategory
from rainsmith.objects.rastergrid import RasterField

Rule = tuple[SeverityCategory, Callable[[np.ndarray], np.ndarray]]

SEVERITY_RULES: tuple[Rule, ...] = (
    (SeverityCategory.SEVERE_DROUGHT, lambda p: p < -30),
    (SeverityCategory.MODERATE_DROUGHT, lambda p: (p >= -30) & (p < -20)),
    (SeverityCategory.MILD_DROUGHT, lambda p: (p >= -20) & (p < -10)),
    (SeverityCategory.NORMAL, lambda p: (p >= -10) & (p <= 10)),
    (SeverityCategory.MILD_WET, lambda p: (p > 10) & (p <= 20)),
    (SeverityCategory.MODERATE_WET, lambda p: (p > 20) & (p <= 30)),
    (SeverityCategory.SEVERE_WET, lambda p: p > 30),
)


def classify_deviation(
    percentage: RasterField, name: str = "rainfall_conditions"
) -> RasterField:
    """Map each pixel's percentage deviation to a SeverityCategory code.

    Returns:
        Field of category codes 1..7 (as floats); no-data input stays no-data.
    """
    p = percentage.data
    with np.errstate(invalid="ignore"):
        conditions = [rule(p) for _, rule in SEVERITY_RULES]
    codes = np.select(
        conditions, [float(category) for category, _ in SEVERITY_RULES], default=np.nan
    )
    codes = np.where(np.isnan(p), np.nan, codes)
    return percentage.with_data(codes, name=name, source=percentage.name)


def classify_value(p: float) -> Optional[SeverityCategory]:
    """Classify a single percentage deviation; None for NaN."""
    if p is None or math.isnan(p):
        return None
    value = np.asarray(float(p))
    for category, rule in SEVERITY_RULES:
        if bool(rule(value)):
            return category
    return None
