"""RANKLENS — Delta Engine.

Compares a current period against a comparison period (previous month or
same month last year). A None percentage means "comparison unavailable" and
must never be rendered as 0%.
"""

from typing import Optional

from app.core.numbers import is_finite_number
from app.models.report_models import DeltaSet, PeriodMetrics


def safe_delta_pct(current: float, previous: float) -> Optional[float]:
    """Relative change in percent; None on a zero or non-finite baseline."""
    if not is_finite_number(current) or not is_finite_number(previous):
        return None
    if previous == 0:
        return None
    return (current - previous) / previous * 100


def position_improvement(
    current: Optional[float], previous: Optional[float]
) -> Optional[float]:
    """previous - current; positive means the site moved up the results."""
    if current is None or previous is None:
        return None
    return previous - current


def build_deltas(
    current: PeriodMetrics, previous: Optional[PeriodMetrics]
) -> Optional[DeltaSet]:
    if previous is None:
        return None

    return DeltaSet(
        clicks_delta_abs=current.clicks - previous.clicks,
        clicks_delta_pct=safe_delta_pct(current.clicks, previous.clicks),
        impressions_delta_abs=current.impressions - previous.impressions,
        impressions_delta_pct=safe_delta_pct(current.impressions, previous.impressions),
        ctr_delta_pp=current.ctr - previous.ctr,  # percentage points
        position_improvement=position_improvement(current.position, previous.position),
    )
