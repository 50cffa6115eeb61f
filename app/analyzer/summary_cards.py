"""RANKLENS — Compact Summary Cards for the dashboard header."""

import math
from typing import Optional

from app.models.report_models import PeriodMetrics, SummaryCard, SummaryCards


def compact_number(n: float) -> str:
    """48400 → "48.4K", 1200000 → "1.2M"."""
    if not math.isfinite(n):
        return str(n)
    if n >= 1_000_000:
        return f"{n / 1_000_000:.1f}M"
    if n >= 1_000:
        return f"{n / 1_000:.1f}K"
    return f"{n}"


def round2(n: Optional[float]) -> Optional[float]:
    if n is None or not math.isfinite(n):
        return None
    return round(n, 2)


def build_card(metrics: Optional[PeriodMetrics]) -> Optional[SummaryCard]:
    if metrics is None:
        return None
    return SummaryCard(
        clicks=compact_number(metrics.clicks),
        impressions=compact_number(metrics.impressions),
        ctr=f"{round2(metrics.ctr)}%",
        position=round2(metrics.position),
    )


def build_summary_cards(
    google: Optional[PeriodMetrics], bing: Optional[PeriodMetrics]
) -> SummaryCards:
    return SummaryCards(google=build_card(google), bing=build_card(bing))
