"""RANKLENS — Metric Aggregator.

Reduces normalized rows into one PeriodMetrics.

Position policy: arithmetic mean of the rows that carry a position, applied
identically to both providers.
"""

from typing import Iterable

from app.models.normalized_models import SearchRow
from app.models.report_models import PeriodMetrics


def derive_ctr(clicks: int, impressions: int) -> float:
    """CTR in percent; 0 when there were no impressions."""
    return (clicks / impressions * 100) if impressions > 0 else 0.0


def aggregate(rows: Iterable[SearchRow]) -> PeriodMetrics:
    """Sum volumes, derive CTR, average position."""
    clicks = 0
    impressions = 0
    positions: list[float] = []

    for row in rows:
        clicks += row.clicks
        impressions += row.impressions
        if row.position is not None:
            positions.append(row.position)

    return PeriodMetrics(
        clicks=clicks,
        impressions=impressions,
        ctr=derive_ctr(clicks, impressions),
        position=sum(positions) / len(positions) if positions else None,
    )


def aggregate_window(rows: Iterable[SearchRow], start: str, end: str) -> PeriodMetrics:
    """Aggregate the date-keyed rows that fall inside [start, end].

    Rows with an empty key (unparseable provider date) never match.
    """
    return aggregate(r for r in rows if r.key and start <= r.key <= end)
