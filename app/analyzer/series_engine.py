"""RANKLENS — Trailing Month Series."""

import re
from collections import defaultdict
from typing import Iterable, List

from app.analyzer.metrics_engine import aggregate
from app.core.periods import TRAILING_MONTHS
from app.models.normalized_models import SearchRow
from app.models.report_models import MonthPoint

DATE_KEY = re.compile(r"^(\d{4}-(0[1-9]|1[0-2]))-\d{2}$")


def normalize_series(
    points: Iterable[MonthPoint], limit: int = TRAILING_MONTHS
) -> List[MonthPoint]:
    """One point per month (last occurrence wins), ascending, most recent `limit`."""
    by_month: dict[str, MonthPoint] = {}
    for point in points:
        by_month[point.month] = point
    ordered = [by_month[m] for m in sorted(by_month)]
    return ordered[-limit:] if limit > 0 else []


def monthly_series(
    rows: Iterable[SearchRow], limit: int = TRAILING_MONTHS
) -> List[MonthPoint]:
    """Bucket date-keyed rows by YYYY-MM and aggregate each bucket."""
    buckets: dict[str, list[SearchRow]] = defaultdict(list)
    for row in rows:
        match = DATE_KEY.match(row.key)
        if match:
            buckets[match.group(1)].append(row)

    points = [
        MonthPoint(month=month, **aggregate(bucket).model_dump())
        for month, bucket in buckets.items()
    ]
    return normalize_series(points, limit)
