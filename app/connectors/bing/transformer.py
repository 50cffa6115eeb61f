"""RANKLENS — Bing Raw → Normalized Transformer."""

from typing import Any, Dict, List

from app.core.numbers import safe_count
from app.core.periods import parse_provider_date
from app.models.normalized_models import SearchRow


def transform_traffic_rows(raw_rows: List[Dict[str, Any]]) -> List[SearchRow]:
    """Map GetRankAndTrafficStats rows to date-keyed SearchRow.

    Bing does not report position on this endpoint and its CTR is derived
    from clicks / impressions. Rows with an unparseable Date get key "";
    entries that are not objects are skipped.
    """
    rows: List[SearchRow] = []
    for raw in raw_rows:
        if not isinstance(raw, dict):
            continue
        clicks = safe_count(raw.get("Clicks"))
        impressions = safe_count(raw.get("Impressions"))
        rows.append(
            SearchRow(
                key=parse_provider_date(raw.get("Date")),
                clicks=clicks,
                impressions=impressions,
                ctr=(clicks / impressions * 100) if impressions > 0 else 0.0,
                position=None,
            )
        )
    return rows
