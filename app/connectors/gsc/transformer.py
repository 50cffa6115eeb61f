"""RANKLENS — GSC Raw → Normalized Transformer.

Search Console reports CTR as a fraction (0.0496); it is converted to
percent here and nowhere else.
"""

from typing import Any, Dict, List

from app.core.numbers import safe_count, safe_float
from app.models.normalized_models import SearchRow


def transform_rows(raw_rows: List[Dict[str, Any]]) -> List[SearchRow]:
    """Map searchAnalytics rows to SearchRow, keyed by the first dimension value.

    Entries that are not objects are skipped.
    """
    rows: List[SearchRow] = []
    for raw in raw_rows:
        if not isinstance(raw, dict):
            continue
        keys = raw.get("keys")
        if not isinstance(keys, list) or not keys:
            keys = [""]
        ctr = safe_float(raw.get("ctr"))
        rows.append(
            SearchRow(
                key=str(keys[0]),
                clicks=safe_count(raw.get("clicks")),
                impressions=safe_count(raw.get("impressions")),
                ctr=ctr * 100 if ctr is not None else 0.0,
                position=safe_float(raw.get("position")),
            )
        )
    return rows
