"""RANKLENS — Normalized Search Rows (Universal Schema).

Every connector normalizes into this format before aggregation.
CTR is always in percent units here; providers are converted exactly once,
in their transformer.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class SearchRow(BaseModel):
    """One provider row keyed by its dimension value.

    `key` is a YYYY-MM-DD date for date rows, a YYYY-MM month for month
    buckets, or the query text for query rows. An empty key means the
    provider date could not be parsed.
    """

    model_config = ConfigDict(allow_inf_nan=False)

    key: str = ""
    clicks: int = Field(default=0, ge=0)
    impressions: int = Field(default=0, ge=0)
    ctr: float = 0.0
    position: Optional[float] = None
