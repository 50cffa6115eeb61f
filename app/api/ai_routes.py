"""RANKLENS — AI Narrative Routes.

POST /ai/seo-report narrates caller-supplied metrics. Deltas and the
16-month series are computed server-side so the model never does the math.
"""

from typing import List, Literal, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from app.ai.base_provider import ProviderNotConfiguredError
from app.ai.narrative import parse_narrative
from app.ai.registry import UnknownProviderError, select_provider
from app.analyzer.pipeline import build_section
from app.analyzer.summary_cards import build_summary_cards
from app.models.report_models import (
    MONTH_PATTERN,
    MonthPoint,
    NarrativePack,
    NarrativeReport,
    PeriodMetrics,
    SummaryCards,
)
from app.core.logging import get_logger

logger = get_logger("api.ai")

router = APIRouter(prefix="/ai", tags=["AI"])


# ── Request / Response Models ──


class SourcePayload(BaseModel):
    """Metrics for one provider as supplied by the caller."""

    model_config = ConfigDict(populate_by_name=True)

    current: PeriodMetrics
    previous: Optional[PeriodMetrics] = None
    yoy: Optional[PeriodMetrics] = None
    last_16_months: Optional[List[MonthPoint]] = Field(default=None, alias="last16Months")


class SeoReportRequest(BaseModel):
    """Request body for POST /ai/seo-report."""

    site: str = Field(min_length=1)
    month: str = Field(pattern=MONTH_PATTERN)
    google: SourcePayload
    bing: Optional[SourcePayload] = None
    provider: str = "auto"


class SeoReportResponse(BaseModel):
    """Response for POST /ai/seo-report."""

    ok: bool = True
    mode: Literal["json", "raw"]
    provider_used: str
    report: Optional[NarrativeReport] = None
    text: Optional[str] = None
    pack: NarrativePack
    summary_cards: SummaryCards


def build_pack(request: SeoReportRequest) -> NarrativePack:
    google = build_section(
        request.google.current,
        request.google.previous,
        request.google.yoy,
        request.google.last_16_months,
    )
    bing = None
    if request.bing is not None:
        bing = build_section(
            request.bing.current,
            request.bing.previous,
            request.bing.yoy,
            request.bing.last_16_months,
        )
    return NarrativePack(site=request.site, month=request.month, google=google, bing=bing)


# ── Endpoints ──


@router.post("/seo-report", response_model=SeoReportResponse)
async def seo_report(request: SeoReportRequest):
    """Generate the narrative report for supplied monthly metrics."""
    try:
        provider_name, provider = select_provider(request.provider)
    except UnknownProviderError as e:
        raise HTTPException(
            status_code=400, detail={"error": "unknown_provider", "message": str(e)}
        )
    except ProviderNotConfiguredError as e:
        raise HTTPException(
            status_code=503,
            detail={"error": "provider_not_configured", "message": str(e)},
        )

    pack = build_pack(request)
    summary_cards = build_summary_cards(
        pack.google.current, pack.bing.current if pack.bing else None
    )

    try:
        raw = await provider.generate_report(pack.model_dump(mode="json"))
    except Exception as e:
        logger.error(f"SEO report generation failed: {e}")
        raise HTTPException(
            status_code=502,
            detail={"error": "narrative_failed", "message": str(e)},
        )

    narrative = parse_narrative(raw)
    return SeoReportResponse(
        mode=narrative.mode,
        provider_used=provider_name,
        report=narrative.report,
        text=narrative.raw_text,
        pack=pack,
        summary_cards=summary_cards,
    )
