"""RANKLENS — Report Generation & History Routes."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from pydantic import AliasChoices, BaseModel, Field
from sqlmodel import Session

from app.ai.base_provider import NarrativeProvider
from app.analyzer.pipeline import generate_report
from app.api.deps import (
    get_bing_client,
    get_gsc_client,
    get_narrative_provider,
    upstream_http_error,
)
from app.connectors.bing.client import BingClient
from app.connectors.gsc.client import GSCClient
from app.connectors.http import ProviderAPIError
from app.core.domain import normalize_site_key
from app.core.report_store import get_report, list_reports
from app.database import get_session
from app.models.report_models import MONTH_PATTERN, ReportOutput
from app.models.site_models import SiteNotFoundError
from app.core.logging import get_logger

logger = get_logger("api.reports")

router = APIRouter(prefix="/reports", tags=["Reports"])


# ── Request Models ──


class GenerateReportRequest(BaseModel):
    """Request body for POST /reports/generate."""

    site_id: str = Field(
        min_length=1, validation_alias=AliasChoices("site_id", "normalizedId")
    )
    """Normalized site key, e.g. "example.com"."""
    year: int = Field(ge=2000, le=2100)
    month: int = Field(ge=1, le=12)

    model_config = {
        "json_schema_extra": {
            "examples": [{"site_id": "example.com", "year": 2025, "month": 11}]
        }
    }


# ── Endpoints ──


@router.post("/generate", response_model=ReportOutput)
async def trigger_report(
    request: GenerateReportRequest,
    session: Session = Depends(get_session),
    gsc: GSCClient = Depends(get_gsc_client),
    bing: BingClient = Depends(get_bing_client),
    provider: Optional[NarrativeProvider] = Depends(get_narrative_provider),
):
    """Fetch both providers, compute deltas, narrate, and store the report."""
    try:
        return await generate_report(
            site_id=request.site_id,
            year=request.year,
            month=request.month,
            gsc_client=gsc,
            bing_client=bing,
            narrative_provider=provider,
            session=session,
        )
    except SiteNotFoundError as e:
        raise HTTPException(
            status_code=404,
            detail={
                "error": "site_not_found",
                "message": str(e),
                "missing": e.missing,
                "details": {"gsc_url": e.gsc_url, "bing_url": e.bing_url},
            },
        )
    except ProviderAPIError as e:
        logger.error(f"Report generation failed: {e}")
        raise upstream_http_error(e)


@router.get("/history")
async def report_history(
    site_id: Optional[str] = Query(default=None),
    legacy_site_id: Optional[str] = Query(default=None, alias="siteId"),
    session: Session = Depends(get_session),
):
    """Stored reports for a site, newest period first.

    Accepts ?site_id= or the older ?siteId= parameter.
    """
    key = normalize_site_key(site_id or legacy_site_id)
    if not key:
        raise HTTPException(
            status_code=422,
            detail={"error": "validation_failed", "message": "Missing site_id parameter."},
        )
    reports = list_reports(session, key)
    return {"status": "success", "count": len(reports), "reports": reports}


@router.get("/{site_id:path}/{period}")
async def stored_report(
    site_id: str,
    period: str = Path(..., pattern=MONTH_PATTERN),
    session: Session = Depends(get_session),
):
    """One stored report by (site, YYYY-MM)."""
    report = get_report(session, normalize_site_key(site_id), period)
    if report is None:
        raise HTTPException(
            status_code=404,
            detail={"error": "report_not_found", "site_id": site_id, "period": period},
        )
    return {"status": "success", "report": report}
