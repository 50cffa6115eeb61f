"""RANKLENS — Report Orchestrator.

Runs the full data flow for one (site, month):
  resolve site → fetch windows concurrently → aggregate → deltas → series
  → narrative → upsert → ReportOutput

A failed fetch only blanks its own window; the report is still produced.
"""

import asyncio
import time
from datetime import datetime, timezone
from typing import Any, Awaitable, List, Optional, Sequence

from sqlmodel import Session

from app.ai.base_provider import NarrativeProvider
from app.ai.narrative import parse_narrative
from app.analyzer.delta_engine import build_deltas
from app.analyzer.metrics_engine import aggregate, aggregate_window
from app.analyzer.series_engine import monthly_series, normalize_series
from app.analyzer.site_matcher import match_sites
from app.analyzer.summary_cards import build_summary_cards
from app.connectors.bing.client import BingClient
from app.connectors.bing.transformer import transform_traffic_rows
from app.connectors.bing.variants import probe_variants
from app.connectors.gsc.client import GSCClient
from app.connectors.gsc.transformer import transform_rows
from app.core.domain import normalize_site_key
from app.core.periods import (
    Window,
    month_days,
    month_window,
    period_key,
    previous_month,
    same_month_last_year,
    trailing_window,
)
from app.core.report_store import upsert_report
from app.models.normalized_models import SearchRow
from app.models.report_models import (
    DailyPoint,
    Deltas,
    MonthPoint,
    NarrativePack,
    PeriodMetrics,
    ReportOutput,
    ReportSummary,
    SourceSection,
)
from app.models.site_models import MatchedSite
from app.core.logging import get_logger

logger = get_logger("analyzer.pipeline")

TOP_QUERY_LIMIT = 10
EMPTY_DAY = PeriodMetrics(clicks=0, impressions=0, ctr=0.0, position=None)


async def _guarded(label: str, coro: Awaitable[Any], warnings: List[str]) -> Any:
    """Await one window fetch; failures become None plus a warning."""
    try:
        return await coro
    except Exception as e:
        logger.error(f"{label} fetch failed: {e}", extra={"provider": label.split(".")[0]})
        warnings.append(f"{label}_unavailable")
        return None


async def _nothing() -> None:
    return None


def build_section(
    current: Optional[PeriodMetrics],
    previous: Optional[PeriodMetrics],
    yoy: Optional[PeriodMetrics],
    series: Optional[Sequence[MonthPoint]] = None,
    top_queries: Optional[List[SearchRow]] = None,
) -> SourceSection:
    """Attach MoM / YoY deltas and the normalized 16-month series."""
    return SourceSection(
        current=current,
        previous=previous,
        yoy=yoy,
        deltas=Deltas(
            mom=build_deltas(current, previous) if current else None,
            yoy=build_deltas(current, yoy) if current else None,
        ),
        last_16_months=normalize_series(series or []),
        top_queries=top_queries or [],
    )


def _covered(rows: List[SearchRow], window: Window) -> Optional[PeriodMetrics]:
    """Aggregate a comparison window, None when the series has no row in it."""
    if not any(window.contains(r.key) for r in rows):
        return None
    return aggregate_window(rows, window.start, window.end)


def _day_metrics(row: Optional[SearchRow]) -> PeriodMetrics:
    if row is None:
        return EMPTY_DAY
    return PeriodMetrics(
        clicks=row.clicks,
        impressions=row.impressions,
        ctr=row.ctr,
        position=row.position,
    )


def build_daily(
    year: int,
    month: int,
    gsc_rows: List[SearchRow],
    bing_rows: List[SearchRow],
) -> List[DailyPoint]:
    gsc_by_day = {r.key: r for r in gsc_rows}
    bing_by_day = {r.key: r for r in bing_rows}
    return [
        DailyPoint(
            date=day,
            gsc=_day_metrics(gsc_by_day.get(day)),
            bing=_day_metrics(bing_by_day.get(day)),
        )
        for day in month_days(year, month)
    ]


async def resolve_site(
    site_id: str,
    gsc_client: GSCClient,
    bing_client: Optional[BingClient],
    warnings: List[str],
) -> MatchedSite:
    """Find each provider's exact string for a normalized key.

    GSC listing failures propagate. Bing is optional: when it is not
    configured or unreachable the report continues without it.
    """
    bing_enabled = bing_client is not None and bing_client.is_configured()
    gsc_sites, bing_sites = await asyncio.gather(
        gsc_client.list_sites(),
        bing_client.get_user_sites() if bing_enabled else _nothing(),
        return_exceptions=True,
    )
    if isinstance(gsc_sites, BaseException):
        raise gsc_sites
    if isinstance(bing_sites, BaseException):
        if not isinstance(bing_sites, Exception):
            raise bing_sites
        logger.error(f"Bing site listing failed: {bing_sites}", extra={"site_id": site_id})
        warnings.append("bing.sites_unavailable")
        bing_sites = None
    elif not bing_enabled:
        warnings.append("bing.not_configured")

    inventory = match_sites(gsc_sites, bing_sites or [])
    return inventory.find(site_id, require_bing=bing_sites is not None)


async def generate_report(
    site_id: str,
    year: int,
    month: int,
    gsc_client: GSCClient,
    bing_client: Optional[BingClient] = None,
    narrative_provider: Optional[NarrativeProvider] = None,
    session: Optional[Session] = None,
) -> ReportOutput:
    """Execute the full RANKLENS report pipeline."""
    started = time.perf_counter()
    site_id = normalize_site_key(site_id)
    period = period_key(year, month)
    warnings: List[str] = []
    log_extra = {"site_id": site_id, "period": period}
    logger.info("Starting report pipeline", extra=log_extra)

    # ── Step 1: Resolve provider URLs ──
    site = await resolve_site(site_id, gsc_client, bing_client, warnings)

    # ── Step 2: Windows ──
    current_w = month_window(year, month)
    previous_w = previous_month(year, month)
    yoy_w = same_month_last_year(year, month)
    trailing_w = trailing_window(year, month)

    async def gsc_rows(window: Window, dimensions=("date",), row_limit=None):
        raw = await gsc_client.query(
            site.gsc_url, window.start, window.end, dimensions, row_limit
        )
        return transform_rows(raw)

    async def bing_stats():
        result = await probe_variants(bing_client.get_rank_and_traffic_stats, site.bing_url)
        return result, transform_traffic_rows(result.rows)

    # ── Step 3: Fetch all windows concurrently ──
    (
        gsc_current,
        gsc_previous,
        gsc_yoy,
        gsc_trailing,
        gsc_queries,
        bing_fetch,
    ) = await asyncio.gather(
        _guarded("gsc.current", gsc_rows(current_w), warnings),
        _guarded("gsc.previous", gsc_rows(previous_w), warnings),
        _guarded("gsc.yoy", gsc_rows(yoy_w), warnings),
        _guarded("gsc.trailing", gsc_rows(trailing_w), warnings),
        _guarded(
            "gsc.queries", gsc_rows(current_w, ("query",), TOP_QUERY_LIMIT), warnings
        ),
        _guarded("bing.stats", bing_stats(), warnings) if site.bing_url else _nothing(),
    )

    # ── Step 4: Aggregate + deltas ──
    google = build_section(
        current=aggregate(gsc_current) if gsc_current is not None else None,
        previous=aggregate(gsc_previous) if gsc_previous is not None else None,
        yoy=aggregate(gsc_yoy) if gsc_yoy is not None else None,
        series=monthly_series(gsc_trailing) if gsc_trailing is not None else [],
        top_queries=gsc_queries,
    )

    bing: Optional[SourceSection] = None
    bing_rows: List[SearchRow] = []
    bing_resolved_url = None
    if bing_fetch is not None:
        probe, bing_rows = bing_fetch
        bing_resolved_url = probe.url
        if not probe.rows:
            warnings.append("bing.no_data")
        bing = build_section(
            current=aggregate_window(bing_rows, current_w.start, current_w.end),
            previous=_covered(bing_rows, previous_w),
            yoy=_covered(bing_rows, yoy_w),
            series=monthly_series(
                r for r in bing_rows if trailing_w.contains(r.key)
            ),
        )

    summary = ReportSummary(
        gsc_clicks=google.current.clicks if google.current else 0,
        gsc_impressions=google.current.impressions if google.current else 0,
        bing_clicks=bing.current.clicks if bing and bing.current else 0,
        bing_impressions=bing.current.impressions if bing and bing.current else 0,
        google=google,
        bing=bing,
    )

    report = ReportOutput(
        site_id=site_id,
        period=period,
        gsc_url=site.gsc_url,
        bing_url=site.bing_url,
        bing_resolved_url=bing_resolved_url,
        generated_at=datetime.now(timezone.utc).isoformat(),
        summary=summary,
        daily=build_daily(year, month, gsc_current or [], bing_rows),
        summary_cards=build_summary_cards(
            google.current, bing.current if bing else None
        ),
        warnings=warnings,
    )

    # ── Step 5: Narrative ──
    if narrative_provider is None:
        report.narrative_status = "unavailable"
    else:
        pack = NarrativePack(site=site_id, month=period, google=google, bing=bing)
        try:
            raw = await narrative_provider.generate_report(pack.model_dump(mode="json"))
            report.narrative = parse_narrative(raw)
            report.narrative_status = "generated"
        except Exception as e:
            logger.error(f"Narrative generation failed: {e}", extra=log_extra)
            report.narrative_status = "failed"

    # ── Step 6: Store ──
    if session is not None:
        try:
            upsert_report(session, report)
            report.saved = True
        except Exception as e:
            session.rollback()
            logger.error(f"Report persistence failed: {e}", extra=log_extra)

    duration_ms = int((time.perf_counter() - started) * 1000)
    logger.info(
        f"Report complete. Narrative: {report.narrative_status}. Saved: {report.saved}. Warnings: {len(warnings)}",
        extra={**log_extra, "duration_ms": duration_ms},
    )
    return report
