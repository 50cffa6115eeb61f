"""RANKLENS — Report Models."""

from datetime import datetime, timezone
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict
from pydantic import Field as PydanticField
from sqlmodel import SQLModel, Field, UniqueConstraint

from app.models.normalized_models import SearchRow


# ─────────────────────────────────────────────
# DATABASE MODEL — One report per (site, period), upserted on regeneration
# ─────────────────────────────────────────────


class SeoReport(SQLModel, table=True):
    """Persisted monthly report. JSON blobs are schema-on-read."""

    __tablename__ = "seo_reports"
    __table_args__ = (
        UniqueConstraint("site_id", "period", name="uq_seo_report_site_period"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    site_id: str = Field(index=True, description="Normalized site key")
    period: str = Field(index=True, description="YYYY-MM")
    summary_json: str = Field(description="ReportSummary as JSON")
    narrative_json: str = Field(default="null", description="NarrativeResult as JSON")
    daily_json: str = Field(default="[]", description="Daily series as JSON")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


# ─────────────────────────────────────────────
# PYDANTIC SCHEMAS — Metrics
# ─────────────────────────────────────────────

MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


class PeriodMetrics(BaseModel):
    """Aggregated metrics for one calendar window.

    ctr is in percent (4.96 means 4.96%). position is None when the
    provider has no data, never 0.
    """

    model_config = ConfigDict(allow_inf_nan=False)

    clicks: int = PydanticField(ge=0)
    impressions: int = PydanticField(ge=0)
    ctr: float
    position: Optional[float] = None


class MonthPoint(PeriodMetrics):
    """PeriodMetrics for one month of the trailing series."""

    month: str = PydanticField(pattern=MONTH_PATTERN)


class DeltaSet(BaseModel):
    """Current vs comparison. None percentages mean "comparison unavailable"."""

    clicks_delta_abs: int
    clicks_delta_pct: Optional[float] = None
    impressions_delta_abs: int
    impressions_delta_pct: Optional[float] = None
    ctr_delta_pp: float
    position_improvement: Optional[float] = None  # positive = ranked better


class Deltas(BaseModel):
    mom: Optional[DeltaSet] = None
    yoy: Optional[DeltaSet] = None


class SourceSection(BaseModel):
    """Everything computed for one provider."""

    current: Optional[PeriodMetrics] = None
    previous: Optional[PeriodMetrics] = None
    yoy: Optional[PeriodMetrics] = None
    deltas: Deltas = Deltas()
    last_16_months: List[MonthPoint] = []
    top_queries: List[SearchRow] = []


class NarrativePack(BaseModel):
    """Single JSON object handed to the narrative provider."""

    site: str
    month: str
    google: SourceSection
    bing: Optional[SourceSection] = None


# ─────────────────────────────────────────────
# PYDANTIC SCHEMAS — Narrative
# ─────────────────────────────────────────────


class NarrativeReport(BaseModel):
    highlights: List[str] = []
    google_section: str = ""
    bing_section: str = ""
    trend_summary: str = ""
    final_summary: str = ""


class NarrativeResult(BaseModel):
    """Shape-checked narrative. mode="raw" when the model did not return JSON."""

    mode: Literal["json", "raw"]
    report: Optional[NarrativeReport] = None
    raw_text: Optional[str] = None


# ─────────────────────────────────────────────
# PYDANTIC SCHEMAS — Report Output
# ─────────────────────────────────────────────


class DailyPoint(BaseModel):
    date: str
    gsc: PeriodMetrics
    bing: PeriodMetrics


class SummaryCard(BaseModel):
    clicks: str
    impressions: str
    ctr: str
    position: Optional[float] = None


class SummaryCards(BaseModel):
    google: Optional[SummaryCard] = None
    bing: Optional[SummaryCard] = None


class ReportSummary(BaseModel):
    """Provider totals for the period plus the full per-provider sections."""

    gsc_clicks: int = 0
    gsc_impressions: int = 0
    bing_clicks: int = 0
    bing_impressions: int = 0
    google: SourceSection = SourceSection()
    bing: Optional[SourceSection] = None


class ReportOutput(BaseModel):
    """Response of a report generation run."""

    site_id: str
    period: str
    gsc_url: str = ""
    bing_url: str = ""
    bing_resolved_url: Optional[str] = None
    generated_at: str = ""
    summary: ReportSummary = ReportSummary()
    daily: List[DailyPoint] = []
    summary_cards: SummaryCards = SummaryCards()
    narrative: Optional[NarrativeResult] = None
    narrative_status: str = "skipped"  # generated | unavailable | failed | skipped
    warnings: List[str] = []
    saved: bool = False


class StoredReport(BaseModel):
    """A persisted report as read back from history."""

    id: int
    site_id: str
    period: str
    created_at: str
    updated_at: str
    summary: dict
    narrative: Optional[dict] = None
    daily: list = []
