"""RANKLENS — Report Persistence.

One row per (site_id, period). Regenerating a report overwrites the row;
concurrent regenerations race and the last write wins.
"""

import json
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.models.report_models import ReportOutput, SeoReport, StoredReport
from app.core.logging import get_logger

logger = get_logger("report_store")


def _find(session: Session, site_id: str, period: str) -> Optional[SeoReport]:
    return session.exec(
        select(SeoReport).where(
            SeoReport.site_id == site_id,
            SeoReport.period == period,
        )
    ).first()


def _overwrite(session: Session, row: SeoReport, columns: dict) -> None:
    for name, value in columns.items():
        setattr(row, name, value)
    row.updated_at = datetime.now(timezone.utc)
    session.add(row)
    session.commit()


def upsert_report(session: Session, report: ReportOutput) -> SeoReport:
    """Create or overwrite the stored report for (site_id, period)."""
    columns = {
        "summary_json": report.summary.model_dump_json(),
        "narrative_json": report.narrative.model_dump_json() if report.narrative else "null",
        "daily_json": json.dumps([d.model_dump() for d in report.daily]),
    }

    row = _find(session, report.site_id, report.period)
    if row is not None:
        _overwrite(session, row, columns)
    else:
        row = SeoReport(site_id=report.site_id, period=report.period, **columns)
        session.add(row)
        try:
            session.commit()
        except IntegrityError:
            # Another regeneration inserted the row after our read; overwrite it
            session.rollback()
            row = _find(session, report.site_id, report.period)
            if row is None:
                raise
            logger.info(
                "Concurrent insert detected, overwriting",
                extra={"site_id": report.site_id, "period": report.period},
            )
            _overwrite(session, row, columns)

    session.refresh(row)
    logger.info(
        f"Stored report id {row.id}",
        extra={"site_id": report.site_id, "period": report.period},
    )
    return row


def to_stored(row: SeoReport) -> StoredReport:
    return StoredReport(
        id=row.id,
        site_id=row.site_id,
        period=row.period,
        created_at=row.created_at.isoformat(),
        updated_at=row.updated_at.isoformat(),
        summary=json.loads(row.summary_json),
        narrative=json.loads(row.narrative_json),
        daily=json.loads(row.daily_json),
    )


def list_reports(session: Session, site_id: str) -> List[StoredReport]:
    """All stored reports for a site, newest period first."""
    rows = session.exec(
        select(SeoReport)
        .where(SeoReport.site_id == site_id)
        .order_by(SeoReport.period.desc())  # type: ignore
    ).all()
    return [to_stored(r) for r in rows]


def get_report(session: Session, site_id: str, period: str) -> Optional[StoredReport]:
    row = _find(session, site_id, period)
    return to_stored(row) if row else None
