"""RANKLENS — Scheduler Jobs.

APScheduler monthly job that regenerates last month's report for every
configured site.
"""

from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from sqlmodel import Session

from app.ai.base_provider import NarrativeProvider, ProviderNotConfiguredError
from app.ai.registry import select_provider
from app.analyzer.pipeline import generate_report
from app.config import settings
from app.connectors.bing.client import BingClient
from app.connectors.gsc.client import GSCClient
from app.core.periods import last_completed_month, period_key
from app.database import engine
from app.core.logging import get_logger

logger = get_logger("scheduler")

scheduler = AsyncIOScheduler()


def _narrative_provider() -> Optional[NarrativeProvider]:
    try:
        return select_provider("auto")[1]
    except ProviderNotConfiguredError as e:
        logger.warning(f"Scheduled reports without narrative: {e}")
        return None


async def monthly_report_job() -> int:
    """Regenerate the last completed month for each scheduled site.

    Returns the number of reports produced. One site failing does not stop
    the others.
    """
    site_ids = settings.scheduled_site_ids
    if not site_ids:
        logger.info("No scheduled sites configured")
        return 0
    if not settings.gsc_access_token:
        logger.error("Scheduled reports need GSC_ACCESS_TOKEN; skipping run")
        return 0

    year, month = last_completed_month()
    period = period_key(year, month)
    logger.info(f"Scheduled reports starting for {len(site_ids)} sites", extra={"period": period})

    provider = _narrative_provider()
    produced = 0
    async with GSCClient() as gsc, BingClient() as bing:
        with Session(engine) as session:
            for site_id in site_ids:
                try:
                    report = await generate_report(
                        site_id, year, month, gsc, bing, provider, session
                    )
                    produced += 1
                    logger.info(
                        f"Scheduled report done (saved={report.saved})",
                        extra={"site_id": site_id, "period": period},
                    )
                except Exception as e:
                    logger.error(
                        f"Scheduled report failed: {e}",
                        extra={"site_id": site_id, "period": period},
                    )
    return produced


def start_scheduler():
    """Configure and start the scheduler."""
    if not settings.scheduler_enabled:
        logger.info("Scheduler disabled via config")
        return

    scheduler.add_job(
        monthly_report_job,
        "cron",
        day=settings.report_day_of_month,
        hour=settings.report_hour,
        minute=0,
        id="monthly_reports",
        replace_existing=True,
        misfire_grace_time=3600,
    )
    scheduler.start()
    logger.info(
        f"Scheduler started. Monthly reports on day {settings.report_day_of_month} at {settings.report_hour}:00 UTC"
    )


def stop_scheduler():
    """Shutdown the scheduler gracefully."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
