"""RANKLENS — Central Configuration via Pydantic Settings."""

import os
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables / .env file."""

    # ── Google Search Console ──
    gsc_access_token: str = ""  # Fallback when the request carries no bearer token
    gsc_base_url: str = "https://www.googleapis.com/webmasters/v3"
    gsc_row_limit: int = 25000

    # ── Bing Webmaster Tools ──
    bing_api_key: str = ""
    bing_base_url: str = "https://ssl.bing.com/webmaster/api.svc/json"

    # ── Providers ──
    provider_timeout_seconds: float = 8.0

    # ── Database ──
    database_url: str = ""

    # ── AI Providers ──
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    sarvam_api_key: Optional[str] = None
    default_ai_provider: str = "openai"  # openai | claude | sarvam
    openai_model: str = "gpt-4o-mini"
    claude_model: str = "claude-sonnet-4-20250514"
    report_language: str = "Romanian"

    # ── App ──
    log_level: str = "INFO"
    scheduler_enabled: bool = True
    report_day_of_month: int = 3  # Monthly run, once the previous month has settled
    report_hour: int = 4
    scheduled_sites: str = ""  # Comma-separated normalized site keys

    @property
    def effective_database_url(self) -> str:
        """Return PostgreSQL URL if set, otherwise fall back to SQLite."""
        if self.database_url:
            return self.database_url
        # Vercel has a read-only filesystem; use /tmp for SQLite
        if os.environ.get("VERCEL"):
            return "sqlite:////tmp/ranklens.db"
        return "sqlite:///./ranklens.db"

    @property
    def scheduled_site_ids(self) -> List[str]:
        return [s.strip() for s in self.scheduled_sites.split(",") if s.strip()]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
