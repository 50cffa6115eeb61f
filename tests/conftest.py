"""Shared fixtures: in-memory database and provider fakes."""

import json
from typing import Callable, Dict, List, Optional

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from app.ai.base_provider import NarrativeProvider
from app.connectors.bing.client import BingClient
from app.connectors.gsc.client import GSCClient
from app.connectors.http import ProviderAPIError
from app.database import init_db
from app.models.site_models import ProviderSite


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    return engine


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


class FakeGSC(GSCClient):
    """GSCClient whose HTTP layer is replaced by a row handler."""

    def __init__(
        self,
        sites: List[str],
        handler: Callable[[str, str, str, tuple], List[dict]],
        list_error: Optional[Exception] = None,
    ):
        super().__init__(access_token="test-token")
        self.sites = sites
        self.handler = handler
        self.list_error = list_error
        self.queries: List[tuple] = []

    async def list_sites(self) -> List[ProviderSite]:
        if self.list_error:
            raise self.list_error
        return [ProviderSite(provider="gsc", url=u, permission_level="siteOwner") for u in self.sites]

    async def query(self, site_url, start_date, end_date, dimensions=("date",), row_limit=None):
        self.queries.append((site_url, start_date, end_date, tuple(dimensions)))
        return self.handler(site_url, start_date, end_date, tuple(dimensions))


class FakeBing(BingClient):
    """BingClient serving stats only for the URL strings in `stats`."""

    def __init__(
        self,
        sites: List[str],
        stats: Dict[str, List[dict]],
        api_key: str = "test-key",
        list_error: Optional[Exception] = None,
    ):
        super().__init__(api_key=api_key)
        self.sites = sites
        self.stats = stats
        self.list_error = list_error
        self.probed: List[str] = []

    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def get_user_sites(self) -> List[ProviderSite]:
        if self.list_error:
            raise self.list_error
        return [ProviderSite(provider="bing", url=u, role="Administrator", verified=True) for u in self.sites]

    async def get_rank_and_traffic_stats(self, site_url: str) -> List[dict]:
        self.probed.append(site_url)
        if site_url not in self.stats:
            raise ProviderAPIError("InvalidSiteUrl", "bing", 400)
        return self.stats[site_url]


class FakeNarrative(NarrativeProvider):
    name = "fake"

    def __init__(self, response: Optional[str] = None, error: Optional[Exception] = None):
        self.response = response
        self.error = error
        self.packs: List[dict] = []

    def is_available(self) -> bool:
        return True

    async def generate_report(self, pack: dict) -> str:
        self.packs.append(pack)
        if self.error:
            raise self.error
        if self.response is not None:
            return self.response
        return json.dumps(
            {
                "highlights": ["Clicks up 25% month over month"],
                "google_section": "Google grew.",
                "bing_section": "Bing grew.",
                "trend_summary": "Steady climb over 16 months.",
                "final_summary": "A strong month.",
            }
        )


# November 2025 fixture data: current 1000/20000, previous 800/25000, YoY 500/10000
GSC_WINDOWS = {
    ("2025-11-01", "2025-11-30"): [
        {"keys": ["2025-11-01"], "clicks": 600, "impressions": 12000, "ctr": 0.05, "position": 3.0},
        {"keys": ["2025-11-02"], "clicks": 400, "impressions": 8000, "ctr": 0.05, "position": 5.0},
    ],
    ("2025-10-01", "2025-10-31"): [
        {"keys": ["2025-10-01"], "clicks": 800, "impressions": 25000, "ctr": 0.032, "position": 5.0},
    ],
    ("2024-11-01", "2024-11-30"): [
        {"keys": ["2024-11-01"], "clicks": 500, "impressions": 10000, "ctr": 0.05, "position": 6.0},
    ],
}


def gsc_handler(site_url, start, end, dimensions):
    if dimensions == ("query",):
        return [{"keys": ["dental chairs"], "clicks": 50, "impressions": 1000, "ctr": 0.05, "position": 3.2}]
    if (start, end) == ("2024-08-01", "2025-11-30"):
        rows = []
        for i in range(16):
            year, month = divmod(2024 * 12 + 7 + i, 12)
            rows.append(
                {"keys": [f"{year:04d}-{month + 1:02d}-15"], "clicks": 100 + i, "impressions": 1000, "ctr": 0.1, "position": 4.0}
            )
        return rows
    return GSC_WINDOWS.get((start, end), [])


BING_ROWS = [
    {"Date": "/Date(1761955200000)/", "Clicks": 30, "Impressions": 600},  # 2025-11-01
    {"Date": "2025-10-15T00:00:00", "Clicks": 20, "Impressions": 400},
    {"Date": "not a date", "Clicks": 999, "Impressions": 999},
]


@pytest.fixture
def fake_gsc():
    return FakeGSC(["sc-domain:example.com", "https://other.org/"], gsc_handler)


@pytest.fixture
def fake_bing():
    return FakeBing(
        ["http://example.com", "https://bing-only.net/"],
        {"https://www.example.com/": BING_ROWS},
    )


@pytest.fixture
def fake_narrative():
    return FakeNarrative()
