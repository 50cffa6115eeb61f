"""RANKLENS — Google Search Console API Client.

Uses the Webmasters v3 REST surface with an OAuth bearer token supplied
per request.
"""

from typing import Any, Dict, List, Sequence
from urllib.parse import quote

from app.config import settings
from app.connectors.http import ProviderClient
from app.models.site_models import ProviderSite
from app.core.logging import get_logger

logger = get_logger("gsc.client")


class GSCClient(ProviderClient):
    """Async client for the Search Console sites + searchAnalytics endpoints."""

    provider = "gsc"

    def __init__(
        self,
        access_token: str | None = None,
        base_url: str | None = None,
        row_limit: int | None = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.access_token = access_token or settings.gsc_access_token
        self.base_url = (base_url or settings.gsc_base_url).rstrip("/")
        self.row_limit = row_limit or settings.gsc_row_limit

    @property
    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.access_token}"}

    async def list_sites(self) -> List[ProviderSite]:
        """Fetch every property the token can see."""
        result = await self._request(
            "GET", f"{self.base_url}/sites", headers=self._headers
        )
        entries = result.get("siteEntry", []) if isinstance(result, dict) else []
        sites = [
            ProviderSite(
                provider="gsc",
                url=entry["siteUrl"],
                permission_level=entry.get("permissionLevel", ""),
            )
            for entry in entries
            if entry.get("siteUrl")
        ]
        logger.info(f"Fetched {len(sites)} GSC sites", extra={"provider": "gsc"})
        return sites

    async def query(
        self,
        site_url: str,
        start_date: str,
        end_date: str,
        dimensions: Sequence[str] = ("date",),
        row_limit: int | None = None,
    ) -> List[Dict[str, Any]]:
        """Run a searchAnalytics query. Returns raw rows, [] when none."""
        url = f"{self.base_url}/sites/{quote(site_url, safe='')}/searchAnalytics/query"
        body = {
            "startDate": start_date,
            "endDate": end_date,
            "dimensions": list(dimensions),
            "rowLimit": row_limit or self.row_limit,
        }
        result = await self._request("POST", url, json=body, headers=self._headers)
        rows = result.get("rows") if isinstance(result, dict) else None
        if not isinstance(rows, list):
            rows = []
        logger.info(
            f"Fetched {len(rows)} GSC rows for {site_url} {start_date} → {end_date} by {','.join(dimensions)}",
            extra={"provider": "gsc"},
        )
        return rows

