"""RANKLENS — Bing Webmaster Tools API Client.

The JSON surface of the Webmaster API authenticates with an API key query
parameter and wraps list payloads in {"d": [...]}.
"""

from typing import Any, Dict, List

from app.config import settings
from app.connectors.http import ProviderClient
from app.models.site_models import ProviderSite
from app.core.logging import get_logger

logger = get_logger("bing.client")


def _unwrap(payload: Any) -> List[Dict[str, Any]]:
    """Handle both {"d": [...]} and bare-list responses."""
    if isinstance(payload, dict):
        payload = payload.get("d", [])
    return payload if isinstance(payload, list) else []


class BingClient(ProviderClient):
    """Async client for GetUserSites and GetRankAndTrafficStats."""

    provider = "bing"

    def __init__(self, api_key: str | None = None, base_url: str | None = None, **kwargs):
        super().__init__(**kwargs)
        self.api_key = api_key or settings.bing_api_key
        self.base_url = (base_url or settings.bing_base_url).rstrip("/")

    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def get_user_sites(self) -> List[ProviderSite]:
        """Fetch every site registered for the API key."""
        result = await self._request(
            "GET", f"{self.base_url}/GetUserSites", params={"apikey": self.api_key}
        )
        sites = [
            ProviderSite(
                provider="bing",
                url=entry["Url"],
                role=str(entry.get("Role", "")),
                verified=entry.get("IsVerified"),
            )
            for entry in _unwrap(result)
            if isinstance(entry, dict) and entry.get("Url")
        ]
        logger.info(f"Fetched {len(sites)} Bing sites", extra={"provider": "bing"})
        return sites

    async def get_rank_and_traffic_stats(self, site_url: str) -> List[Dict[str, Any]]:
        """Daily clicks/impressions for a site. The siteUrl must match Bing's exact form."""
        result = await self._request(
            "GET",
            f"{self.base_url}/GetRankAndTrafficStats",
            params={"siteUrl": site_url, "apikey": self.api_key},
        )
        rows = _unwrap(result)
        logger.info(
            f"Fetched {len(rows)} Bing traffic rows for {site_url}",
            extra={"provider": "bing"},
        )
        return rows
