"""RANKLENS — Site Inventory Models."""

from typing import List, Optional
from pydantic import BaseModel


class ProviderSite(BaseModel):
    """A site exactly as a provider registered it."""

    provider: str  # "gsc" | "bing"
    url: str
    permission_level: str = ""
    role: str = ""
    verified: Optional[bool] = None


class MatchedSite(BaseModel):
    """A site present in both inventories, with each provider's exact string."""

    site_id: str
    gsc_url: str
    bing_url: str


class SiteStatus(BaseModel):
    """Per-site bookkeeping row for the inventory view."""

    site_id: str
    url: str
    gsc_status: bool = False
    bing_status: bool = False
    permission_level: str = ""


class SiteNotFoundError(Exception):
    """Raised when a site key has no counterpart in one or both inventories."""

    def __init__(
        self,
        site_id: str,
        missing: List[str],
        gsc_url: str = "",
        bing_url: str = "",
    ):
        self.site_id = site_id
        self.missing = missing
        self.gsc_url = gsc_url
        self.bing_url = bing_url
        super().__init__(f"Site {site_id!r} not found in: {', '.join(missing)}")


class SiteInventory(BaseModel):
    """Result of reconciling the GSC and Bing inventories."""

    matched: List[MatchedSite] = []
    gsc_only: List[ProviderSite] = []
    bing_only: List[ProviderSite] = []
    sites: List[SiteStatus] = []
    gsc_urls: dict[str, str] = {}
    bing_urls: dict[str, str] = {}

    def find(self, site_id: str, require_bing: bool = True) -> MatchedSite:
        """Resolve both providers' exact strings for a normalized key."""
        gsc_url = self.gsc_urls.get(site_id, "")
        bing_url = self.bing_urls.get(site_id, "")
        missing = []
        if not gsc_url:
            missing.append("gsc")
        if require_bing and not bing_url:
            missing.append("bing")
        if missing:
            raise SiteNotFoundError(site_id, missing, gsc_url, bing_url)
        return MatchedSite(site_id=site_id, gsc_url=gsc_url, bing_url=bing_url)
