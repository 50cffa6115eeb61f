"""RANKLENS — Site Matcher.

Reconciles the GSC and Bing inventories on the normalized domain key.
Matching is exact key equality only; there is no fuzzy or partial-path
matching.
"""

from typing import Dict, List

from app.core.domain import normalize_site_key
from app.models.site_models import (
    MatchedSite,
    ProviderSite,
    SiteInventory,
    SiteStatus,
)
from app.core.logging import get_logger

logger = get_logger("analyzer.site_matcher")


def _index(sites: List[ProviderSite]) -> Dict[str, ProviderSite]:
    """Normalized key → first listing with that key."""
    index: Dict[str, ProviderSite] = {}
    for site in sites:
        key = normalize_site_key(site.url)
        if key and key not in index:
            index[key] = site
    return index


def match_sites(
    gsc_sites: List[ProviderSite], bing_sites: List[ProviderSite]
) -> SiteInventory:
    """Intersect the two inventories and keep one-sided sites for bookkeeping."""
    gsc_index = _index(gsc_sites)
    bing_index = _index(bing_sites)

    matched = [
        MatchedSite(
            site_id=key,
            gsc_url=gsc_index[key].url,
            bing_url=bing_index[key].url,
        )
        for key in gsc_index
        if key in bing_index
    ]

    statuses: Dict[str, SiteStatus] = {}
    for key, site in gsc_index.items():
        statuses[key] = SiteStatus(
            site_id=key,
            url=site.url,
            gsc_status=True,
            permission_level=site.permission_level,
        )
    for key, site in bing_index.items():
        if key in statuses:
            statuses[key].bing_status = True
        else:
            statuses[key] = SiteStatus(site_id=key, url=site.url, bing_status=True)

    inventory = SiteInventory(
        matched=matched,
        gsc_only=[s for k, s in gsc_index.items() if k not in bing_index],
        bing_only=[s for k, s in bing_index.items() if k not in gsc_index],
        sites=list(statuses.values()),
        gsc_urls={k: s.url for k, s in gsc_index.items()},
        bing_urls={k: s.url for k, s in bing_index.items()},
    )
    logger.info(
        f"Matched {len(matched)} sites ({len(inventory.gsc_only)} GSC-only, {len(inventory.bing_only)} Bing-only)"
    )
    return inventory
