"""RANKLENS — Site Inventory Routes."""

import asyncio

from fastapi import APIRouter, Depends, HTTPException

from app.analyzer.site_matcher import match_sites
from app.api.deps import get_bing_client, get_gsc_client, upstream_http_error
from app.connectors.bing.client import BingClient
from app.connectors.gsc.client import GSCClient
from app.connectors.http import ProviderAPIError
from app.core.logging import get_logger

logger = get_logger("api.sites")

router = APIRouter(prefix="/sites", tags=["Sites"])


@router.get("/gsc")
async def list_gsc_sites(gsc: GSCClient = Depends(get_gsc_client)):
    """Properties visible to the caller's Google token."""
    try:
        sites = await gsc.list_sites()
    except ProviderAPIError as e:
        logger.error(f"GSC site listing failed: {e}")
        raise upstream_http_error(e)
    return {"status": "success", "sites": sites}


@router.get("/bing")
async def list_bing_sites(bing: BingClient = Depends(get_bing_client)):
    """Sites registered under the configured Bing API key."""
    if not bing.is_configured():
        raise HTTPException(
            status_code=400,
            detail={"error": "bing_not_configured", "message": "Bing API key not configured."},
        )
    try:
        sites = await bing.get_user_sites()
    except ProviderAPIError as e:
        logger.error(f"Bing site listing failed: {e}")
        raise upstream_http_error(e)
    return {"status": "success", "sites": sites}


@router.get("")
async def site_inventory(
    gsc: GSCClient = Depends(get_gsc_client),
    bing: BingClient = Depends(get_bing_client),
):
    """Reconciled inventory: matched sites plus one-sided bookkeeping."""
    async def no_sites():
        return []

    try:
        gsc_sites, bing_sites = await asyncio.gather(
            gsc.list_sites(),
            bing.get_user_sites() if bing.is_configured() else no_sites(),
        )
    except ProviderAPIError as e:
        logger.error(f"Site inventory failed: {e}")
        raise upstream_http_error(e)

    inventory = match_sites(gsc_sites, bing_sites)
    return {
        "status": "success",
        "bing_configured": bing.is_configured(),
        **inventory.model_dump(exclude={"gsc_urls", "bing_urls"}),
    }
