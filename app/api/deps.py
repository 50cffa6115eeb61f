"""RANKLENS — Shared Route Dependencies.

Clients are built per request and closed when the request ends; nothing
here is shared between requests.
"""

from typing import AsyncIterator, Optional

from fastapi import Header, HTTPException

from app.ai.base_provider import NarrativeProvider, ProviderNotConfiguredError
from app.ai.registry import select_provider
from app.config import settings
from app.connectors.bing.client import BingClient
from app.connectors.gsc.client import GSCClient
from app.connectors.http import ProviderAPIError
from app.core.logging import get_logger

logger = get_logger("api.deps")


def _bearer_token(authorization: Optional[str]) -> str:
    if authorization and authorization.lower().startswith("bearer "):
        return authorization[7:].strip()
    return settings.gsc_access_token


async def get_gsc_client(
    authorization: Optional[str] = Header(default=None),
) -> AsyncIterator[GSCClient]:
    token = _bearer_token(authorization)
    if not token:
        raise HTTPException(
            status_code=401,
            detail={"error": "unauthorized", "message": "Missing Google access token."},
        )
    client = GSCClient(access_token=token)
    try:
        yield client
    finally:
        await client.close()


async def get_bing_client() -> AsyncIterator[BingClient]:
    client = BingClient()
    try:
        yield client
    finally:
        await client.close()


def get_narrative_provider() -> Optional[NarrativeProvider]:
    """The configured provider, or None so reports degrade to numbers only."""
    try:
        _, provider = select_provider("auto")
        return provider
    except ProviderNotConfiguredError as e:
        logger.warning(f"Narrative disabled: {e}")
        return None


def upstream_http_error(e: ProviderAPIError) -> HTTPException:
    """Map a provider failure to a 502 with a machine-readable reason."""
    return HTTPException(
        status_code=502,
        detail={
            "error": "upstream_unreachable" if e.unreachable else "upstream_error",
            "provider": e.provider,
            "message": str(e),
        },
    )
