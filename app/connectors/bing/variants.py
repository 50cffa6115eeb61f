"""RANKLENS — Bing Site URL Variant Probe.

GetRankAndTrafficStats only answers for the exact URL string it expects,
which often differs from the registered site by protocol, a www. prefix or
a trailing slash. When the registered string yields nothing, the probe walks
a fixed, bounded list of those permutations until one returns data.
"""

from typing import Any, Awaitable, Callable, List, NamedTuple, Optional

from app.connectors.http import ProviderAPIError
from app.core.domain import strip_url_base
from app.core.logging import get_logger

logger = get_logger("bing.variants")

MAX_PROBE_ATTEMPTS = 8
PROTOCOLS = ("https://", "http://")
HOST_PREFIXES = ("", "www.")
SUFFIXES = ("", "/")

FetchFn = Callable[[str], Awaitable[List[Any]]]


class ProbeResult(NamedTuple):
    url: Optional[str]  # The candidate that returned data, None when exhausted
    rows: List[Any]
    attempts: int


def build_url_variants(original: str) -> List[str]:
    """Original first, then protocol x www x slash permutations of its base.

    Duplicates of the original are skipped and the list never exceeds
    MAX_PROBE_ATTEMPTS entries.
    """
    candidates = [original]
    base = strip_url_base(original)
    if not base:
        return candidates

    for protocol in PROTOCOLS:
        for prefix in HOST_PREFIXES:
            for suffix in SUFFIXES:
                variant = f"{protocol}{prefix}{base}{suffix}"
                if variant not in candidates:
                    candidates.append(variant)
    return candidates[:MAX_PROBE_ATTEMPTS]


async def probe_variants(fetch: FetchFn, original: str) -> ProbeResult:
    """Try each candidate in order; the first non-empty result wins.

    Provider rejections and empty results move on to the next candidate.
    Unreachable-provider errors propagate. Exhaustion returns empty rows.
    """
    attempts = 0
    for candidate in build_url_variants(original):
        attempts += 1
        try:
            rows = await fetch(candidate)
        except ProviderAPIError as e:
            if e.unreachable:
                raise
            logger.info(
                f"Probe {candidate} rejected: {e}",
                extra={"provider": e.provider, "attempt": attempts},
            )
            continue

        if rows:
            if candidate != original:
                logger.info(
                    f"Resolved {original} as {candidate} after {attempts} attempts",
                    extra={"attempt": attempts},
                )
            return ProbeResult(candidate, rows, attempts)

    logger.info(f"No data for {original} after {attempts} attempts")
    return ProbeResult(None, [], attempts)
