"""RANKLENS — Domain Key Normalization.

Google and Bing register the same site under different strings
("sc-domain:example.com", "https://www.example.com/", "http://example.com").
Every site is joined across providers on the key produced here.
"""

import re
from typing import Optional
from urllib.parse import urlsplit

DOMAIN_PROPERTY_PREFIX = re.compile(r"^sc-domain:", re.IGNORECASE)
PROTOCOL_PREFIX = re.compile(r"^https?://", re.IGNORECASE)
WWW_PREFIX = re.compile(r"^www\.", re.IGNORECASE)


def _strip_www(host: str) -> str:
    while WWW_PREFIX.match(host):
        host = WWW_PREFIX.sub("", host, count=1)
    return host


def strip_url_base(url: str) -> str:
    """Drop protocol, leading www. and trailing slashes, keeping the original case."""
    base = PROTOCOL_PREFIX.sub("", url.strip())
    return _strip_www(base).rstrip("/")


def normalize_site_key(raw: Optional[str]) -> str:
    """Canonical lowercase site key used to join provider inventories.

    Never raises; malformed input degrades to textual stripping.
    Idempotent: normalize_site_key(normalize_site_key(s)) == normalize_site_key(s).
    """
    if not raw:
        return ""

    clean = str(raw).strip()
    clean = DOMAIN_PROPERTY_PREFIX.sub("", clean)
    clean = PROTOCOL_PREFIX.sub("", clean)
    clean = WWW_PREFIX.sub("", clean)
    if not clean:
        return ""

    try:
        parsed = urlsplit(f"https://{clean}")
        host = parsed.hostname
        path = parsed.path
    except ValueError:
        host = None
        path = ""

    if not host:
        return strip_url_base(clean).lower()

    host = _strip_www(host)
    path = "" if path == "/" else path.rstrip("/")
    return f"{host}{path}".lower()
