"""RANKLENS — Narrative Response Parsing.

Model output is untrusted: it may be fenced, partial, or not JSON at all.
Nothing here raises; the worst case is a raw-text result.
"""

import json

from app.models.report_models import NarrativeReport, NarrativeResult
from app.core.logging import get_logger

logger = get_logger("ai.narrative")

TEXT_FIELDS = ("google_section", "bing_section", "trend_summary", "final_summary")


def _strip_fences(raw: str) -> str:
    clean = raw.strip()
    if clean.startswith("```"):
        clean = clean.split("\n", 1)[1] if "\n" in clean else clean[3:]
        if clean.rstrip().endswith("```"):
            clean = clean.rstrip()[:-3]
    return clean.strip()


def parse_narrative(raw: str) -> NarrativeResult:
    """Shape-check the model output, defaulting every missing or mistyped field."""
    text = (raw or "").strip()
    try:
        parsed = json.loads(_strip_fences(text))
    except ValueError:
        parsed = None

    if not isinstance(parsed, dict):
        logger.warning(f"Narrative is not a JSON object, returning raw text: {text[:200]}")
        return NarrativeResult(mode="raw", raw_text=text)

    defaulted = False
    highlights = parsed.get("highlights")
    if isinstance(highlights, list):
        kept = [h for h in highlights if isinstance(h, str)]
        defaulted = len(kept) != len(highlights)
        highlights = kept
    else:
        defaulted = True
        highlights = []

    sections = {}
    for field in TEXT_FIELDS:
        value = parsed.get(field)
        if isinstance(value, str):
            sections[field] = value
        else:
            defaulted = True
            sections[field] = ""

    if defaulted:
        logger.warning("Narrative JSON was partially shaped; missing fields defaulted")

    return NarrativeResult(
        mode="json",
        report=NarrativeReport(highlights=highlights, **sections),
        raw_text=text if defaulted else None,
    )
