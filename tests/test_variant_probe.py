import pytest

from app.connectors.bing.variants import (
    MAX_PROBE_ATTEMPTS,
    build_url_variants,
    probe_variants,
)
from app.connectors.http import ProviderAPIError


def test_variants_start_with_original_and_are_capped():
    variants = build_url_variants("example.com")
    assert variants == [
        "example.com",
        "https://example.com",
        "https://example.com/",
        "https://www.example.com",
        "https://www.example.com/",
        "http://example.com",
        "http://example.com/",
        "http://www.example.com",
    ]
    assert len(variants) == MAX_PROBE_ATTEMPTS


def test_variants_skip_duplicates_of_original():
    variants = build_url_variants("https://www.example.com/")
    assert variants[0] == "https://www.example.com/"
    assert len(variants) == len(set(variants))
    assert len(variants) <= MAX_PROBE_ATTEMPTS


def test_empty_original_is_probed_alone():
    assert build_url_variants("") == [""]


class Recorder:
    def __init__(self, answers):
        self.answers = answers
        self.calls = []

    async def __call__(self, url):
        self.calls.append(url)
        answer = self.answers.get(url, [])
        if isinstance(answer, Exception):
            raise answer
        return answer


async def test_resolves_www_slash_variant():
    fetch = Recorder({"https://www.example.com/": [{"Clicks": 1}]})
    result = await probe_variants(fetch, "example.com")
    assert result.url == "https://www.example.com/"
    assert result.rows == [{"Clicks": 1}]
    assert result.attempts == 5
    assert fetch.calls[0] == "example.com"


async def test_original_wins_when_it_has_data():
    fetch = Recorder({"http://example.com": [{"Clicks": 1}]})
    result = await probe_variants(fetch, "http://example.com")
    assert result.url == "http://example.com"
    assert result.attempts == 1


async def test_exhaustion_stops_at_cap():
    fetch = Recorder({})
    result = await probe_variants(fetch, "example.com")
    assert result.url is None
    assert result.rows == []
    assert result.attempts == MAX_PROBE_ATTEMPTS
    assert len(fetch.calls) == MAX_PROBE_ATTEMPTS


async def test_rejections_move_to_next_candidate():
    fetch = Recorder(
        {
            "example.com": ProviderAPIError("InvalidSiteUrl", "bing", 400),
            "https://example.com": [{"Clicks": 2}],
        }
    )
    result = await probe_variants(fetch, "example.com")
    assert result.url == "https://example.com"
    assert result.attempts == 2


async def test_unreachable_provider_propagates():
    fetch = Recorder(
        {"example.com": ProviderAPIError("timeout", "bing", unreachable=True)}
    )
    with pytest.raises(ProviderAPIError):
        await probe_variants(fetch, "example.com")
    assert fetch.calls == ["example.com"]
