"""RANKLENS — Narrative Provider Selection."""

from typing import Dict, Tuple, Type

from app.ai.base_provider import NarrativeProvider, ProviderNotConfiguredError
from app.ai.claude_provider import ClaudeProvider
from app.ai.openai_provider import OpenAIProvider
from app.ai.sarvam_provider import SarvamProvider
from app.config import settings

PROVIDERS: Dict[str, Type[NarrativeProvider]] = {
    "openai": OpenAIProvider,
    "claude": ClaudeProvider,
    "sarvam": SarvamProvider,
}


class UnknownProviderError(ValueError):
    """Requested provider name is not registered."""


def select_provider(provider_name: str = "auto") -> Tuple[str, NarrativeProvider]:
    """Select and return an available narrative provider.

    When provider_name is 'auto', tries default_ai_provider first,
    then falls through remaining providers.
    """
    if provider_name == "auto":
        default = settings.default_ai_provider
        order = [default] + [name for name in PROVIDERS if name != default]
        for name in order:
            if name not in PROVIDERS:
                continue
            provider = PROVIDERS[name]()
            if provider.is_available():
                return name, provider
        raise ProviderNotConfiguredError(
            "No AI provider configured. Set OPENAI_API_KEY, ANTHROPIC_API_KEY, or SARVAM_API_KEY in .env."
        )

    if provider_name not in PROVIDERS:
        raise UnknownProviderError(f"Unknown provider: {provider_name}.")

    provider = PROVIDERS[provider_name]()
    if not provider.is_available():
        raise ProviderNotConfiguredError(f"{provider_name} provider not configured.")
    return provider_name, provider
