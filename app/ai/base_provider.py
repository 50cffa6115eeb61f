"""RANKLENS — Abstract Narrative Provider."""

from abc import ABC, abstractmethod


class ProviderNotConfiguredError(RuntimeError):
    """No usable narrative provider for the requested name."""


class NarrativeProvider(ABC):
    """Abstract base for narrative report generation.

    Providers receive the computed NarrativePack as a dict and return the
    model's raw text. Parsing and shape-checking happen in app.ai.narrative,
    so a provider never has to guess at the JSON contract.
    """

    name = "base"

    @abstractmethod
    async def generate_report(self, pack: dict) -> str:
        """Return the raw model output for a narrative pack."""
        ...

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this provider is configured and ready."""
        ...
