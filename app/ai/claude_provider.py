"""RANKLENS — Anthropic Claude Provider."""

from anthropic import AsyncAnthropic

from app.ai.base_provider import NarrativeProvider
from app.ai.prompts import build_instructions, build_user_prompt
from app.config import settings
from app.core.logging import get_logger

logger = get_logger("ai.claude")


class ClaudeProvider(NarrativeProvider):
    """Anthropic Claude provider for narrative generation."""

    name = "claude"

    def __init__(self, api_key: str | None = None, model: str | None = None):
        self.api_key = api_key or settings.anthropic_api_key
        self.model = model or settings.claude_model
        self.client = AsyncAnthropic(api_key=self.api_key) if self.api_key else None

    def is_available(self) -> bool:
        return self.client is not None

    async def generate_report(self, pack: dict) -> str:
        if not self.is_available():
            raise RuntimeError("Claude provider not configured")

        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=3000,
                system=build_instructions(),
                messages=[
                    {"role": "user", "content": build_user_prompt(pack)},
                ],
            )
            return response.content[0].text.strip() if response.content else "{}"
        except Exception as e:
            logger.error(f"Claude generation failed: {e}")
            raise
