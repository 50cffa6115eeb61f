"""RANKLENS — Sarvam AI Provider."""

from sarvamai import AsyncSarvamAI

from app.ai.base_provider import NarrativeProvider
from app.ai.prompts import build_instructions, build_user_prompt
from app.config import settings
from app.core.logging import get_logger

logger = get_logger("ai.sarvam")


class SarvamProvider(NarrativeProvider):
    """Sarvam AI provider for narrative generation (model: sarvam-m)."""

    name = "sarvam"

    def __init__(self, api_key: str | None = None):
        self.api_key = api_key or settings.sarvam_api_key
        self.client = (
            AsyncSarvamAI(api_subscription_key=self.api_key) if self.api_key else None
        )

    def is_available(self) -> bool:
        return self.client is not None

    async def generate_report(self, pack: dict) -> str:
        if not self.is_available():
            raise RuntimeError("Sarvam provider not configured")

        try:
            response = await self.client.chat.completions(
                messages=[
                    {"role": "system", "content": build_instructions()},
                    {"role": "user", "content": build_user_prompt(pack)},
                ],
                temperature=0.3,
                max_tokens=3000,
            )
            return (response.choices[0].message.content or "{}").strip()
        except Exception as e:
            logger.error(f"Sarvam generation failed: {e}")
            raise
