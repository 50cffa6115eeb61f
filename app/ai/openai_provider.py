"""RANKLENS — OpenAI Provider."""

from openai import AsyncOpenAI

from app.ai.base_provider import NarrativeProvider
from app.ai.prompts import build_instructions, build_user_prompt
from app.config import settings
from app.core.logging import get_logger

logger = get_logger("ai.openai")


class OpenAIProvider(NarrativeProvider):
    """OpenAI chat completions in JSON-object mode."""

    name = "openai"

    def __init__(self, api_key: str | None = None, model: str | None = None):
        self.api_key = api_key or settings.openai_api_key
        self.model = model or settings.openai_model
        self.client = AsyncOpenAI(api_key=self.api_key) if self.api_key else None

    def is_available(self) -> bool:
        return self.client is not None

    async def generate_report(self, pack: dict) -> str:
        if not self.is_available():
            raise RuntimeError("OpenAI provider not configured")

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": build_instructions()},
                    {"role": "user", "content": build_user_prompt(pack)},
                ],
                temperature=0.3,
                max_tokens=3000,
                response_format={"type": "json_object"},
            )
            return (response.choices[0].message.content or "{}").strip()
        except Exception as e:
            logger.error(f"OpenAI generation failed: {e}")
            raise
