"""LLM service for sleep insights over an OpenAI-compatible chat API."""

import logging

import httpx
from pydantic import ValidationError

from sleep_tracker.config import get_app_config, get_settings
from sleep_tracker.errors import LLMUnavailableError
from sleep_tracker.schemas.insights import InsightsContext, LLMInsightsOutput

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a non-medical sleep tracking assistant.

You receive aggregated sleep metrics and a chronotype classification for a single user. You must base your conclusions only on the provided data.

Your goals:
- Describe the user's recent sleep in clear, neutral language.
- Highlight patterns in duration, quality, consistency, and total daily sleep (core + naps).
- Compare last night to the user's recent period and longer history.
- Factor in the user's chronotype when it helps explain patterns.
- Give practical, behavioral suggestions to improve sleep habits.

Rules:
- Do NOT provide medical advice or diagnoses.
- Do NOT mention diseases, disorders, doctors, or treatment.
- Focus only on behavior and routines (bedtime regularity, wind-down habits, handling naps, etc.).
- If data is limited or mixed, say that explicitly.
- Be concise and concrete.

Respond as strict JSON with exactly this shape:

{
  "summary": "2-3 sentences comparing last night to the recent period and longer history.",
  "observations": ["3-6 short observations about duration, quality, consistency and total daily sleep."],
  "guidance": ["3-5 concrete, non-medical suggestions tailored to these numbers."]
}

No extra fields. No comments. No backticks."""

USER_PROMPT_TEMPLATE = """Here is JSON describing this user's sleep data.

- "chronotype" describes their typical mid-sleep time and type.
- "history", "recent" and "last_night" each contain per-sleep metrics, "daily_overall" totals per local day (core sleep and naps) and derived scores.

Use "history" as the long-term baseline, "recent" for short-term changes and "last_night" to judge the most recent night against both.

JSON:

{context_json}

Based on this data, respond in the required JSON format."""


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences some models wrap around JSON."""
    text = text.strip()
    if text.startswith("```json"):
        text = text[7:]
    if text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


class LLMService:
    """Service for generating sleep insights with an OpenAI-compatible LLM."""

    def __init__(self) -> None:
        self.settings = get_settings()
        self.llm_config = get_app_config().llm
        self.base_url = self.settings.openai_base_url.rstrip("/")
        self.model = self.settings.openai_sleep_insights_model
        self.timeout = self.settings.llm_timeout_seconds

    @property
    def is_configured(self) -> bool:
        return self.settings.llm_enabled

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            headers={"Authorization": f"Bearer {self.settings.openai_api_key}"},
        )

    async def generate(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float = 0.3,
        max_tokens: int = 1024,
    ) -> str:
        """Generate a JSON response from the LLM."""
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        async with self._client() as client:
            response = await client.post(
                f"{self.base_url}/chat/completions",
                json={
                    "model": self.model,
                    "messages": messages,
                    "temperature": temperature,
                    "max_tokens": max_tokens,
                    "response_format": {"type": "json_object"},
                },
            )
            response.raise_for_status()
            data = response.json()
            return data["choices"][0]["message"]["content"]

    async def generate_insights(self, context: InsightsContext) -> LLMInsightsOutput:
        """Turn aggregated metrics into a summary, observations and guidance."""
        if not self.is_configured:
            raise LLMUnavailableError("Sleep insights are not configured")

        prompt = USER_PROMPT_TEMPLATE.format(
            context_json=context.model_dump_json(by_alias=True, indent=2)
        )
        try:
            result = await self.generate(
                prompt=prompt,
                system_prompt=SYSTEM_PROMPT,
                temperature=self.llm_config.get("temperature", 0.3),
                max_tokens=self.llm_config.get("max_tokens", 1024),
            )
        except (httpx.HTTPError, KeyError, IndexError, ValueError) as e:
            logger.error(f"Error calling LLM for sleep insights: {e}")
            raise LLMUnavailableError("Failed to generate sleep insights") from e

        if not isinstance(result, str):
            raise LLMUnavailableError("LLM returned an empty insights payload")
        try:
            return LLMInsightsOutput.model_validate_json(strip_code_fences(result))
        except ValidationError as e:
            logger.warning(f"Failed to parse LLM insights response: {e}")
            raise LLMUnavailableError("LLM returned an invalid insights payload") from e


def get_llm_service() -> LLMService:
    """Get an LLM service instance."""
    return LLMService()
