"""
Thin wrapper over an OpenAI-compatible chat completions endpoint.

Used for sentiment classification of free-text mood input and for
AI-written habit suggestions. No retries; callers fall back to rules.
"""

import asyncio
import json
from typing import Any, Dict, Optional

from openai import AsyncOpenAI

from microhabit.core.config import settings
from microhabit.core.exceptions import LLMRequestError, LLMUnavailableError
from microhabit.services.logger import logger


def extract_json_object(text: str) -> Dict[str, Any]:
    """Pull the first JSON object out of a model reply, tolerating ```json fences."""
    if not text:
        raise ValueError("Empty model reply")

    cleaned = text.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    cleaned = cleaned.strip()

    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start == -1 or end <= start:
        raise ValueError("No JSON object in model reply")

    try:
        parsed = json.loads(cleaned[start : end + 1])
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in model reply: {e}") from e

    if not isinstance(parsed, dict):
        raise ValueError("Model reply JSON is not an object")
    return parsed


class LLMClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = settings.LLM_API_KEY if api_key is None else api_key
        self.base_url = base_url or settings.LLM_BASE_URL
        self.model = model or settings.LLM_MODEL
        self.timeout = timeout or settings.LLM_TIMEOUT_SECONDS
        self._client: Optional[AsyncOpenAI] = None

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.api_key, base_url=self.base_url, max_retries=0
            )
        return self._client

    async def complete(
        self,
        system: str,
        user: str,
        *,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        if not self.is_configured:
            raise LLMUnavailableError("LLM_API_KEY is not configured")

        try:
            response = await asyncio.wait_for(
                self.client.chat.completions.create(
                    model=self.model,
                    messages=[
                        {"role": "system", "content": system},
                        {"role": "user", "content": user},
                    ],
                    max_tokens=max_tokens or settings.LLM_MAX_TOKENS,
                    temperature=(
                        settings.LLM_TEMPERATURE if temperature is None else temperature
                    ),
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            logger.warning(f"LLM request timed out after {self.timeout}s")
            raise LLMRequestError("LLM request timed out") from e
        except Exception as e:
            logger.warning(f"LLM request failed: {e}")
            raise LLMRequestError(str(e)) from e

        if not response.choices:
            raise LLMRequestError("LLM returned no choices")

        content = response.choices[0].message.content
        if not content or not content.strip():
            raise LLMRequestError("LLM returned empty content")

        return content.strip()


_llm_client: Optional[LLMClient] = None


def get_llm_client() -> LLMClient:
    global _llm_client
    if _llm_client is None:
        _llm_client = LLMClient()
    return _llm_client
