"""
OpenAI API client for structured generation.

Usage:
    client = SuggestionModelClient(AIConfig(api_key="sk-..."))
    response = await client.generate_structured(prompt, SuggestionResponse)
"""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from typing import Optional, Type, TypeVar

from openai import AsyncOpenAI
from pydantic import BaseModel

from beautyshelf.core.errors import NeedsCredential

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


@dataclass
class AIConfig:
    """Configuration for the model client."""

    api_key: Optional[str] = None
    model: str = "gpt-4o-mini"
    timeout_seconds: float = 120.0
    temperature: float = 0.7
    max_tokens: int = 2048


class SuggestionModelClient:
    """
    Async wrapper around chat completions that asks for a JSON answer matching
    a pydantic model and parses it. Provider errors propagate to the caller.
    """

    def __init__(self, config: Optional[AIConfig] = None):
        self.config = config or AIConfig()
        api_key = self.config.api_key or os.getenv("OPENAI_API_KEY")
        if not api_key:
            raise NeedsCredential("OpenAI API key not found. Set OPENAI_API_KEY environment variable.")
        self._client = AsyncOpenAI(
            api_key=api_key,
            timeout=self.config.timeout_seconds,
        )

    async def generate_structured(self, prompt: str, schema: Type[M], system: Optional[str] = None) -> M:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        response = await self._client.chat.completions.create(
            model=self.config.model,
            messages=messages,
            temperature=self.config.temperature,
            max_tokens=self.config.max_tokens,
            response_format={
                "type": "json_schema",
                "json_schema": {"name": schema.__name__, "schema": schema.model_json_schema()},
            },
        )
        content = response.choices[0].message.content or ""
        logger.debug("Model returned %d characters", len(content))
        return schema.model_validate_json(content)

    async def close(self) -> None:
        await self._client.close()
