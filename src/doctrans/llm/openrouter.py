"""
OpenAI and OpenRouter LLM providers.

Both speak the OpenAI chat-completions API; OpenRouter routes to multiple LLM
vendors by model id. Every request is bounded by an explicit timeout since some routed models
are slow; there are no automatic retries at this layer.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

from openai import AsyncOpenAI

from doctrans.llm.base import LLMProvider, LLMResponse, map_provider_error

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    """Chat-completions provider for any OpenAI-compatible endpoint."""

    provider_name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str | None = None,
        timeout: float = 300.0,
        default_headers: dict[str, str] | None = None,
        client: AsyncOpenAI | None = None,
    ):
        """
        Initialize the provider.

        Args:
            api_key: API key for the endpoint.
            model: Default model id.
            base_url: API base URL (None for api.openai.com).
            timeout: Per-request timeout in seconds.
            default_headers: Extra headers sent with every request.
            client: Pre-built client, mainly for tests.
        """
        self._model_name = model
        self._timeout = timeout
        self._client = client or AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=0,
            default_headers=default_headers,
        )

    @property
    def name(self) -> str:
        """Provider name."""
        return self.provider_name

    @property
    def model(self) -> str:
        """Current model name."""
        return self._model_name

    @property
    def timeout(self) -> float:
        return self._timeout

    async def complete(
        self,
        messages: list[dict[str, Any]],
        *,
        temperature: float = 0.2,
        max_tokens: int = 8192,
        model: str | None = None,
        **kwargs: Any,
    ) -> LLMResponse:
        """
        Generate a chat completion.

        Args:
            messages: List of message dicts.
            temperature: Sampling temperature.
            max_tokens: Maximum output tokens.
            model: Model id override for this call.
            **kwargs: Additional options passed to the API.

        Returns:
            LLMResponse with content and usage stats.
        """
        model_name = model or self._model_name
        start_time = time.perf_counter()

        try:
            response = await asyncio.wait_for(
                self._client.chat.completions.create(
                    model=model_name,
                    messages=messages,  # type: ignore[arg-type]
                    temperature=temperature,
                    max_tokens=max_tokens,
                    **kwargs,
                ),
                timeout=self._timeout,
            )
        except Exception as e:
            error = map_provider_error(self.name, e, model=model_name, timeout=self._timeout)
            logger.warning(
                "%s request failed: %s",
                self.name,
                error.message,
                extra={"provider": self.name, "model": model_name, "category": error.category},
            )
            raise error from e

        latency_ms = (time.perf_counter() - start_time) * 1000
        choice = response.choices[0] if response.choices else None
        content = (choice.message.content if choice else None) or ""
        usage = response.usage

        return LLMResponse(
            content=content.strip(),
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
            model=model_name,
            latency_ms=latency_ms,
            metadata={
                "provider": self.name,
                "finish_reason": choice.finish_reason if choice else None,
            },
        )


class OpenRouterProvider(OpenAIProvider):
    """
    OpenRouter LLM provider.

    Uses OpenRouter's unified API to access OpenAI, Anthropic, Google and other models.
    Requires an OpenRouter API key and charges per token.
    """

    provider_name = "openrouter"

    DEFAULT_MODEL = "openai/gpt-5.2"

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: str = "https://openrouter.ai/api/v1",
        timeout: float = 300.0,
        client: AsyncOpenAI | None = None,
    ):
        super().__init__(
            api_key=api_key,
            model=model or self.DEFAULT_MODEL,
            base_url=base_url,
            timeout=timeout,
            default_headers={"X-Title": "doctrans"},
            client=client,
        )
