"""
Anthropic LLM provider.

Talks to the Messages API directly. The system prompt travels separately from the
conversation, so chat-shaped messages are split before sending.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

from anthropic import AsyncAnthropic

from doctrans.llm.base import LLMProvider, LLMResponse, map_provider_error

logger = logging.getLogger(__name__)


def _split_system(messages: list[dict[str, Any]]) -> tuple[str, list[dict[str, Any]]]:
    system_parts: list[str] = []
    conversation: list[dict[str, Any]] = []
    for message in messages:
        if message.get("role") == "system":
            system_parts.append(str(message.get("content", "")))
        else:
            conversation.append({"role": message["role"], "content": message["content"]})
    return "\n\n".join(system_parts), conversation


class AnthropicProvider(LLMProvider):
    """Anthropic Claude provider."""

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-5",
        timeout: float = 300.0,
        client: AsyncAnthropic | None = None,
    ):
        self._model_name = model
        self._timeout = timeout
        self._client = client or AsyncAnthropic(api_key=api_key, timeout=timeout, max_retries=0)

    @property
    def name(self) -> str:
        return "anthropic"

    @property
    def model(self) -> str:
        return self._model_name

    async def complete(
        self,
        messages: list[dict[str, Any]],
        *,
        temperature: float = 0.2,
        max_tokens: int = 8192,
        model: str | None = None,
        **kwargs: Any,
    ) -> LLMResponse:
        """Generate a completion via the Messages API."""
        model_name = model or self._model_name
        system, conversation = _split_system(messages)
        start_time = time.perf_counter()

        request: dict[str, Any] = {
            "model": model_name,
            "messages": conversation,
            "max_tokens": max_tokens,
            "temperature": temperature,
            **kwargs,
        }
        if system:
            request["system"] = system

        try:
            response = await asyncio.wait_for(
                self._client.messages.create(**request),
                timeout=self._timeout,
            )
        except Exception as e:
            error = map_provider_error(self.name, e, model=model_name, timeout=self._timeout)
            logger.debug(
                "anthropic request failed: %s",
                error.message,
                extra={"provider": self.name, "model": model_name, "category": error.category},
            )
            raise error from e

        latency_ms = (time.perf_counter() - start_time) * 1000
        content = "".join(
            getattr(block, "text", "") for block in response.content if block.type == "text"
        )
        usage = response.usage

        return LLMResponse(
            content=content.strip(),
            input_tokens=usage.input_tokens if usage else 0,
            output_tokens=usage.output_tokens if usage else 0,
            model=model_name,
            latency_ms=latency_ms,
            metadata={"provider": self.name, "stop_reason": response.stop_reason},
        )
