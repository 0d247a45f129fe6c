"""
Base classes for LLM providers.

Defines the abstract interface that all LLM providers must implement, and the
mapping of SDK exceptions onto the doctrans error hierarchy.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import anthropic
import httpx
import openai

from doctrans.errors import (
    DocTransError,
    ProviderConfigError,
    ProviderModelNotFoundError,
    ProviderRequestError,
    ProviderTimeoutError,
    ProviderUnavailableError,
)

# Error-body markers both vendors use for unknown model ids
_NOT_FOUND_MARKERS = ("not_found_error", "model_not_found", "not_found")


@dataclass
class LLMResponse:
    """Response from an LLM provider."""

    content: str
    input_tokens: int = 0
    output_tokens: int = 0
    model: str = ""
    latency_ms: float = 0.0
    metadata: dict[str, Any] = field(default_factory=dict)


class LLMProvider(ABC):
    """
    Abstract base class for LLM providers.

    All LLM providers (OpenAI, Anthropic, OpenRouter, fallback chains) implement this
    interface. Messages use the OpenAI chat shape; ``content`` may be a string or a
    list of content parts for multimodal requests.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name for logging and identification."""
        ...

    @property
    @abstractmethod
    def model(self) -> str:
        """Current model name."""
        ...

    @abstractmethod
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
        Generate a completion from the LLM.

        Args:
            messages: List of message dicts with 'role' and 'content' keys.
            temperature: Sampling temperature (0.0 to 2.0).
            max_tokens: Maximum tokens to generate.
            model: Optional per-call model override.
            **kwargs: Additional provider-specific options.

        Returns:
            LLMResponse with the generated content and metadata.

        Raises:
            DocTransError: Provider failures mapped by ``map_provider_error``.
        """
        ...

    async def chat(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float = 0.2,
        max_tokens: int = 8192,
        model: str | None = None,
        **kwargs: Any,
    ) -> LLMResponse:
        """
        Convenience method for simple system + user prompt interactions.

        Args:
            system_prompt: System message content.
            user_prompt: User message content.
            temperature: Sampling temperature.
            max_tokens: Maximum tokens to generate.
            model: Optional per-call model override.
            **kwargs: Additional options.

        Returns:
            LLMResponse with the generated content.
        """
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
        return await self.complete(
            messages,
            temperature=temperature,
            max_tokens=max_tokens,
            model=model,
            **kwargs,
        )


def _status_code(exc: BaseException) -> int | None:
    status = getattr(exc, "status_code", None)
    if status is None and isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
    return status if isinstance(status, int) else None


def _error_text(exc: BaseException) -> str:
    parts = [str(exc)]
    body = getattr(exc, "body", None)
    if body is not None:
        parts.append(str(body))
    if isinstance(exc, httpx.HTTPStatusError):
        parts.append(exc.response.text)
    return " ".join(parts).lower()


def is_model_not_found(exc: BaseException) -> bool:
    """True for a 404 whose body names a missing model."""
    if isinstance(exc, ProviderModelNotFoundError):
        return True
    if _status_code(exc) != 404:
        return False
    text = _error_text(exc)
    return any(marker in text for marker in _NOT_FOUND_MARKERS)


def map_provider_error(
    provider: str,
    exc: BaseException,
    *,
    model: str = "",
    timeout: float | None = None,
) -> DocTransError:
    """
    Map an SDK / transport exception onto the doctrans error hierarchy.

    Args:
        provider: Provider name for the error context.
        exc: Original exception.
        model: Model id the request was made with.
        timeout: Timeout in seconds the request was bounded by.

    Returns:
        A DocTransError subclass; already-mapped errors are returned unchanged.
    """
    if isinstance(exc, DocTransError):
        return exc

    if isinstance(
        exc,
        (
            asyncio.TimeoutError,
            TimeoutError,
            openai.APITimeoutError,
            anthropic.APITimeoutError,
            httpx.TimeoutException,
        ),
    ):
        return ProviderTimeoutError(provider, timeout)

    if is_model_not_found(exc):
        return ProviderModelNotFoundError(provider, model, str(exc))

    status = _status_code(exc)
    if status in (401, 403):
        return ProviderConfigError(provider, f"authentication rejected ({status}): {exc}")
    if status is not None and status >= 500:
        return ProviderUnavailableError(provider, str(exc), status_code=status)
    if isinstance(
        exc, (openai.APIConnectionError, anthropic.APIConnectionError, httpx.TransportError)
    ):
        return ProviderUnavailableError(provider, f"connection failed: {exc}")

    return ProviderRequestError(provider, str(exc) or type(exc).__name__, status_code=status)
