"""
LLM provider factory.

Creates the appropriate LLM provider based on configuration.
"""

from __future__ import annotations

from doctrans.config import Settings
from doctrans.errors import ProviderConfigError
from doctrans.llm.base import LLMProvider
from doctrans.llm.fallback import LogCallback, ModelFallbackProvider
from doctrans.models import ProviderKind


def create_llm_provider(
    kind: ProviderKind | str,
    settings: Settings,
    *,
    log_callback: LogCallback | None = None,
) -> LLMProvider:
    """
    Create an LLM provider instance.

    Args:
        kind: Backend kind (openai, anthropic or openrouter).
        settings: Loaded settings holding credentials and model ids.
        log_callback: Optional callback for the Anthropic model-fallback chain.

    Returns:
        LLMProvider instance. The Anthropic backend is wrapped in a
        ModelFallbackProvider over its configured candidate models.

    Raises:
        ProviderConfigError: If the backend's API key is missing.
        ValueError: If ``kind`` is not an LLM backend.
    """
    kind = ProviderKind(kind) if isinstance(kind, str) else kind
    providers = settings.providers
    timeout = settings.translation.request_timeout_seconds

    if kind == ProviderKind.OPENROUTER:
        if not providers.openrouter.api_key:
            raise ProviderConfigError("openrouter", "OPENROUTER_API_KEY is not configured")

        from doctrans.llm.openrouter import OpenRouterProvider

        return OpenRouterProvider(
            api_key=providers.openrouter.api_key,
            model=providers.openrouter.model,
            base_url=providers.openrouter.base_url,
            timeout=timeout,
        )

    elif kind == ProviderKind.OPENAI:
        if not providers.openai.api_key:
            raise ProviderConfigError("openai", "OPENAI_API_KEY is not configured")

        from doctrans.llm.openrouter import OpenAIProvider

        return OpenAIProvider(
            api_key=providers.openai.api_key,
            model=providers.openai.model,
            base_url=providers.openai.base_url,
            timeout=timeout,
        )

    elif kind == ProviderKind.ANTHROPIC:
        if not providers.anthropic.api_key:
            raise ProviderConfigError("anthropic", "ANTHROPIC_API_KEY is not configured")

        from doctrans.llm.anthropic_api import AnthropicProvider

        backend = AnthropicProvider(
            api_key=providers.anthropic.api_key,
            model=providers.anthropic.model,
            timeout=timeout,
        )
        return ModelFallbackProvider(
            backend,
            [providers.anthropic.model, *providers.anthropic.fallback_models],
            log_callback=log_callback,
        )

    else:
        raise ValueError(f"{kind.value} is not an LLM provider")
