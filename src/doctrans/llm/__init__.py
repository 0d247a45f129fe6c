"""
LLM provider abstraction layer.

Supports multiple LLM backends:
- OpenRouter (default): any routed model by id
- OpenAI: direct chat completions
- Anthropic: direct Messages API behind a model-fallback chain
"""

from doctrans.llm.base import LLMProvider, LLMResponse, is_model_not_found, map_provider_error
from doctrans.llm.factory import create_llm_provider
from doctrans.llm.fallback import ModelFallbackProvider

__all__ = [
    "LLMProvider",
    "LLMResponse",
    "ModelFallbackProvider",
    "create_llm_provider",
    "is_model_not_found",
    "map_provider_error",
]
