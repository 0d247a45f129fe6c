"""
Model-fallback LLM provider wrapper.

Walks an ordered list of candidate model ids on a single backend. Only a
"model not found" error advances the chain; any other error aborts immediately.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from typing import Any

from doctrans.errors import ModelFallbackExhaustedError
from doctrans.llm.base import LLMProvider, LLMResponse, is_model_not_found

logger = logging.getLogger(__name__)

LogCallback = Callable[[str, str, dict[str, Any]], None]


def build_candidates(primary: str | None, fallbacks: Iterable[str]) -> list[str]:
    """Primary first, then fallbacks, de-duplicated with order kept."""
    candidates: list[str] = []
    for model in [primary, *fallbacks]:
        if model and model not in candidates:
            candidates.append(model)
    return candidates


class ModelFallbackProvider(LLMProvider):
    """
    LLM provider wrapper with an ordered model-fallback chain.

    Attempts each candidate model on the wrapped provider in turn. If a candidate is
    reported as not found, the next one is tried; every other failure is re-raised
    without trying further models.
    """

    def __init__(
        self,
        provider: LLMProvider,
        candidates: Iterable[str],
        log_callback: LogCallback | None = None,
    ):
        """
        Initialize the fallback chain.

        Args:
            provider: Backend the candidate models are requested from.
            candidates: Ordered model ids; duplicates are dropped.
            log_callback: Optional callback for logging model switches.
                         Should accept (level: str, message: str, context: dict).
        """
        self._provider = provider
        self._candidates = build_candidates(None, candidates)
        if not self._candidates:
            self._candidates = [provider.model]
        self._log_callback = log_callback

    @property
    def name(self) -> str:
        """Provider name."""
        return self._provider.name

    @property
    def model(self) -> str:
        """First candidate model."""
        return self._candidates[0]

    @property
    def candidates(self) -> list[str]:
        return list(self._candidates)

    def _log(self, level: str, message: str, context: dict[str, Any] | None = None) -> None:
        """Log via the module logger and the callback if available."""
        context = context or {}
        logger.log(logging.getLevelName(level), message, extra={"fallback": context})
        if self._log_callback:
            self._log_callback(level, message, context)

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
        Generate a completion, advancing through candidates on model-not-found.

        Args:
            messages: List of message dicts with 'role' and 'content' keys.
            temperature: Sampling temperature (0.0 to 2.0).
            max_tokens: Maximum tokens to generate.
            model: Optional override placed ahead of the configured candidates.
            **kwargs: Additional provider-specific options.

        Returns:
            LLMResponse from the first candidate that succeeds.

        Raises:
            ModelFallbackExhaustedError: If every candidate was not found.
            DocTransError: Any other failure, from the candidate that raised it.
        """
        candidates = build_candidates(model, self._candidates)
        attempted: list[str] = []
        last_error: Exception | None = None
        start_time = time.perf_counter()

        for candidate in candidates:
            attempted.append(candidate)
            self._log(
                "DEBUG",
                f"Attempting {self.name} request with model {candidate}",
                {"model": candidate, "attempt": len(attempted)},
            )
            try:
                response = await self._provider.complete(
                    messages,
                    temperature=temperature,
                    max_tokens=max_tokens,
                    model=candidate,
                    **kwargs,
                )
            except Exception as e:
                if not is_model_not_found(e):
                    raise
                last_error = e
                self._log(
                    "WARNING",
                    f"Model {candidate} not found on {self.name}, trying next candidate",
                    {"model": candidate, "error": str(e), "error_type": type(e).__name__},
                )
                continue

            response.metadata = response.metadata or {}
            response.metadata["attempted_models"] = list(attempted)
            if len(attempted) > 1:
                elapsed_ms = (time.perf_counter() - start_time) * 1000
                self._log(
                    "INFO",
                    f"Fallback model {candidate} succeeded after {elapsed_ms:.0f}ms",
                    {"model": candidate, "attempted_models": list(attempted)},
                )
            return response

        self._log(
            "ERROR",
            f"No available model on {self.name}",
            {"attempted_models": attempted, "last_error": str(last_error)},
        )
        raise ModelFallbackExhaustedError(self.name, attempted, last_error)
