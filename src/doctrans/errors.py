"""
Exception hierarchy for doctrans.

Every error carries a category so callers can tell timeouts and unavailable models
apart from generic failures when informing the end user.
"""

from __future__ import annotations

from typing import Any


class DocTransError(Exception):
    """Base exception for all doctrans errors."""

    category = "failure"
    default_user_message = "Translation failed. Please try again or contact support."

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        user_message: str | None = None,
    ):
        """
        Initialize error.

        Args:
            message: Technical error message.
            details: Additional structured context.
            user_message: Optional override of the user-facing explanation.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self._user_message = user_message

    @property
    def user_message(self) -> str:
        """Short explanation suitable for showing to an end user."""
        return self._user_message or self.default_user_message

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for JSON serialization."""
        return {
            "error_type": self.__class__.__name__,
            "category": self.category,
            "message": self.message,
            "user_message": self.user_message,
            "details": self.details,
        }


class UnsupportedFileTypeError(DocTransError):
    """Raised by the dispatcher for MIME types without an extraction strategy."""

    category = "unsupported_file"
    default_user_message = "This file type is not supported for translation."

    def __init__(self, mime_type: str | None):
        super().__init__(
            f"Unsupported file type: {mime_type or 'unknown'}",
            details={"mime_type": mime_type},
        )
        self.mime_type = mime_type


class ExtractionError(DocTransError):
    """Raised when no text can be recovered from a document."""

    category = "extraction"
    default_user_message = "No text could be extracted from this document."


class OCRError(DocTransError):
    """Raised when the OCR backend fails."""

    category = "ocr"
    default_user_message = "Text recognition (OCR) failed for this image."


class ProviderConfigError(DocTransError):
    """Raised when a backend is missing credentials or configuration."""

    category = "configuration"
    default_user_message = (
        "The selected translation provider is not configured. Choose another provider."
    )

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}", details={"provider": provider})
        self.provider = provider


class ProviderModelNotFoundError(DocTransError):
    """Raised when a backend reports that the requested model does not exist."""

    category = "model_unavailable"
    default_user_message = (
        "The selected model is unavailable. Try a different model or provider."
    )

    def __init__(self, provider: str, model: str, message: str = ""):
        super().__init__(
            f"{provider}: model '{model}' not found{': ' + message if message else ''}",
            details={"provider": provider, "model": model},
        )
        self.provider = provider
        self.model = model


class ModelFallbackExhaustedError(ProviderModelNotFoundError):
    """Raised when every candidate in a model-fallback chain was rejected."""

    def __init__(self, provider: str, attempted: list[str], last_error: Exception | None):
        DocTransError.__init__(
            self,
            f"{provider}: no available model among {', '.join(attempted)}"
            + (f" (last error: {last_error})" if last_error else ""),
            details={"provider": provider, "attempted_models": list(attempted)},
        )
        self.provider = provider
        self.model = attempted[-1] if attempted else ""
        self.attempted = list(attempted)
        self.last_error = last_error


class ProviderTimeoutError(DocTransError):
    """Raised when an external call exceeds its timeout."""

    category = "timeout"
    default_user_message = (
        "The translation provider took too long to respond. "
        "Try a faster model or increase the timeout."
    )

    def __init__(self, provider: str, timeout_seconds: float | None = None, message: str = ""):
        super().__init__(
            message or f"{provider}: request timed out after {timeout_seconds}s",
            details={"provider": provider, "timeout_seconds": timeout_seconds},
        )
        self.provider = provider
        self.timeout_seconds = timeout_seconds


class ProviderUnavailableError(DocTransError):
    """Raised when a backend cannot be reached or returns a server error."""

    category = "model_unavailable"
    default_user_message = (
        "The translation provider is currently unavailable. Try again later or pick another model."
    )

    def __init__(self, provider: str, message: str, status_code: int | None = None):
        super().__init__(
            f"{provider}: {message}",
            details={"provider": provider, "status_code": status_code},
        )
        self.provider = provider
        self.status_code = status_code


class ProviderRequestError(DocTransError):
    """Raised for any other backend failure (bad request, rate limit, auth, ...)."""

    category = "provider"

    def __init__(self, provider: str, message: str, status_code: int | None = None):
        super().__init__(
            f"{provider}: {message}",
            details={"provider": provider, "status_code": status_code},
        )
        self.provider = provider
        self.status_code = status_code


class MalformedModelOutputError(DocTransError):
    """Raised when a vision response is not the expected JSON object."""

    category = "provider"


class BlobFetchError(DocTransError):
    """Raised when the source file cannot be downloaded."""

    category = "fetch"
    default_user_message = "The source file could not be downloaded."
