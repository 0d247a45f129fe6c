"""
Configuration management for doctrans.

Handles loading configuration from YAML files and environment variables,
and sets up logging from the loaded configuration.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from rich.logging import RichHandler

from doctrans.models import ProviderKind

# Load .env file if present (before Settings initialization)
load_dotenv()


class GoogleConfig(BaseModel):
    """Google Cloud Translation / Vision credentials."""

    api_key: str = Field(default="")
    project_id: str = Field(default="")
    # OAuth bearer token for Translation v3 (glossary support)
    access_token: str = Field(default="")
    location: str = Field(default="global")
    glossaries: dict[str, str] = Field(
        default_factory=lambda: {
            "certificate": "certificate-official-terms",
            "legal": "legal-terms",
            "medical": "medical-terms",
            "technical": "technical-terms",
            "general": "general-terms",
        }
    )
    glossary_ignore_case: bool = Field(default=True)


class OpenAIConfig(BaseModel):
    """Direct OpenAI backend."""

    api_key: str = Field(default="")
    model: str = Field(default="gpt-4o")
    base_url: str | None = Field(default=None)


class AnthropicConfig(BaseModel):
    """Direct Anthropic backend with an ordered model-fallback list."""

    api_key: str = Field(default="")
    model: str = Field(default="claude-sonnet-4-5")
    fallback_models: list[str] = Field(
        default_factory=lambda: [
            "claude-sonnet-4-5",
            "claude-3-7-sonnet-latest",
            "claude-3-5-sonnet-latest",
            "claude-3-5-haiku-latest",
        ]
    )


class OpenRouterConfig(BaseModel):
    """OpenRouter LLM router backend."""

    api_key: str = Field(default="")
    model: str = Field(default="openai/gpt-5.2")
    base_url: str = Field(default="https://openrouter.ai/api/v1")


class ProvidersConfig(BaseModel):
    """Credentials and model overrides per backend."""

    google: GoogleConfig = Field(default_factory=GoogleConfig)
    openai: OpenAIConfig = Field(default_factory=OpenAIConfig)
    anthropic: AnthropicConfig = Field(default_factory=AnthropicConfig)
    openrouter: OpenRouterConfig = Field(default_factory=OpenRouterConfig)


class TranslationConfig(BaseModel):
    """Configuration for text translation."""

    default_provider: ProviderKind = Field(default=ProviderKind.OPENROUTER)
    max_chunk_chars: int = Field(default=4000, ge=100, le=100_000)
    request_timeout_ms: int = Field(default=300_000, ge=1_000, le=3_600_000)
    temperature: float = Field(default=0.2, ge=0.0, le=2.0)
    max_tokens: int = Field(default=8192, ge=256, le=64_000)

    @property
    def request_timeout_seconds(self) -> float:
        return self.request_timeout_ms / 1000


class VisionConfig(BaseModel):
    """Configuration for image-to-translation calls."""

    disable_refine: bool = Field(default=False)
    image_detail: str = Field(default="high")

    @field_validator("image_detail")
    @classmethod
    def check_detail(cls, v: str) -> str:
        """Only the detail hints the chat API accepts."""
        v = v.lower()
        if v not in {"auto", "low", "high"}:
            raise ValueError(f"image_detail must be auto, low or high, got {v!r}")
        return v


class OCRConfig(BaseModel):
    """Configuration for PDF extraction and OCR."""

    min_page_chars: int = Field(default=5, ge=0, le=1000)
    max_scanned_pages: int = Field(default=50, ge=1, le=1000)
    render_scale: float = Field(default=2.0, ge=0.5, le=6.0)


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = Field(default="INFO")
    file: Path | None = Field(default=None)
    format: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    max_file_size_mb: int = Field(default=10, ge=1, le=100)
    backup_count: int = Field(default=5, ge=1, le=20)


class Settings(BaseSettings):
    """Main settings class that combines all configurations."""

    model_config = SettingsConfigDict(
        env_prefix="DOCTRANS_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    providers: ProvidersConfig = Field(default_factory=ProvidersConfig)
    translation: TranslationConfig = Field(default_factory=TranslationConfig)
    vision: VisionConfig = Field(default_factory=VisionConfig)
    ocr: OCRConfig = Field(default_factory=OCRConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def __init__(self, **data: Any) -> None:
        """Initialize with environment variable fallbacks for API keys."""
        super().__init__(**data)
        providers = self.providers
        if not providers.google.api_key:
            providers.google.api_key = os.getenv("GOOGLE_CLOUD_API_KEY", "")
        if not providers.google.project_id:
            providers.google.project_id = os.getenv("GOOGLE_CLOUD_PROJECT_ID", "")
        if not providers.google.access_token:
            providers.google.access_token = os.getenv("GOOGLE_CLOUD_ACCESS_TOKEN", "")
        if not providers.openai.api_key:
            providers.openai.api_key = os.getenv("OPENAI_API_KEY", "")
        if not providers.anthropic.api_key:
            providers.anthropic.api_key = os.getenv("ANTHROPIC_API_KEY", "")
        if not providers.openrouter.api_key:
            providers.openrouter.api_key = os.getenv("OPENROUTER_API_KEY", "")

    @classmethod
    def from_yaml(cls, path: Path | str) -> Settings:
        """Load settings from a YAML file, with environment variable overrides."""
        path = Path(path)
        if not path.exists():
            # Return defaults if file doesn't exist
            return cls()

        with open(path, encoding="utf-8") as f:
            yaml_config = yaml.safe_load(f) or {}

        # Process environment variable substitutions in YAML values
        yaml_config = _substitute_env_vars(yaml_config)

        return cls(**yaml_config)


def _substitute_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively substitute ${ENV_VAR} patterns in config values."""
    result = {}
    for key, value in config.items():
        if isinstance(value, dict):
            result[key] = _substitute_env_vars(value)
        elif isinstance(value, str) and value.startswith("${") and value.endswith("}"):
            env_var = value[2:-1]
            result[key] = os.getenv(env_var, "")
        elif isinstance(value, list):
            result[key] = [
                _substitute_env_vars(item) if isinstance(item, dict) else item for item in value
            ]
        else:
            result[key] = value
    return result


def load_config(path: Path | str | None = None) -> Settings:
    """
    Load configuration from YAML file or return defaults.

    Args:
        path: Path to YAML config file. If None, looks for doctrans.yaml / config.yaml
            in the current directory.

    Returns:
        Settings instance with merged YAML and environment configurations.
    """
    if path is None:
        for candidate in (Path("doctrans.yaml"), Path("doctrans.yml"), Path("config.yaml")):
            if candidate.exists():
                path = candidate
                break

    if path is not None:
        return Settings.from_yaml(path)

    return Settings()


def setup_logging(config: LoggingConfig) -> None:
    """
    Configure the ``doctrans`` logger hierarchy.

    Console output goes through rich; a rotating log file is added when configured.
    """
    root = logging.getLogger("doctrans")
    root.setLevel(config.level.upper())
    root.handlers.clear()

    console = RichHandler(rich_tracebacks=True, show_path=False)
    console.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root.addHandler(console)

    if config.file is not None:
        log_file = Path(config.file).expanduser()
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=config.max_file_size_mb * 1024 * 1024,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(logging.Formatter(config.format))
        root.addHandler(file_handler)

    root.propagate = False


def create_default_config(path: Path | str = "doctrans.yaml") -> None:
    """Create a default configuration file."""
    default_config = """# doctrans configuration
providers:
  google:
    # v2 (API key) is used unless project_id and access_token are both set (v3 + glossaries)
    api_key: "${GOOGLE_CLOUD_API_KEY}"
    project_id: "${GOOGLE_CLOUD_PROJECT_ID}"
    access_token: "${GOOGLE_CLOUD_ACCESS_TOKEN}"
    glossaries:
      certificate: "certificate-official-terms"
      legal: "legal-terms"
      medical: "medical-terms"
      technical: "technical-terms"
      general: "general-terms"
  openai:
    api_key: "${OPENAI_API_KEY}"
    model: "gpt-4o"
  anthropic:
    api_key: "${ANTHROPIC_API_KEY}"
    # Primary model; fallback_models are tried in order when a model is not found
    model: "claude-sonnet-4-5"
  openrouter:
    api_key: "${OPENROUTER_API_KEY}"
    model: "openai/gpt-5.2"

translation:
  # google, openai, anthropic or openrouter
  default_provider: "openrouter"
  # Maximum characters sent per request
  max_chunk_chars: 4000
  # Per-call timeout for every external API call (milliseconds)
  request_timeout_ms: 300000

vision:
  # Skip the second table-alignment pass after image translation
  disable_refine: false
  image_detail: "high"

ocr:
  min_page_chars: 5
  max_scanned_pages: 50
  render_scale: 2.0

logging:
  level: "INFO"
  # file: "./logs/doctrans.log"
"""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(default_config)
