"""
Artifact: paper_analyzer/core/config.py
Purpose: Loads environment configuration into a typed settings object validated once at startup.
Author: Paper Analyzer Team
Created: 2026-10-16
Revised:
- 2026-10-16: Added typed settings loaded and validated at startup. (Paper Analyzer Team)
Preconditions:
- Environment variables may be present in process env and optional .env file.
Inputs:
- Acceptable: String environment variables such as OPENAI_API_KEY, CHUNK_SIZE, FILE_FAILURE_POLICY.
- Unacceptable: Non-numeric values for numeric options, unknown provider or policy names.
Postconditions:
- Dotenv variables are loaded and a validated `Settings` instance is returned.
Returns:
- `Settings` object via `load_settings()`.
Errors/Exceptions:
- ConfigurationError for a missing provider credential or invalid option values.
"""

import os
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError, field_validator, model_validator

from .errors import ConfigurationError


load_dotenv()

PROVIDER_KEY_ENV = {
    "openai": "OPENAI_API_KEY",
    "nvidia": "NVIDIA_API_KEY",
}

DEFAULT_MODELS = {
    "openai": "gpt-4o-mini",
    "nvidia": "nvidia/llama-3.3-nemotron-super-49b-v1.5",
}


class Settings(BaseModel):
    """Application-level configuration values."""

    app_title: str = "Research Paper Analyzer"

    llm_provider: Literal["openai", "nvidia"] = "openai"
    llm_model: str = ""
    llm_api_key: str
    llm_timeout_seconds: Optional[float] = None

    chunk_size: int = 5000
    chunk_overlap: int = 500
    max_chunks_per_file: int = 5
    summary_temperature: float = 0.3
    summary_max_tokens: int = 500

    min_hypotheses: int = 1
    max_hypotheses: int = 3
    synthesis_word_limit: int = 500

    file_failure_policy: Literal["abort", "skip"] = "abort"
    file_concurrency: int = 1
    staging_root: Optional[str] = None

    log_level: str = "INFO"

    @field_validator("llm_api_key")
    @classmethod
    def _require_api_key(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("LLM API key is empty")
        return value.strip()

    @field_validator("chunk_size", "max_chunks_per_file", "summary_max_tokens", "file_concurrency")
    @classmethod
    def _require_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be at least 1")
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.strip().upper() or "INFO"

    @model_validator(mode="after")
    def _check_ranges(self) -> "Settings":
        if not 0 <= self.chunk_overlap < self.chunk_size:
            raise ValueError("chunk_overlap must be >= 0 and smaller than chunk_size")
        if not 1 <= self.min_hypotheses <= self.max_hypotheses:
            raise ValueError("hypothesis range must satisfy 1 <= min <= max")
        if not self.llm_model:
            self.llm_model = DEFAULT_MODELS[self.llm_provider]
        return self


def load_settings(environ: Optional[dict] = None) -> Settings:
    """
    Build and validate settings from the environment.

    Called once from the application lifespan; a missing credential aborts startup
    instead of failing individual requests.
    """
    env = os.environ if environ is None else environ

    def get(name: str) -> Optional[str]:
        raw = env.get(name)
        if raw is None or not str(raw).strip():
            return None
        return str(raw).strip()

    provider = (get("LLM_PROVIDER") or "openai").lower()
    key_env = PROVIDER_KEY_ENV.get(provider)
    if key_env is None:
        raise ConfigurationError(
            f"Unsupported LLM_PROVIDER {provider!r}; expected one of {sorted(PROVIDER_KEY_ENV)}"
        )

    api_key = get(key_env)
    if not api_key:
        raise ConfigurationError(f"{key_env} not found in environment variables")

    options = {
        "llm_provider": provider,
        "llm_api_key": api_key,
        "llm_model": get("LLM_MODEL"),
        "llm_timeout_seconds": get("LLM_TIMEOUT_SECONDS"),
        "chunk_size": get("CHUNK_SIZE"),
        "chunk_overlap": get("CHUNK_OVERLAP"),
        "max_chunks_per_file": get("MAX_CHUNKS_PER_FILE"),
        "summary_temperature": get("SUMMARY_TEMPERATURE"),
        "summary_max_tokens": get("SUMMARY_MAX_TOKENS"),
        "min_hypotheses": get("MIN_HYPOTHESES"),
        "max_hypotheses": get("MAX_HYPOTHESES"),
        "synthesis_word_limit": get("SYNTHESIS_WORD_LIMIT"),
        "file_failure_policy": (get("FILE_FAILURE_POLICY") or "").lower() or None,
        "file_concurrency": get("FILE_CONCURRENCY"),
        "staging_root": get("STAGING_ROOT"),
        "log_level": get("LOG_LEVEL"),
    }

    try:
        return Settings(**{k: v for k, v in options.items() if v is not None})
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
