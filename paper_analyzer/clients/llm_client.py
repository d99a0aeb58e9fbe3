"""
Artifact: paper_analyzer/clients/llm_client.py
Purpose: Wraps external chat model construction for the configured LangChain provider.
Author: Paper Analyzer Team
Created: 2026-10-16
Revised:
- 2026-10-16: Added OpenAI and NVIDIA chat model factories. (Paper Analyzer Team)
- 2026-10-16: Warn when a timeout is configured for the NVIDIA provider. (Paper Analyzer Team)
Preconditions:
- `langchain_openai` or `langchain_nvidia_ai_endpoints` is installed for the selected provider.
Inputs:
- Acceptable: Validated `Settings` carrying provider, model, key, temperature and token limits.
- Unacceptable: Unsupported provider identifiers.
Postconditions:
- Returns a configured chat model instance for downstream orchestration.
Returns:
- `ChatOpenAI` or `ChatNVIDIA` object.
Errors/Exceptions:
- ConfigurationError for an unknown provider; provider client initialization errors propagate.

`LLM_TIMEOUT_SECONDS` is applied to the OpenAI client only; the NVIDIA client keeps its own
default and a warning is logged when a timeout is configured for it.
"""

from langchain_core.language_models.chat_models import BaseChatModel

from ..core.config import Settings
from ..core.errors import ConfigurationError
from ..core.logging import get_logger

logger = get_logger("paper_analyzer.llm")


def build_openai_chat_client(settings: Settings) -> BaseChatModel:
    from langchain_openai import ChatOpenAI

    return ChatOpenAI(
        model=settings.llm_model,
        api_key=settings.llm_api_key,
        temperature=settings.summary_temperature,
        max_tokens=settings.summary_max_tokens,
        timeout=settings.llm_timeout_seconds,
        max_retries=0,
    )


def build_nvidia_chat_client(settings: Settings) -> BaseChatModel:
    from langchain_nvidia_ai_endpoints import ChatNVIDIA

    if settings.llm_timeout_seconds is not None:
        logger.warning(
            "LLM_TIMEOUT_SECONDS=%s is not applied to the nvidia provider", settings.llm_timeout_seconds
        )

    return ChatNVIDIA(
        model=settings.llm_model,
        api_key=settings.llm_api_key,
        temperature=settings.summary_temperature,
        max_tokens=settings.summary_max_tokens,
    )


def build_chat_client(settings: Settings) -> BaseChatModel:
    """Create the chat model for the configured provider."""
    if settings.llm_provider == "openai":
        return build_openai_chat_client(settings)
    if settings.llm_provider == "nvidia":
        return build_nvidia_chat_client(settings)
    raise ConfigurationError(f"Unsupported LLM provider {settings.llm_provider!r}")
