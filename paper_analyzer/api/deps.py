"""FastAPI dependencies shared by route modules."""

from fastapi import Depends, Request
from langchain_core.language_models.chat_models import BaseChatModel

from ..clients.llm_client import build_chat_client
from ..core.config import Settings
from ..core.errors import ConfigurationError


def get_settings(request: Request) -> Settings:
    """Settings validated during application startup."""
    settings = getattr(request.app.state, "settings", None)
    if settings is None:
        raise ConfigurationError("Settings were not loaded; the application lifespan did not run")
    return settings


def get_chat_model(settings: Settings = Depends(get_settings)) -> BaseChatModel:
    return build_chat_client(settings)
