"""Client package exports for external provider integrations and the analysis stream client."""

from .analysis_client import AnalysisClient, LegacyStreamParser, StructuredStreamParser
from .llm_client import build_chat_client

__all__ = [
    "AnalysisClient",
    "LegacyStreamParser",
    "StructuredStreamParser",
    "build_chat_client",
]
