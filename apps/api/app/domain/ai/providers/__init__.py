"""AI providers."""

from app.domain.ai.providers.mock import MockAIService
from app.domain.ai.providers.openai import OpenAIService

__all__ = ["MockAIService", "OpenAIService"]
