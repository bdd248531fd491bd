"""AI domain services and provider abstractions."""

from app.domain.ai.errors import AIServiceError, ApiError, ConfigurationError, InternalError
from app.domain.ai.factory import build_ai_service, create_ai_service
from app.domain.ai.service import AIService, ServiceConfig

__all__ = [
    "AIService",
    "AIServiceError",
    "ApiError",
    "ConfigurationError",
    "InternalError",
    "ServiceConfig",
    "build_ai_service",
    "create_ai_service",
]
