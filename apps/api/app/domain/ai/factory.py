from app.core.config import Settings
from app.domain.ai.providers.mock import MockAIService
from app.domain.ai.providers.openai import OpenAIService
from app.domain.ai.service import AIService, ServiceConfig


def build_ai_service(settings: Settings) -> AIService:
    config = ServiceConfig(
        enabled=settings.ai_enabled,
        model=settings.ai_model,
        max_tokens=settings.ai_max_tokens,
        temperature=settings.ai_temperature,
        timeout_sec=settings.ai_timeout_sec,
        base_url=settings.ai_base_url,
    )
    api_key = settings.ai_api_key.get_secret_value() if settings.ai_api_key is not None else None
    return create_ai_service(config, api_key, settings.resolve_system_prompt())


def create_ai_service(
    config: ServiceConfig,
    api_key: str | None,
    system_prompt: str | None = None,
) -> MockAIService | OpenAIService:
    # An empty key still selects the live provider; it fails on the first ask.
    if config.enabled and api_key is not None:
        return OpenAIService(api_key=api_key, config=config, system_prompt=system_prompt)
    return MockAIService()
