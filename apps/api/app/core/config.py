from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)


class Settings(BaseSettings):
    env: str = "development"
    app_name: str = "Ask API"
    app_version: str = "0.1.0"
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: list[str] = ["http://localhost:3000"]
    log_level: str = "INFO"

    # With ai_enabled=false the mock responder is used even when a key is set.
    ai_enabled: bool = False
    ai_model: str = "gpt-4o-mini"
    ai_max_tokens: int = Field(default=1024, gt=0)
    ai_temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    ai_timeout_sec: int = Field(default=30, gt=0)
    ai_base_url: str | None = None

    ai_api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("AI_API_KEY", "OPENAI_API_KEY"),
    )
    ai_system_prompt: str | None = None
    ai_system_prompt_file: str | None = None

    model_config = SettingsConfigDict(
        env_file=".env",
        toml_file="config.toml",
        extra="ignore",
        populate_by_name=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            TomlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

    def resolve_system_prompt(self) -> str | None:
        inline = (self.ai_system_prompt or "").strip()
        if inline:
            return inline
        if not self.ai_system_prompt_file:
            return None
        text = Path(self.ai_system_prompt_file).read_text(encoding="utf-8").strip()
        return text or None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
