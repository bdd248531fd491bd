import asyncio
from typing import Any, Callable

import openai
from openai import AsyncOpenAI

from app.domain.ai.errors import AIServiceError, ApiError, ConfigurationError, InternalError
from app.domain.ai.isolation import run_isolated
from app.domain.ai.providers.common import compose_prompt, normalize_system_prompt
from app.domain.ai.service import ServiceConfig


class OpenAIService:
    """Live provider backed by an OpenAI-compatible chat completions endpoint.

    ``AsyncOpenAI`` keeps an ``httpx.AsyncClient`` tied to the event loop it
    was first used on, so a client is never shared: every ``ask`` builds a new
    one inside ``run_isolated`` and closes it before the worker exits.
    """

    def __init__(
        self,
        *,
        api_key: str,
        config: ServiceConfig,
        system_prompt: str | None = None,
        client_factory: Callable[..., Any] = AsyncOpenAI,
    ) -> None:
        self._api_key = api_key
        self.config = config
        self.system_prompt = normalize_system_prompt(system_prompt)
        self._client_factory = client_factory

    def __repr__(self) -> str:
        return (
            f"OpenAIService(model={self.config.model!r}, "
            f"system_prompt_applied={self.system_prompt_applied()})"
        )

    def name(self) -> str:
        return "OpenAI"

    def system_prompt_applied(self) -> bool:
        return self.system_prompt is not None

    async def ask(self, question: str) -> str:
        if not self._api_key.strip():
            raise ConfigurationError("openai_api_key_missing")

        prompt = compose_prompt(question, self.system_prompt)
        try:
            return await run_isolated(self._complete, prompt)
        except AIServiceError:
            raise
        except Exception as exc:
            raise InternalError(f"openai_worker_failed:{type(exc).__name__}:{exc}") from exc

    async def _complete(self, prompt: str) -> str:
        # Runs on the isolated worker loop.
        client = self._client_factory(
            api_key=self._api_key,
            base_url=self.config.base_url,
            timeout=float(self.config.timeout_sec),
            max_retries=0,
        )
        async with client:
            try:
                response = await asyncio.wait_for(
                    client.chat.completions.create(
                        model=self.config.model,
                        messages=[{"role": "user", "content": prompt}],
                        max_tokens=self.config.max_tokens,
                        temperature=self.config.temperature,
                    ),
                    timeout=self.config.timeout_sec,
                )
            except (openai.APITimeoutError, asyncio.TimeoutError) as exc:
                raise ApiError(
                    f"openai_request_timed_out:{self.config.timeout_sec}s",
                    timed_out=True,
                ) from exc
            except openai.OpenAIError as exc:
                raise ApiError(f"openai_request_failed:{exc}") from exc

        return self._extract_text(response)

    @staticmethod
    def _extract_text(response: Any) -> str:
        choices = getattr(response, "choices", None)
        if not choices:
            raise ApiError("openai_choices_missing")

        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None)
        if not isinstance(content, str):
            raise ApiError("openai_content_missing")
        return content
