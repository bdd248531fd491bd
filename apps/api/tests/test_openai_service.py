import asyncio
import threading
import time
import unittest
from types import SimpleNamespace
from typing import Any

import httpx
import openai

from app.domain.ai import AIService, ApiError, ConfigurationError, InternalError, ServiceConfig
from app.domain.ai.providers.common import SYSTEM_PROMPT_TEMPLATE
from app.domain.ai.providers.openai import OpenAIService


def _response(content: Any) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class _FakeCompletions:
    def __init__(self, outcome: Any, delay_sec: float = 0.0) -> None:
        self.outcome = outcome
        self.delay_sec = delay_sec
        self.calls: list[dict[str, Any]] = []
        self.thread_ids: list[int] = []

    async def create(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        self.thread_ids.append(threading.get_ident())
        if self.delay_sec:
            await asyncio.sleep(self.delay_sec)
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome


class _FakeClient:
    def __init__(self, completions: _FakeCompletions, **options: Any) -> None:
        self.chat = SimpleNamespace(completions=completions)
        self.options = options
        self.closed = False

    async def __aenter__(self) -> "_FakeClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.closed = True


class _FakeClientFactory:
    def __init__(self, outcome: Any, delay_sec: float = 0.0) -> None:
        self.completions = _FakeCompletions(outcome, delay_sec)
        self.clients: list[_FakeClient] = []

    def __call__(self, **options: Any) -> _FakeClient:
        client = _FakeClient(self.completions, **options)
        self.clients.append(client)
        return client


def _config(**overrides: Any) -> ServiceConfig:
    values = {
        "enabled": True,
        "model": "gpt-test",
        "max_tokens": 256,
        "temperature": 0.2,
        "timeout_sec": 5,
    }
    values.update(overrides)
    return ServiceConfig(**values)


def _service(
    factory: _FakeClientFactory,
    *,
    api_key: str = "tok123",
    system_prompt: str | None = None,
    **config: Any,
) -> OpenAIService:
    return OpenAIService(
        api_key=api_key,
        config=_config(**config),
        system_prompt=system_prompt,
        client_factory=factory,
    )


_REQUEST = httpx.Request("POST", "https://api.example.test/v1/chat/completions")


class OpenAIServiceAskTests(unittest.IsolatedAsyncioTestCase):
    async def test_returns_provider_text_verbatim(self) -> None:
        factory = _FakeClientFactory(_response("  Rust is fast.\n"))
        service = _service(factory)

        answer = await service.ask("What is Rust?")

        self.assertEqual(answer, "  Rust is fast.\n")
        self.assertEqual(len(factory.completions.calls), 1)
        call = factory.completions.calls[0]
        self.assertEqual(call["model"], "gpt-test")
        self.assertEqual(call["max_tokens"], 256)
        self.assertEqual(call["temperature"], 0.2)
        self.assertEqual(call["messages"], [{"role": "user", "content": "What is Rust?"}])

    async def test_client_is_built_per_call_with_timeout_and_no_retries(self) -> None:
        factory = _FakeClientFactory(_response("ok"))
        service = _service(factory, timeout_sec=7, base_url="https://llm.example.test/v1")

        await service.ask("one")
        await service.ask("two")

        self.assertEqual(len(factory.clients), 2)
        self.assertIsNot(factory.clients[0], factory.clients[1])
        for client in factory.clients:
            self.assertTrue(client.closed)
            self.assertEqual(client.options["api_key"], "tok123")
            self.assertEqual(client.options["base_url"], "https://llm.example.test/v1")
            self.assertEqual(client.options["timeout"], 7.0)
            self.assertEqual(client.options["max_retries"], 0)

    async def test_provider_runs_off_the_caller_thread(self) -> None:
        factory = _FakeClientFactory(_response("ok"))
        service = _service(factory)

        await service.ask("where am I running?")

        self.assertNotEqual(factory.completions.thread_ids[0], threading.get_ident())

    async def test_system_prompt_is_prepended(self) -> None:
        factory = _FakeClientFactory(_response("ok"))
        service = _service(factory, system_prompt="  Be concise  ")

        await service.ask("What is Rust?")

        sent = factory.completions.calls[0]["messages"][0]["content"]
        self.assertEqual(
            sent,
            SYSTEM_PROMPT_TEMPLATE.format(system_prompt="Be concise", question="What is Rust?"),
        )
        self.assertTrue(sent.endswith("What is Rust?"))

    async def test_blank_key_fails_before_any_client_is_built(self) -> None:
        for api_key in ("", "   ", "\n"):
            with self.subTest(api_key=api_key):
                factory = _FakeClientFactory(_response("unreachable"))
                service = _service(factory, api_key=api_key)

                with self.assertRaises(ConfigurationError):
                    await service.ask("What is Rust?")

                self.assertEqual(factory.clients, [])
                self.assertEqual(factory.completions.calls, [])

    async def test_provider_failure_is_api_error(self) -> None:
        factory = _FakeClientFactory(openai.APIConnectionError(request=_REQUEST))
        service = _service(factory)

        with self.assertRaises(ApiError) as ctx:
            await service.ask("What is Rust?")

        self.assertFalse(ctx.exception.timed_out)
        self.assertEqual(ctx.exception.code, "provider_error")
        self.assertIn("openai_request_failed", str(ctx.exception))
        self.assertIsInstance(ctx.exception.__cause__, openai.APIConnectionError)
        self.assertTrue(factory.clients[0].closed)

    async def test_provider_timeout_is_api_error(self) -> None:
        factory = _FakeClientFactory(openai.APITimeoutError(request=_REQUEST))
        service = _service(factory)

        with self.assertRaises(ApiError) as ctx:
            await service.ask("What is Rust?")

        self.assertTrue(ctx.exception.timed_out)
        self.assertEqual(ctx.exception.code, "timeout")

    async def test_slow_provider_is_cut_off_at_timeout(self) -> None:
        factory = _FakeClientFactory(_response("too late"), delay_sec=10)
        service = _service(factory, timeout_sec=1)

        with self.assertRaises(ApiError) as ctx:
            await service.ask("What is Rust?")

        self.assertTrue(ctx.exception.timed_out)

    async def test_missing_content_is_api_error(self) -> None:
        for outcome in (SimpleNamespace(choices=[]), _response(None)):
            with self.subTest(outcome=outcome):
                service = _service(_FakeClientFactory(outcome))
                with self.assertRaises(ApiError):
                    await service.ask("What is Rust?")

    async def test_worker_crash_is_internal_error(self) -> None:
        def broken_factory(**options: Any) -> Any:
            raise RuntimeError("client construction crashed")

        service = OpenAIService(api_key="tok123", config=_config(), client_factory=broken_factory)

        with self.assertRaises(InternalError) as ctx:
            await service.ask("What is Rust?")

        self.assertEqual(ctx.exception.code, "internal_error")
        self.assertIn("client construction crashed", str(ctx.exception))

    async def test_concurrent_asks_use_separate_clients(self) -> None:
        factory = _FakeClientFactory(_response("ok"))
        service = _service(factory)

        answers = await asyncio.gather(*(service.ask(f"question {i}") for i in range(10)))

        self.assertEqual(answers, ["ok"] * 10)
        self.assertEqual(len(factory.clients), 10)
        sent = sorted(call["messages"][0]["content"] for call in factory.completions.calls)
        self.assertEqual(sent, sorted(f"question {i}" for i in range(10)))


class OpenAIServiceCancellationTests(unittest.IsolatedAsyncioTestCase):
    async def test_cancelled_caller_abandons_worker_which_finishes_alone(self) -> None:
        factory = _FakeClientFactory(_response("late answer"), delay_sec=0.5)
        service = _service(factory)

        task = asyncio.create_task(service.ask("What is Rust?"))
        await asyncio.sleep(0.1)
        started = time.monotonic()
        task.cancel()

        with self.assertRaises(asyncio.CancelledError):
            await task
        self.assertLess(time.monotonic() - started, 0.3)

        self.assertEqual(len(factory.clients), 1)
        self.assertFalse(factory.clients[0].closed)

        deadline = time.monotonic() + 5
        while not factory.clients[0].closed and time.monotonic() < deadline:
            await asyncio.sleep(0.05)

        self.assertTrue(factory.clients[0].closed)
        self.assertEqual(len(factory.completions.calls), 1)


class OpenAIServiceMetadataTests(unittest.TestCase):
    def test_system_prompt_applied(self) -> None:
        factory = _FakeClientFactory(_response("ok"))
        for prompt in (None, "", "   "):
            with self.subTest(prompt=prompt):
                self.assertFalse(_service(factory, system_prompt=prompt).system_prompt_applied())
        self.assertTrue(_service(factory, system_prompt="Be concise").system_prompt_applied())

    def test_name_and_contract(self) -> None:
        service = _service(_FakeClientFactory(_response("ok")))
        self.assertEqual(service.name(), "OpenAI")
        self.assertIsInstance(service, AIService)

    def test_repr_does_not_leak_key(self) -> None:
        service = _service(_FakeClientFactory(_response("ok")), api_key="sk-secret-value")
        self.assertNotIn("sk-secret-value", repr(service))


if __name__ == "__main__":
    unittest.main()
