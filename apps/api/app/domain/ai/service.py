from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@runtime_checkable
class AIService(Protocol):
    """Question answering contract shared by the live provider and the mock."""

    async def ask(self, question: str) -> str:
        ...

    def name(self) -> str:
        ...

    def system_prompt_applied(self) -> bool:
        ...


@dataclass(frozen=True)
class ServiceConfig:
    enabled: bool = False
    model: str = "gpt-4o-mini"
    max_tokens: int = 1024
    temperature: float = 0.7
    timeout_sec: int = 30
    base_url: str | None = None

    def __post_init__(self) -> None:
        if not self.model:
            raise ValueError("ai_model_missing")
        if int(self.max_tokens) <= 0:
            raise ValueError("ai_max_tokens_not_positive")
        if int(self.timeout_sec) <= 0:
            raise ValueError("ai_timeout_not_positive")
