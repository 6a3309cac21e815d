from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from .errors import EmptyCompletionError


DEFAULT_PROVIDER = "openai"
DEFAULT_MODELS = {
    "openai": "gpt-3.5-turbo-instruct",
    "gemini": "gemini-2.5-flash",
}
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 150


def mask_secret(value: str, keep: int = 2) -> str:
    if not value:
        return ""
    if len(value) <= keep * 2:
        return "*" * len(value)
    return value[:keep] + "*" * (len(value) - keep * 2) + value[-keep:]


@dataclass(frozen=True)
class ClientConfig:
    api_key: str = field(repr=False)
    model: str
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = DEFAULT_MAX_TOKENS
    provider: str = DEFAULT_PROVIDER

    def __post_init__(self) -> None:
        if not self.api_key or not self.api_key.strip():
            raise ValueError("API key is required")
        if not self.model or not self.model.strip():
            raise ValueError("model is required")
        # bool is an int subclass; reject it explicitly
        if isinstance(self.temperature, bool) or not isinstance(self.temperature, (int, float)):
            raise ValueError(f"temperature must be a number, got {self.temperature!r}")
        if not 0.0 <= self.temperature <= 2.0:
            raise ValueError(f"temperature must be within [0, 2], got {self.temperature}")
        if isinstance(self.max_tokens, bool) or not isinstance(self.max_tokens, int) or self.max_tokens <= 0:
            raise ValueError(f"max_tokens must be a positive integer, got {self.max_tokens!r}")

    def __repr__(self) -> str:
        return (
            f"ClientConfig(provider={self.provider!r}, model={self.model!r}, "
            f"temperature={self.temperature!r}, max_tokens={self.max_tokens!r}, "
            f"api_key={mask_secret(self.api_key)!r})"
        )


@dataclass(frozen=True)
class CompletionRequest:
    prompt: str
    model: str
    temperature: float
    max_tokens: int

    @classmethod
    def from_config(cls, prompt: str, config: ClientConfig) -> "CompletionRequest":
        return cls(
            prompt=prompt,
            model=config.model,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
        )


@dataclass(frozen=True)
class Choice:
    text: str
    index: int = 0
    finish_reason: Optional[str] = None


@dataclass(frozen=True)
class CompletionResponse:
    choices: Tuple[Choice, ...] = ()
    model: Optional[str] = None

    def first_text(self) -> str:
        if not self.choices:
            raise EmptyCompletionError("response contained no choices")
        return self.choices[0].text


class LLMClient:
    """Minimal completion client interface.

    Subclasses perform one network call per ``complete`` and translate SDK
    failures into :mod:`promptline.errors` types.
    """

    provider = ""

    def __init__(self, config: ClientConfig):
        self.config = config

    async def complete(self, request: CompletionRequest) -> CompletionResponse:  # pragma: no cover - to be implemented by subclasses
        raise NotImplementedError

    async def aclose(self) -> None:
        return None

    async def __aenter__(self) -> "LLMClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
