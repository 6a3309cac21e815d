from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from promptline.llm import Choice, ClientConfig, CompletionResponse, LLMClient


ENV_VARS = (
    "PL_API_KEY",
    "PL_PROVIDER",
    "PL_MODEL",
    "PL_TEMPERATURE",
    "PL_MAX_TOKENS",
    "OPENAI_API_KEY",
    "GOOGLE_API_KEY",
    "GEMINI_API_KEY",
)


class FakeClient(LLMClient):
    provider = "fake"

    def __init__(self, config: ClientConfig, response=None, error=None):
        super().__init__(config)
        self.complete = AsyncMock(return_value=response, side_effect=error)
        self.closed = False

    async def aclose(self) -> None:
        self.closed = True


def make_response(*texts: str) -> CompletionResponse:
    return CompletionResponse(choices=tuple(Choice(text=t, index=i) for i, t in enumerate(texts)))


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    config_path = tmp_path / "promptline" / "config.json"
    monkeypatch.setenv("PROMPTLINE_CONFIG", str(config_path))
    return config_path


@pytest.fixture
def client_config() -> ClientConfig:
    return ClientConfig(api_key="sk-test-1234567890", model="gpt-3.5-turbo-instruct", temperature=0.7, max_tokens=150)
