from __future__ import annotations

from types import SimpleNamespace

import pytest
from google.api_core import exceptions as gexc

from promptline import gemini_client as gemini_client_module
from promptline.errors import (
    AuthenticationError,
    MalformedResponseError,
    NetworkError,
    RateLimitError,
    RemoteServiceError,
)
from promptline.gemini_client import GeminiClient
from promptline.llm import ClientConfig, CompletionRequest


class _FakeModel:
    instances = []

    def __init__(self, model_name, generation_config):
        self.model_name = model_name
        self.generation_config = generation_config
        self.calls = []
        self.result = None
        self.error = None
        _FakeModel.instances.append(self)

    async def generate_content_async(self, prompt, generation_config=None):
        self.calls.append((prompt, generation_config))
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def fake_genai(monkeypatch):
    _FakeModel.instances = []
    configured = {}
    fake = SimpleNamespace(
        configure=lambda **kwargs: configured.update(kwargs),
        GenerativeModel=_FakeModel,
        configured=configured,
    )
    monkeypatch.setattr(gemini_client_module, "genai", fake)
    return fake


@pytest.fixture
def gemini_config():
    return ClientConfig(api_key="AIza-test-key", model="gemini-2.5-flash", temperature=0.4, max_tokens=64, provider="gemini")


def _candidate(*parts, index=0, reason="STOP"):
    return SimpleNamespace(
        content=SimpleNamespace(parts=[SimpleNamespace(text=p) for p in parts]),
        finish_reason=SimpleNamespace(name=reason),
        index=index,
    )


@pytest.mark.asyncio
async def test_complete_joins_candidate_parts(fake_genai, gemini_config):
    client = GeminiClient(gemini_config)
    model = _FakeModel.instances[0]
    model.result = SimpleNamespace(candidates=[_candidate("Bonjour, ", "comment ça va?")], model_version="gemini-2.5-flash-001")

    resp = await client.complete(CompletionRequest.from_config("Translate", gemini_config))

    assert resp.first_text() == "Bonjour, comment ça va?"
    assert resp.choices[0].finish_reason == "STOP"
    assert resp.model == "gemini-2.5-flash-001"


@pytest.mark.asyncio
async def test_generation_parameters_pass_through(fake_genai, gemini_config):
    client = GeminiClient(gemini_config)
    model = _FakeModel.instances[0]
    model.result = SimpleNamespace(candidates=[_candidate("ok")])

    await client.complete(CompletionRequest.from_config("hi", gemini_config))

    assert fake_genai.configured == {"api_key": "AIza-test-key"}
    assert model.model_name == "gemini-2.5-flash"
    assert model.generation_config == {"temperature": 0.4, "max_output_tokens": 64}
    assert model.calls == [("hi", {"temperature": 0.4, "max_output_tokens": 64})]


@pytest.mark.asyncio
async def test_blocked_prompt_gives_empty_response(fake_genai, gemini_config):
    client = GeminiClient(gemini_config)
    _FakeModel.instances[0].result = SimpleNamespace(candidates=[])

    resp = await client.complete(CompletionRequest.from_config("x", gemini_config))

    assert resp.choices == ()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "result",
    [
        SimpleNamespace(text="no candidates here"),
        SimpleNamespace(candidates=[SimpleNamespace(content=None, finish_reason=None)]),
    ],
)
async def test_malformed_response(fake_genai, gemini_config, result):
    client = GeminiClient(gemini_config)
    _FakeModel.instances[0].result = result

    with pytest.raises(MalformedResponseError):
        await client.complete(CompletionRequest.from_config("x", gemini_config))


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error, expected",
    [
        (gexc.Unauthenticated("missing credentials"), AuthenticationError),
        (gexc.PermissionDenied("denied"), AuthenticationError),
        (gexc.InvalidArgument("API key not valid. Please pass a valid API key."), AuthenticationError),
        (gexc.ResourceExhausted("quota exceeded"), RateLimitError),
        (gexc.ServiceUnavailable("upstream down"), NetworkError),
        (gexc.DeadlineExceeded("took too long"), NetworkError),
        (gexc.InternalServerError("boom"), RemoteServiceError),
        (gexc.InvalidArgument("bad model"), RemoteServiceError),
    ],
)
async def test_sdk_errors_are_translated(fake_genai, gemini_config, error, expected):
    client = GeminiClient(gemini_config)
    _FakeModel.instances[0].error = error

    with pytest.raises(expected) as exc_info:
        await client.complete(CompletionRequest.from_config("x", gemini_config))

    assert exc_info.value.__cause__ is error
    assert exc_info.value.provider == "gemini"
