from __future__ import annotations

import logging

import openai
from openai import AsyncOpenAI

from .errors import (
    AuthenticationError,
    CompletionError,
    MalformedResponseError,
    NetworkError,
    RateLimitError,
    RemoteServiceError,
)
from .llm import Choice, ClientConfig, CompletionRequest, CompletionResponse, LLMClient


logger = logging.getLogger(__name__)


def _translate_error(exc: Exception) -> CompletionError:
    # Order matters: APITimeoutError is an APIConnectionError, and the
    # status-specific errors are all APIStatusError subclasses.
    if isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return AuthenticationError(str(exc), provider="openai")
    if isinstance(exc, openai.RateLimitError):
        return RateLimitError(str(exc), provider="openai")
    if isinstance(exc, openai.APIConnectionError):
        return NetworkError(str(exc), provider="openai")
    if isinstance(exc, openai.APIResponseValidationError):
        return MalformedResponseError(str(exc), provider="openai")
    return RemoteServiceError(str(exc), provider="openai")


def _parse_response(resp) -> CompletionResponse:
    choices = getattr(resp, "choices", None)
    if choices is None or isinstance(choices, (str, bytes)):
        raise MalformedResponseError("completion response has no choices field", provider="openai")
    parsed = []
    for i, c in enumerate(choices):
        text = getattr(c, "text", None)
        if not isinstance(text, str):
            raise MalformedResponseError(f"choice {i} has no text", provider="openai")
        index = getattr(c, "index", None)
        parsed.append(
            Choice(
                text=text,
                index=index if isinstance(index, int) else i,
                finish_reason=getattr(c, "finish_reason", None),
            )
        )
    return CompletionResponse(choices=tuple(parsed), model=getattr(resp, "model", None))


class OpenAIClient(LLMClient):
    provider = "openai"

    def __init__(self, config: ClientConfig):
        super().__init__(config)
        # no retries, no client-side timeout override
        self._client = AsyncOpenAI(api_key=config.api_key, max_retries=0)

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        logger.debug("OpenAI completion: model=%s max_tokens=%s", request.model, request.max_tokens)
        try:
            resp = await self._client.completions.create(
                model=request.model,
                prompt=request.prompt,
                temperature=request.temperature,
                max_tokens=request.max_tokens,
            )
        except openai.OpenAIError as exc:
            raise _translate_error(exc) from exc
        return _parse_response(resp)

    async def aclose(self) -> None:
        await self._client.close()
