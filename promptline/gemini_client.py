from __future__ import annotations

import logging

import google.generativeai as genai
from google.api_core import exceptions as gexc

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


def _translate_error(exc: gexc.GoogleAPIError) -> CompletionError:
    if isinstance(exc, (gexc.Unauthenticated, gexc.PermissionDenied)):
        return AuthenticationError(str(exc), provider="gemini")
    # an invalid key is reported as 400 INVALID_ARGUMENT
    if isinstance(exc, gexc.InvalidArgument) and "api key" in str(exc).lower():
        return AuthenticationError(str(exc), provider="gemini")
    if isinstance(exc, (gexc.ResourceExhausted, gexc.TooManyRequests)):
        return RateLimitError(str(exc), provider="gemini")
    if isinstance(exc, (gexc.ServiceUnavailable, gexc.DeadlineExceeded, gexc.RetryError)):
        return NetworkError(str(exc), provider="gemini")
    return RemoteServiceError(str(exc), provider="gemini")


def _candidate_text(candidate) -> str | None:
    content = getattr(candidate, "content", None)
    parts = getattr(content, "parts", None)
    if parts is None:
        return None
    texts = [p.text for p in parts if isinstance(getattr(p, "text", None), str)]
    return "".join(texts)


def _finish_reason(candidate) -> str | None:
    reason = getattr(candidate, "finish_reason", None)
    if reason is None:
        return None
    return getattr(reason, "name", str(reason))


def _parse_response(resp) -> CompletionResponse:
    candidates = getattr(resp, "candidates", None)
    if candidates is None:
        raise MalformedResponseError("generate-content response has no candidates field", provider="gemini")
    choices = []
    for i, cand in enumerate(candidates):
        text = _candidate_text(cand)
        if text is None:
            raise MalformedResponseError(f"candidate {i} has no content parts", provider="gemini")
        index = getattr(cand, "index", None)
        choices.append(Choice(text=text, index=index if isinstance(index, int) else i, finish_reason=_finish_reason(cand)))
    return CompletionResponse(choices=tuple(choices), model=getattr(resp, "model_version", None))


class GeminiClient(LLMClient):
    provider = "gemini"

    def __init__(self, config: ClientConfig):
        super().__init__(config)
        genai.configure(api_key=config.api_key)
        self._model = genai.GenerativeModel(
            model_name=config.model,
            generation_config={
                "temperature": config.temperature,
                "max_output_tokens": config.max_tokens,
            },
        )

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        logger.debug("Gemini completion: model=%s max_tokens=%s", request.model, request.max_tokens)
        try:
            resp = await self._model.generate_content_async(
                request.prompt,
                generation_config={
                    "temperature": request.temperature,
                    "max_output_tokens": request.max_tokens,
                },
            )
        except gexc.GoogleAPIError as exc:
            raise _translate_error(exc) from exc
        return _parse_response(resp)
