from __future__ import annotations


class CompletionError(Exception):
    """Base error for a failed completion call."""

    kind = "remote call failed"

    def __init__(self, message: str, provider: str | None = None):
        super().__init__(message)
        self.provider = provider


class AuthenticationError(CompletionError):
    kind = "authentication failed"


class RateLimitError(CompletionError):
    kind = "rate limited"


class NetworkError(CompletionError):
    kind = "network failure"


class MalformedResponseError(CompletionError):
    kind = "malformed response"


class EmptyCompletionError(CompletionError):
    kind = "empty completion"


class RemoteServiceError(CompletionError):
    kind = "remote service error"
