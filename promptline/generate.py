from __future__ import annotations

import logging
from typing import Optional

import click

from .errors import CompletionError
from .llm import ClientConfig, CompletionRequest, LLMClient


logger = logging.getLogger(__name__)

SAMPLE_PROMPT = "Translate the following English text to French: 'Hello, how are you?'"


def build_client(config: ClientConfig) -> LLMClient:
    """Return the client implementation for ``config.provider``."""
    if config.provider == "openai":
        from .openai_client import OpenAIClient

        return OpenAIClient(config)
    if config.provider == "gemini":
        from .gemini_client import GeminiClient

        return GeminiClient(config)
    raise ValueError(f"Unknown provider: {config.provider}")


async def generate_response(client: LLMClient, prompt: str) -> Optional[str]:
    """Run one completion and report it.

    The first choice's text goes to stdout. Any failure of the call,
    including an empty choice list, is reported on stderr as
    ``Error: <details>`` and swallowed. Returns the text, or ``None`` on
    failure.
    """
    request = CompletionRequest.from_config(prompt, client.config)
    try:
        response = await client.complete(request)
        text = response.first_text()
    except CompletionError as e:
        logger.debug("Completion failed (%s)", e.kind, exc_info=True)
        click.echo(f"Error: {e.kind}: {e}", err=True)
        return None
    except Exception as e:
        # unclassified client failure, reported like the others
        logger.debug("Completion failed with unexpected %s", type(e).__name__, exc_info=True)
        click.echo(f"Error: {CompletionError.kind}: {e}", err=True)
        return None

    click.echo(text)
    return text
