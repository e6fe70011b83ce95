# Path: anki_lang/adapters/openai_client.py
"""OpenAI chat completions client used to generate card content."""

import logging
from dataclasses import dataclass, field
from typing import Dict, List

import openai
from openai import OpenAI

from anki_lang.core.errors import ConfigError, LLMTransportError

__all__ = ["CompletionRequest", "OpenAIClient", "DEFAULT_MODEL", "DEFAULT_BASE_URL"]

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o"
DEFAULT_BASE_URL = "https://api.openai.com/v1"

# Errors worth another attempt with the same inputs
_TRANSIENT_ERRORS = (
    openai.APIConnectionError,  # includes APITimeoutError
    openai.RateLimitError,
    openai.InternalServerError,
)


@dataclass
class CompletionRequest:
    """What the generator sends to the LLM.

    Attributes:
        model: Chat model name.
        messages: Chat messages, each a {"role", "content"} dict.
        temperature: Sampling temperature, clamped to [0.0, 2.0].
    """

    model: str
    messages: List[Dict[str, str]] = field(default_factory=list)
    temperature: float = 0.7


class OpenAIClient:
    """OpenAI-compatible chat completions client.

    Args:
        api_key: API key. Must be non-empty.
        base_url: API base URL, any OpenAI-compatible endpoint works.
        timeout: Per-request timeout in seconds.
    """

    def __init__(self, api_key: str, base_url: str = DEFAULT_BASE_URL, timeout: float = 30.0):
        if not api_key or not api_key.strip():
            raise ConfigError("OpenAI API key cannot be empty")

        self.base_url = base_url.rstrip("/")
        # Retries are done by the card generator, not by the SDK
        self.client = OpenAI(api_key=api_key, base_url=self.base_url, timeout=timeout, max_retries=0)

    def complete(self, request: CompletionRequest) -> str:
        """Execute a chat completion and return the raw text of the first choice.

        Raises:
            LLMTransportError: The request failed. `transient` tells whether to retry.
        """
        temperature = min(max(request.temperature, 0.0), 2.0)
        logger.debug(f"Chat completion with {request.model} (temperature={temperature})")

        try:
            response = self.client.chat.completions.create(
                model=request.model,
                messages=request.messages,
                temperature=temperature,
                response_format={"type": "json_object"},
            )
        except _TRANSIENT_ERRORS as e:
            raise LLMTransportError(f"OpenAI request failed: {e}", transient=True) from e
        except openai.OpenAIError as e:
            raise LLMTransportError(f"OpenAI request rejected: {e}", transient=False) from e

        if not response.choices:
            raise LLMTransportError("OpenAI returned no choices", transient=True)

        return response.choices[0].message.content or ""
