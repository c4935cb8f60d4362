"""
Chat-completion client for bundle analysis.

One synchronous request per call, no retries, no streaming. The request goes
through the OpenAI SDK; the response body is validated with pydantic so a
malformed or empty reply surfaces as DecodeError instead of a crash.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any

import httpx
import openai
from pydantic import BaseModel, ValidationError

from .config import API_KEY_ENV, DEFAULT_MODEL, DEFAULT_TIMEOUT_S, AnalyzerConfig
from .errors import (
    CompletionError,
    DecodeError,
    MissingCredentialError,
    TransportError,
    UpstreamError,
)
from .prompts import SYSTEM_PROMPT

logger = logging.getLogger(__name__)


class ChatMessage(BaseModel):
    """A single chat message."""

    role: str
    content: str | None = None


class ChatChoice(BaseModel):
    """One completion choice."""

    message: ChatMessage


class ChatResponse(BaseModel):
    """The part of a chat-completion response body we rely on."""

    choices: list[ChatChoice]


def parse_reply(body: str) -> str:
    """
    Extract the first choice's message content from a response body.

    Raises:
        DecodeError: If the body is not the expected JSON or has no choices
    """
    try:
        response = ChatResponse.model_validate_json(body)
    except ValidationError as e:
        raise DecodeError(f"unexpected response body: {e.error_count()} validation error(s)", raw=body) from e
    if not response.choices:
        raise DecodeError("response contained no choices", raw=body)
    return response.choices[0].message.content or ""


@dataclass
class CompletionClient:
    """
    Synchronous chat-completion client.

    The API key defaults to OPENAI_API_KEY. A missing key is reported by
    ``require_credential`` / ``complete`` before any network object exists.
    """

    api_key: str | None = None
    model: str = DEFAULT_MODEL
    base_url: str | None = None
    timeout_s: float = DEFAULT_TIMEOUT_S
    system_prompt: str = SYSTEM_PROMPT
    http_client: httpx.Client | None = field(default=None, repr=False)
    _client: openai.OpenAI | None = field(default=None, repr=False)

    def __post_init__(self):
        """Initialize API key from environment if not provided."""
        if self.api_key is None:
            self.api_key = os.environ.get(API_KEY_ENV)

    @classmethod
    def from_config(
        cls,
        config: AnalyzerConfig,
        api_key: str | None = None,
        http_client: httpx.Client | None = None,
    ) -> "CompletionClient":
        """Create a client using the model, endpoint and timeout from a config."""
        return cls(
            api_key=api_key,
            model=config.model,
            base_url=config.base_url,
            timeout_s=config.timeout_s,
            http_client=http_client,
        )

    def require_credential(self) -> str:
        """Return the API key or raise MissingCredentialError."""
        if not self.api_key or not self.api_key.strip():
            raise MissingCredentialError(f"{API_KEY_ENV} not set")
        return self.api_key

    def _get_client(self) -> openai.OpenAI:
        """Get or create the OpenAI client."""
        if self._client is None:
            client_kwargs: dict[str, Any] = {
                "api_key": self.require_credential(),
                "max_retries": 0,
                "timeout": self.timeout_s,
            }
            if self.base_url:
                client_kwargs["base_url"] = self.base_url
            if self.http_client is not None:
                client_kwargs["http_client"] = self.http_client
            self._client = openai.OpenAI(**client_kwargs)
        return self._client

    def close(self) -> None:
        """Close the underlying HTTP connection pool, if one was opened."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "CompletionClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def build_messages(self, prompt: str) -> list[dict[str, str]]:
        """System framing followed by the prompt as the user message."""
        return [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": prompt},
        ]

    def complete(self, prompt: str) -> str:
        """
        Send one prompt and return the model's reply.

        Raises:
            MissingCredentialError: No API key (no request is made)
            TransportError: Connection, DNS or timeout failure
            UpstreamError: Non-success HTTP status
            DecodeError: Unparseable body or empty choices list
        """
        client = self._get_client()
        logger.debug("Requesting completion model=%s prompt_chars=%d", self.model, len(prompt))

        try:
            raw = client.chat.completions.with_raw_response.create(
                model=self.model,
                messages=self.build_messages(prompt),
            )
        except openai.APIConnectionError as e:
            raise TransportError(f"request to completion endpoint failed: {e}") from e
        except openai.APIStatusError as e:
            raise UpstreamError(e.status_code, e.response.text) from e
        except openai.APIError as e:
            raise CompletionError(f"completion request failed: {e}") from e

        return parse_reply(raw.http_response.text)


__all__ = [
    "ChatChoice",
    "ChatMessage",
    "ChatResponse",
    "CompletionClient",
    "parse_reply",
]
