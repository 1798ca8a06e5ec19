"""Chat-completion transport used by the language-model move source."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Protocol

from openai import OpenAI, OpenAIError

from .config import ExternalSourceConfig

logger = logging.getLogger(__name__)


class TransportError(RuntimeError):
    """The completion server could not be reached or gave no usable reply."""


class ChatTransport(Protocol):
    def complete(self, prompt: str, config: ExternalSourceConfig) -> str:
        """Send ``prompt`` as one user message and return the reply text."""

    def list_models(self, config: ExternalSourceConfig) -> list[str]:
        """Return the model ids the server advertises."""


def extract_completion_text(payload: Mapping[str, Any]) -> str:
    """Pull the reply out of a chat-completions response body.

    ``choices[0].message.content`` is preferred; the legacy
    ``choices[0].text`` field is accepted as well.
    """
    choices = payload.get("choices") or []
    if not choices:
        raise TransportError("Completion response has no choices.")
    first = choices[0] or {}
    message = first.get("message") or {}
    content = message.get("content")
    if content:
        return str(content).strip()
    text = first.get("text")
    if text:
        return str(text).strip()
    raise TransportError(f"No completion text in response choice: {first!r}")


class OpenAIChatTransport:
    """Talks to any OpenAI-compatible server through the ``openai`` SDK."""

    def __init__(self) -> None:
        self._client: OpenAI | None = None
        self._client_key: tuple[str, str, float] | None = None

    def _client_for(self, config: ExternalSourceConfig) -> OpenAI:
        key = (config.base_url, config.api_key, config.timeout)
        if self._client is None or self._client_key != key:
            self._client = OpenAI(
                base_url=config.base_url,
                api_key=config.api_key,
                timeout=config.timeout,
                max_retries=0,
            )
            self._client_key = key
        return self._client

    def complete(self, prompt: str, config: ExternalSourceConfig) -> str:
        client = self._client_for(config)
        try:
            response = client.chat.completions.create(
                messages=[{"role": "user", "content": prompt}],
                max_tokens=config.max_tokens,
                model=config.model,
                temperature=config.temperature,
            )
        except OpenAIError as exc:
            raise TransportError(f"Completion request to {config.base_url} failed: {exc}") from exc
        dump = getattr(response, "model_dump", None)
        if dump is None:
            raise TransportError(
                f"Completion response from {config.base_url} is not JSON: {str(response)[:200]!r}"
            )
        return extract_completion_text(dump())

    def list_models(self, config: ExternalSourceConfig) -> list[str]:
        client = self._client_for(config)
        try:
            page = client.models.list()
        except OpenAIError as exc:
            raise TransportError(f"Model listing at {config.base_url} failed: {exc}") from exc
        return [model.id for model in page.data]
