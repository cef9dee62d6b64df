"""LLM client for OpenAI-compatible chat-completion APIs.

Single Responsibility: Handle all LLM API calls.
No prompt construction, no JSON parsing, no business logic.

The client is built by the service container and injected; there are no
module-level singletons. Every failure (missing key, network, non-2xx,
timeout, empty content) surfaces as LLMCallError so callers have one thing
to catch.
"""

from __future__ import annotations

import logging
import os
import threading

from openai import APIConnectionError, APIStatusError, APITimeoutError, OpenAI, OpenAIError

from ..common.config_loader import Settings
from .types import LLMCallError

logger = logging.getLogger(__name__)

__all__ = [
    "make_openai_client",
    "ChatCompletionClient",
]


def make_openai_client(settings: Settings) -> OpenAI:
    """Create an OpenAI client with settings from config.

    Uses an explicit timeout so a stalled upstream becomes a call failure
    instead of a hung request. SDK retries default to 0: a failed call goes
    straight to the caller's fallback.

    Raises:
        LLMCallError: OPENAI_API_KEY is not set
    """
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        raise LLMCallError("OPENAI_API_KEY environment variable not set")

    headers: dict[str, str] = {}
    if settings.app_referer:
        headers["HTTP-Referer"] = settings.app_referer
    if settings.app_title:
        headers["X-Title"] = settings.app_title

    return OpenAI(
        api_key=api_key,
        base_url=settings.api_base_url or None,
        timeout=settings.request_timeout_secs,
        max_retries=settings.max_retries,
        default_headers=headers or None,
    )


class ChatCompletionClient:
    """Callable wrapper: (system, prompt, temperature, max_tokens) -> text.

    The underlying OpenAI client is created on first use, so commands that
    never call the model work without an API key. The screener and evaluator
    depend only on the call signature; tests inject a plain function instead.
    """

    def __init__(self, settings: Settings, client: OpenAI | None = None):
        self._settings = settings
        self._client = client
        self._client_lock = threading.Lock()
        self.model = settings.chat_model

    def _get_client(self) -> OpenAI:
        with self._client_lock:
            if self._client is None:
                self._client = make_openai_client(self._settings)
                logger.info(
                    "LLM client ready: model=%s base_url=%s timeout=%.0fs",
                    self.model, self._settings.api_base_url or "default", self._settings.request_timeout_secs,
                )
            return self._client

    def __call__(
        self,
        system: str,
        prompt: str,
        *,
        temperature: float,
        max_tokens: int,
    ) -> str:
        client = self._get_client()
        try:
            response = client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": prompt},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
                stream=False,
            )
        except APITimeoutError as exc:
            raise LLMCallError(f"LLM request timed out ({self.model}).") from exc
        except APIStatusError as exc:
            raise LLMCallError(
                f"LLM API error: {exc.status_code} - {getattr(exc, 'message', str(exc))}"
            ) from exc
        except APIConnectionError as exc:
            raise LLMCallError(f"LLM connection failed: {exc}") from exc
        except OpenAIError as exc:
            raise LLMCallError(f"LLM request failed: {exc}") from exc

        choices = getattr(response, "choices", None) or []
        content = choices[0].message.content if choices else None
        if not content or not content.strip():
            raise LLMCallError(f"LLM returned empty content ({self.model}).")

        logger.debug("LLM response (%d chars) from %s", len(content), self.model)
        return content.strip()
