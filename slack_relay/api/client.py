"""Async client for an OpenAI-compatible chat-completions backend.

WHY: Every human message in Slack becomes exactly one completion call.
This module hides the SDK details and guarantees the message handler
always gets text back: either the model's answer or a fixed apology.

HOW: Wraps openai.AsyncOpenAI, built on an injected httpx.AsyncClient
(owned by the bootstrap) with SDK retries disabled. complete_request()
returns a CompletionResult; complete() is the plain string entry point
used by the handler.

RULES:
- One request per call: max_retries=0, no streaming, no batching
- Success returns choices[0].message.content verbatim
- Any failure (network, non-2xx, malformed or empty body) returns FALLBACK_TEXT
- Nothing raises past complete()/complete_request()
- The API key is never logged
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from openai import APIError, APIStatusError, AsyncOpenAI

from slack_relay.api.models import CompletionRequest, CompletionResult
from slack_relay.config import FALLBACK_TEXT, OPENAI_BASE_URL, OPENAI_MODEL

logger = logging.getLogger(__name__)

# Completions can be slow; connecting should not be
DEFAULT_TIMEOUT = httpx.Timeout(300.0, connect=30.0)


def create_http_client(timeout: httpx.Timeout = DEFAULT_TIMEOUT) -> httpx.AsyncClient:
    """Build the shared HTTP client the bootstrap hands to CompletionClient."""
    return httpx.AsyncClient(timeout=timeout)


def first_choice_text(completion: Any) -> str:
    """Return the first choice's message content.

    RULES:
    - Raises ValueError when there are no choices
    - Raises ValueError when the content is missing, not a string, or blank
    """
    choices = getattr(completion, "choices", None)
    if not choices:
        raise ValueError("Completion response has no choices")
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None)
    if not isinstance(content, str) or not content.strip():
        raise ValueError("Completion choice has no message content")
    return content


class CompletionClient:
    """Send single user messages to the completion backend.

    WHY: The message handler needs one awaitable call that turns text
    into a reply and cannot fail.

    HOW: Holds an AsyncOpenAI client configured with the resolved API key,
    the base URL and a shared httpx.AsyncClient. The HTTP client is
    injected so its lifecycle belongs to the process bootstrap.

    RULES:
    - api_key is the default credential; complete() may override it per call
    - aclose() closes the injected HTTP client
    """

    def __init__(
        self,
        api_key: str,
        http_client: httpx.AsyncClient,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
    ) -> None:
        self._http = http_client
        self._model = model or OPENAI_MODEL
        self._openai = AsyncOpenAI(
            api_key=api_key,
            base_url=(base_url or OPENAI_BASE_URL).rstrip("/"),
            http_client=http_client,
            max_retries=0,
        )

    @property
    def model(self) -> str:
        return self._model

    def build_request(self, user_text: str) -> CompletionRequest:
        return CompletionRequest(user_text=user_text, model=self._model)

    async def complete(self, user_text: str, api_key: Optional[str] = None) -> str:
        """Return the generated reply for ``user_text`` or the fallback text."""
        result = await self.complete_request(self.build_request(user_text), api_key=api_key)
        return result.text

    async def complete_request(
        self,
        request: CompletionRequest,
        api_key: Optional[str] = None,
    ) -> CompletionResult:
        """Send ``request`` and wrap the outcome in a CompletionResult.

        RULES:
        - ok=False results always carry FALLBACK_TEXT
        - SDK errors and malformed responses are logged and swallowed here
        """
        client = self._openai.with_options(api_key=api_key) if api_key else self._openai
        try:
            completion = await client.chat.completions.create(**request.to_dict())
            text = first_choice_text(completion)
        except APIStatusError as exc:
            logger.error(
                "Completion backend returned %s: %s", exc.status_code, exc.message[:500]
            )
            return CompletionResult(text=FALLBACK_TEXT, ok=False)
        except APIError:
            logger.exception("Error calling completion backend")
            return CompletionResult(text=FALLBACK_TEXT, ok=False)
        except (AttributeError, TypeError, ValueError):
            logger.exception("Malformed completion response")
            return CompletionResult(text=FALLBACK_TEXT, ok=False)

        logger.debug(
            "Completion %s from model %s",
            getattr(completion, "id", ""), getattr(completion, "model", ""),
        )
        return CompletionResult(text=text)

    async def aclose(self) -> None:
        await self._openai.close()
        await self._http.aclose()
