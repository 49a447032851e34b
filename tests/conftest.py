"""Shared test fixtures for the slack_relay test suite.

WHY: Several test modules need the same Slack payloads, a way to sign
deliveries, and a completion client backed by a fake HTTP transport.

HOW: Plain helper functions for signing and building mock transports,
pytest fixtures for the sample payloads.

RULES:
- No test talks to Slack, OpenAI, or Google Cloud
- Payloads mirror real Events API shapes
"""

from __future__ import annotations

import hashlib
import hmac
import json
import time
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from slack_relay.api.client import CompletionClient

SIGNING_SECRET = "8f742231b10e8888abcd99yyyzzz85a5"
API_KEY = "sk-test-key"


def sign(body: bytes, secret: str = SIGNING_SECRET, timestamp: Optional[str] = None) -> Dict[str, str]:
    """Return Slack signature headers for ``body``."""
    ts = timestamp or str(int(time.time()))
    basestring = b"v0:" + ts.encode() + b":" + body
    digest = hmac.new(secret.encode(), basestring, hashlib.sha256).hexdigest()
    return {
        "X-Slack-Request-Timestamp": ts,
        "X-Slack-Signature": "v0=" + digest,
        "Content-Type": "application/json",
    }


def completion_body(*contents: str) -> Dict[str, Any]:
    return {
        "id": "chatcmpl-123",
        "object": "chat.completion",
        "created": 1700000000,
        "model": "gpt-3.5-turbo",
        "choices": [
            {"index": i, "message": {"role": "assistant", "content": c}, "finish_reason": "stop"}
            for i, c in enumerate(contents)
        ],
    }


def make_completion_client(
    handler: Callable[[httpx.Request], httpx.Response],
    api_key: str = API_KEY,
    base_url: str = "https://llm.test/v1",
) -> CompletionClient:
    """CompletionClient whose HTTP traffic is served by ``handler``."""
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return CompletionClient(api_key=api_key, http_client=http, base_url=base_url)


class RecordingBackend:
    """MockTransport handler that records requests and replies with fixed JSON."""

    def __init__(self, status_code: int = 200, body: Any = None) -> None:
        self.status_code = status_code
        self.body = completion_body("Hello from the model") if body is None else body
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.body, (bytes, str)):
            return httpx.Response(self.status_code, content=self.body)
        return httpx.Response(self.status_code, json=self.body)

    def sent_json(self, index: int = 0) -> Dict[str, Any]:
        return json.loads(self.requests[index].content)


@pytest.fixture
def message_event() -> Dict[str, Any]:
    """A plain human message event, as bolt passes it to listeners."""
    return {
        "type": "message",
        "channel": "C024BE91L",
        "user": "U2147483697",
        "text": "hello",
        "ts": "1355517523.000005",
        "channel_type": "channel",
    }


@pytest.fixture
def bot_message_event() -> Dict[str, Any]:
    return {
        "type": "message",
        "subtype": "bot_message",
        "channel": "C024BE91L",
        "bot_id": "B123ABC456",
        "text": "Thinking... \U0001f914",
        "ts": "1355517524.000006",
    }


@pytest.fixture
def event_callback(message_event) -> Dict[str, Any]:
    """Full Events API envelope around message_event."""
    return {
        "token": "XXYYZZ",
        "team_id": "T123ABC456",
        "api_app_id": "A123ABC456",
        "event": message_event,
        "type": "event_callback",
        "event_id": "Ev123ABC456",
        "event_time": 1355517523,
    }
