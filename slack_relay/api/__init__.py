"""Completion backend package: async interface to the language model.

WHY: The relay turns each Slack message into one chat-completion call.
This package encapsulates that call behind CompletionClient.

HOW: Wraps the openai SDK's AsyncOpenAI on an injected httpx.AsyncClient.
The request shape is a typed dataclass defined in models.py.

RULES:
- All completion calls go through CompletionClient
- Authentication is via the API key resolved from Secret Manager
"""

from slack_relay.api.client import CompletionClient, first_choice_text
from slack_relay.api.models import CompletionRequest, CompletionResult

__all__ = ["CompletionClient", "CompletionRequest", "CompletionResult", "first_choice_text"]
