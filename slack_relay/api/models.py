"""Chat-completion request and result dataclasses.

WHY: The completion backend speaks the OpenAI chat-completions wire
format. A typed request dataclass makes the fixed prompt and sampling
parameters explicit in one place.

HOW: CompletionRequest.to_dict() builds the keyword arguments for
chat.completions.create(): a system message followed by the user
message plus the sampling parameters. CompletionResult carries the text
handed back to the message handler.

RULES:
- Messages are always [system, user], in that order
- Only the first choice is ever used
- CompletionResult is all-or-nothing: real text or the fallback
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from slack_relay.config import (
    FREQUENCY_PENALTY,
    MAX_TOKENS,
    OPENAI_MODEL,
    PRESENCE_PENALTY,
    SYSTEM_PROMPT,
    TEMPERATURE,
    TOP_P,
)


@dataclass(frozen=True)
class CompletionRequest:
    """One user message plus the fixed prompt and sampling parameters."""

    user_text: str
    system_prompt: str = SYSTEM_PROMPT
    model: str = OPENAI_MODEL
    temperature: float = TEMPERATURE
    max_tokens: int = MAX_TOKENS
    top_p: float = TOP_P
    frequency_penalty: float = FREQUENCY_PENALTY
    presence_penalty: float = PRESENCE_PENALTY

    def to_dict(self) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": self.user_text},
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "top_p": self.top_p,
            "frequency_penalty": self.frequency_penalty,
            "presence_penalty": self.presence_penalty,
        }


@dataclass(frozen=True)
class CompletionResult:
    text: str
    ok: bool = True
