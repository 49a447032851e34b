"""Core relay dataclasses: credentials, inbound events, outbound replies.

WHY: Slack delivers events as loose JSON dicts and the bootstrap juggles
three secrets. Typed dataclasses make the fields each component relies
on explicit and keep parsing in one place.

HOW: Plain dataclasses with from_dict factories for platform payloads,
in the same manner as the API response models.

RULES:
- Credential values never appear in repr()
- InboundEvent.from_dict tolerates missing keys (Slack omits many)
- OutboundReply carries thread_ts only when the event was threaded
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from slack_relay.config import API_KEY_SECRET, BOT_TOKEN_SECRET, SIGNING_SECRET_SECRET

# Subtypes that never carry a fresh human message
IGNORED_SUBTYPES = frozenset({
    "bot_message",
    "message_changed",
    "message_deleted",
    "message_replied",
    "channel_join",
    "channel_leave",
    "channel_topic",
    "channel_purpose",
    "channel_name",
    "group_join",
    "group_leave",
    "ekm_access_denied",
})


@dataclass(frozen=True)
class Credential:
    """A named secret resolved once at startup and held in memory only."""

    name: str
    value: Optional[str] = field(default=None, repr=False)

    @property
    def resolved(self) -> bool:
        return bool(self.value)


@dataclass(frozen=True)
class Credentials:
    """The three credentials the relay cannot serve traffic without."""

    bot_token: Credential
    signing_secret: Credential
    model_api_key: Credential

    @classmethod
    def from_values(
        cls,
        bot_token: Optional[str],
        signing_secret: Optional[str],
        model_api_key: Optional[str],
    ) -> Credentials:
        return cls(
            bot_token=Credential(BOT_TOKEN_SECRET, bot_token),
            signing_secret=Credential(SIGNING_SECRET_SECRET, signing_secret),
            model_api_key=Credential(API_KEY_SECRET, model_api_key),
        )

    def missing(self) -> List[str]:
        """Names of credentials that resolved to None or empty."""
        return [
            c.name
            for c in (self.bot_token, self.signing_secret, self.model_api_key)
            if not c.resolved
        ]


@dataclass
class InboundEvent:
    """A Slack event as seen by the message handler.

    RULES:
    - type is the inner event type ("message", "app_mention", ...)
    - subtype is None for plain human messages
    - bot_id is set for messages posted by any bot, including this one
    """

    type: str
    channel: str = ""
    text: str = ""
    user: Optional[str] = None
    bot_id: Optional[str] = None
    subtype: Optional[str] = None
    ts: Optional[str] = None
    thread_ts: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> InboundEvent:
        return cls(
            type=data.get("type", ""),
            channel=data.get("channel", "") or "",
            text=data.get("text", "") or "",
            user=data.get("user"),
            bot_id=data.get("bot_id"),
            subtype=data.get("subtype"),
            ts=data.get("ts"),
            thread_ts=data.get("thread_ts"),
        )

    @property
    def is_bot_message(self) -> bool:
        return self.subtype == "bot_message" or bool(self.bot_id)

    @property
    def is_actionable(self) -> bool:
        """True when the event is a human message worth answering."""
        if self.is_bot_message:
            return False
        if self.subtype in IGNORED_SUBTYPES:
            return False
        return bool(self.channel) and bool(self.text.strip())


@dataclass(frozen=True)
class OutboundReply:
    """A reply addressed to the conversation an event arrived on."""

    channel: str
    text: str
    thread_ts: Optional[str] = None

    @classmethod
    def for_event(cls, event: InboundEvent, text: str) -> OutboundReply:
        return cls(channel=event.channel, text=text, thread_ts=event.thread_ts)
