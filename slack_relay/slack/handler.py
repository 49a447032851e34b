"""Message handler: turn one human Slack message into one model reply.

WHY: This is the only place with relay decision logic. It filters out
events that must not be answered (bot messages, edits, joins), gives the
user quick feedback, calls the completion backend, and posts the answer
to the conversation the message came from.

HOW: MessageHandler.handle() takes a parsed InboundEvent and an async
``send`` callable supplied by the transport. It sends the optional
acknowledgement, awaits CompletionClient.complete(), and sends the
result. Every reply is an OutboundReply addressed to the event's channel
(and thread, when the message was threaded).

RULES:
- Bot-originated events produce zero replies (prevents reply loops)
- The acknowledgement, when enabled, is always sent before the final reply
- A failed send is logged and never retried; handle() still completes
- handle() keeps no per-event state on the instance (safe to run concurrently)
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, List, Optional

from slack_relay.api.client import CompletionClient
from slack_relay.config import ACKNOWLEDGEMENT_TEXT
from slack_relay.models import InboundEvent, OutboundReply

logger = logging.getLogger(__name__)

Send = Callable[[OutboundReply], Awaitable[object]]


class MessageHandler:
    """Orchestrate acknowledgement, completion, and final reply for an event.

    RULES:
    - acknowledgement=None or "" disables the interim reply
    - Returns the replies that were successfully sent, in order
    """

    def __init__(
        self,
        completion: CompletionClient,
        acknowledgement: Optional[str] = ACKNOWLEDGEMENT_TEXT,
    ) -> None:
        self._completion = completion
        self._acknowledgement = acknowledgement or None

    async def handle(
        self,
        event: InboundEvent,
        send: Send,
        api_key: Optional[str] = None,
    ) -> List[OutboundReply]:
        if event.is_bot_message:
            logger.debug("Ignoring bot message in %s", event.channel)
            return []
        if not event.is_actionable:
            logger.debug(
                "Ignoring %s event (subtype=%s) in %s",
                event.type, event.subtype, event.channel,
            )
            return []

        logger.info("Received message in %s (%d chars)", event.channel, len(event.text))
        sent: List[OutboundReply] = []

        if self._acknowledgement:
            ack = OutboundReply.for_event(event, self._acknowledgement)
            if await _deliver(send, ack):
                sent.append(ack)

        text = await self._completion.complete(event.text, api_key=api_key)
        logger.info("Completion ready for %s (%d chars)", event.channel, len(text))

        reply = OutboundReply.for_event(event, text)
        if await _deliver(send, reply):
            sent.append(reply)
        return sent


async def _deliver(send: Send, reply: OutboundReply) -> bool:
    try:
        await send(reply)
    except Exception:
        logger.exception("Failed to send reply to %s", reply.channel)
        return False
    return True
