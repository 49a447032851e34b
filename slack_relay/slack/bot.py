"""Slack transport: bolt AsyncApp wiring between Events API and the handler.

WHY: slack-bolt parses event deliveries, filters the bot's own events and
gives us an authenticated AsyncWebClient. The relay's decision logic lives
in MessageHandler; this module only adapts bolt's callback style to the
handler's single handle(event, send) entry point.

HOW: create_app() builds an AsyncApp with process_before_response=True so
the HTTP acknowledgement is sent only after the handler finishes. Message
events are routed to dispatch_message(), which parses the event and posts
replies with chat_postMessage.

RULES:
- Request signatures are checked by the HTTP server, not by bolt
- Replies are posted with chat_postMessage, threaded when the event was
- Runs behind the FastAPI server in slack_relay.server.app
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from slack_bolt.async_app import AsyncApp

from slack_relay.models import InboundEvent, OutboundReply
from slack_relay.slack.handler import MessageHandler

logger = logging.getLogger(__name__)


def create_app(
    bot_token: str,
    signing_secret: str,
    handler: MessageHandler,
    api_key: Optional[str] = None,
) -> AsyncApp:
    """Create the bolt app and register the message listener.

    RULES:
    - Bolt's own request verification is disabled (the server verifies)
    - api_key, when given, is passed through to every completion call
    """
    app = AsyncApp(
        token=bot_token,
        signing_secret=signing_secret,
        request_verification_enabled=False,
        process_before_response=True,
    )

    async def on_message(event: Dict[str, Any], client: Any) -> None:
        await dispatch_message(handler, event, client, api_key=api_key)

    app.event("message")(on_message)
    return app


async def dispatch_message(
    handler: MessageHandler,
    event: Dict[str, Any],
    client: Any,
    api_key: Optional[str] = None,
) -> List[OutboundReply]:
    """Hand a raw bolt message event to the handler and post its replies."""

    async def send(reply: OutboundReply) -> None:
        await post_reply(client, reply)

    inbound = InboundEvent.from_dict(event)
    return await handler.handle(inbound, send, api_key=api_key)


async def post_reply(client: Any, reply: OutboundReply) -> Any:
    kwargs: Dict[str, Any] = {"channel": reply.channel, "text": reply.text}
    if reply.thread_ts:
        kwargs["thread_ts"] = reply.thread_ts
    return await client.chat_postMessage(**kwargs)
