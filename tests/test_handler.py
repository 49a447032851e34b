"""Tests for the message handler.

WHY: The handler is where reply loops, missing replies, or out-of-order
replies would originate. These tests pin down which events are answered,
what is sent, and in which order.

HOW: The completion client is an AsyncMock (or a real CompletionClient on
a MockTransport for the fallback path); ``send`` is an AsyncMock that
records OutboundReply objects.

RULES:
- Each test builds its own handler
- Async calls are driven with asyncio.run()
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from conftest import RecordingBackend, make_completion_client
from slack_relay.config import FALLBACK_TEXT
from slack_relay.models import InboundEvent, OutboundReply
from slack_relay.slack.handler import MessageHandler

ACK = "Thinking... \U0001f914"


def _completion(text: str = "Hi! How can I help?") -> MagicMock:
    completion = MagicMock()
    completion.complete = AsyncMock(return_value=text)
    return completion


def _run(handler: MessageHandler, event: dict, send: AsyncMock, **kwargs):
    return asyncio.run(handler.handle(InboundEvent.from_dict(event), send, **kwargs))


# ---------------------------------------------------------------------------
# Happy path
# ---------------------------------------------------------------------------


class TestReplies:
    def test_hello_sends_ack_then_reply(self, message_event):
        completion = _completion("Hello, human.")
        send = AsyncMock()
        handler = MessageHandler(completion, acknowledgement=ACK)

        sent = _run(handler, message_event, send)

        completion.complete.assert_awaited_once_with("hello", api_key=None)
        assert [c.args[0] for c in send.await_args_list] == [
            OutboundReply(channel="C024BE91L", text=ACK),
            OutboundReply(channel="C024BE91L", text="Hello, human."),
        ]
        assert sent == [c.args[0] for c in send.await_args_list]

    def test_ack_sent_before_completion(self, message_event):
        order = []
        completion = MagicMock()

        async def complete(text, api_key=None):
            order.append("complete")
            return "answer"

        async def send(reply):
            order.append(reply.text)

        completion.complete = complete
        handler = MessageHandler(completion, acknowledgement=ACK)
        asyncio.run(handler.handle(InboundEvent.from_dict(message_event), send))

        assert order == [ACK, "complete", "answer"]

    def test_ack_disabled(self, message_event):
        send = AsyncMock()
        handler = MessageHandler(_completion("answer"), acknowledgement="")
        _run(handler, message_event, send)
        assert send.await_count == 1
        assert send.await_args.args[0].text == "answer"

    def test_threaded_message_replies_in_thread(self, message_event):
        message_event["thread_ts"] = "1355517500.000001"
        send = AsyncMock()
        handler = MessageHandler(_completion(), acknowledgement=ACK)
        _run(handler, message_event, send)
        assert all(c.args[0].thread_ts == "1355517500.000001" for c in send.await_args_list)

    def test_api_key_passed_through(self, message_event):
        completion = _completion()
        handler = MessageHandler(completion)
        _run(handler, message_event, AsyncMock(), api_key="sk-override")
        completion.complete.assert_awaited_once_with("hello", api_key="sk-override")

    def test_backend_failure_sends_fallback(self, message_event):
        client = make_completion_client(RecordingBackend(status_code=502, body={"error": "down"}))
        send = AsyncMock()
        handler = MessageHandler(client, acknowledgement=ACK)

        _run(handler, message_event, send)

        assert send.await_args_list[-1].args[0].text == FALLBACK_TEXT


# ---------------------------------------------------------------------------
# Events that must not be answered
# ---------------------------------------------------------------------------


class TestIgnoredEvents:
    def test_bot_subtype_produces_no_replies(self, bot_message_event):
        completion = _completion()
        send = AsyncMock()
        sent = _run(MessageHandler(completion), bot_message_event, send)
        assert sent == []
        send.assert_not_awaited()
        completion.complete.assert_not_awaited()

    def test_bot_id_without_subtype_produces_no_replies(self, message_event):
        message_event["bot_id"] = "B999"
        send = AsyncMock()
        _run(MessageHandler(_completion()), message_event, send)
        send.assert_not_awaited()

    @pytest.mark.parametrize("subtype", ["message_changed", "message_deleted", "channel_join"])
    def test_system_subtypes_ignored(self, message_event, subtype):
        message_event["subtype"] = subtype
        send = AsyncMock()
        _run(MessageHandler(_completion()), message_event, send)
        send.assert_not_awaited()

    @pytest.mark.parametrize("text", ["", "   \n"])
    def test_empty_text_ignored(self, message_event, text):
        message_event["text"] = text
        completion = _completion()
        _run(MessageHandler(completion), message_event, AsyncMock())
        completion.complete.assert_not_awaited()

    def test_missing_channel_ignored(self, message_event):
        del message_event["channel"]
        send = AsyncMock()
        _run(MessageHandler(_completion()), message_event, send)
        send.assert_not_awaited()


# ---------------------------------------------------------------------------
# Transport failures
# ---------------------------------------------------------------------------


class TestSendFailures:
    def test_failed_ack_still_sends_reply(self, message_event):
        send = AsyncMock(side_effect=[RuntimeError("channel_not_found"), None])
        handler = MessageHandler(_completion("answer"), acknowledgement=ACK)

        sent = _run(handler, message_event, send)

        assert send.await_count == 2
        assert sent == [OutboundReply(channel="C024BE91L", text="answer")]

    def test_failed_reply_is_not_retried(self, message_event):
        send = AsyncMock(side_effect=RuntimeError("ratelimited"))
        handler = MessageHandler(_completion("answer"), acknowledgement="")

        sent = _run(handler, message_event, send)

        assert send.await_count == 1
        assert sent == []


# ---------------------------------------------------------------------------
# Concurrency
# ---------------------------------------------------------------------------


class TestConcurrency:
    def test_concurrent_events_reply_to_own_channel(self, message_event):
        async def complete(text, api_key=None):
            # Finish in reverse order of arrival
            await asyncio.sleep(0.02 if text == "first" else 0.0)
            return "re: " + text

        completion = MagicMock()
        completion.complete = complete
        handler = MessageHandler(completion, acknowledgement="")
        sent = []

        async def send(reply):
            sent.append(reply)

        first = dict(message_event, channel="C1", text="first")
        second = dict(message_event, channel="C2", text="second")

        async def both():
            await asyncio.gather(
                handler.handle(InboundEvent.from_dict(first), send),
                handler.handle(InboundEvent.from_dict(second), send),
            )

        asyncio.run(both())

        assert sent == [
            OutboundReply(channel="C2", text="re: second"),
            OutboundReply(channel="C1", text="re: first"),
        ]
