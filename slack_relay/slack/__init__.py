"""Slack integration for the relay.

WHY: Slack delivers messages over the Events API and expects replies
through its Web API. This package validates deliveries, decides which
events to answer, and posts the answers.

HOW: events.py classifies and verifies deliveries, handler.py holds the
reply logic, bot.py wires both into a slack-bolt AsyncApp.

RULES:
- Handshake deliveries never reach the handler
- Bot-originated messages are never answered
"""
