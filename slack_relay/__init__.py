"""Slack AI Relay: answer Slack messages with a chat-completion model.

WHY: Teams want a language model available inside their Slack workspace
without building conversation infrastructure. This package receives
message events, asks the model, and posts the answer back in place.

HOW: Four stages. Secrets are resolved from Google Secret Manager at
startup (secrets.py), deliveries are verified and classified
(slack/events.py), messages are handled (slack/handler.py), and the
completion backend is called over HTTP (api/client.py). A FastAPI server
(server/app.py) fronts the slack-bolt app.

RULES:
- No conversation memory: each message is answered on its own
- The process refuses to start without all three credentials
- The user always gets either the model's text or a fixed apology
"""

__version__ = "0.1.0"
