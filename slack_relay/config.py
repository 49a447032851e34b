"""Configuration constants, secret names, and .env loading.

WHY: Centralizes every tunable value of the relay so it is easy to find,
update, and override. Credentials are NOT configured here: only the names
under which they live in Google Secret Manager.

HOW: python-dotenv loads the .env file on import. Constants are defined
as module-level strings and numbers. load_project_id() provides a clear
error when the Secret Manager project is missing.

RULES:
- Bot token, signing secret and model API key never come from .env
- All defaults can be overridden via environment variables
- Completion sampling parameters are fixed (not env-overridable)
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# ---------------------------------------------------------------------------
# HTTP server
# ---------------------------------------------------------------------------

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8080"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

SLACK_EVENTS_PATH = "/slack/events"
BANNER_TEXT = "Slack AI Assistant is running... \U0001f680"

VERIFY_SIGNATURES = _env_flag("RELAY_VERIFY_SIGNATURES", "true")

# ---------------------------------------------------------------------------
# Secret Manager names
# ---------------------------------------------------------------------------

BOT_TOKEN_SECRET = os.getenv("BOT_TOKEN_SECRET", "bot-token")
SIGNING_SECRET_SECRET = os.getenv("SIGNING_SECRET_SECRET", "client-signing-secret")
API_KEY_SECRET = os.getenv("API_KEY_SECRET", "api-key")

# ---------------------------------------------------------------------------
# Completion backend
# ---------------------------------------------------------------------------

OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-3.5-turbo")

SYSTEM_PROMPT = "You are a helpful assistant in a Slack workspace."
TEMPERATURE = 0.7
MAX_TOKENS = 500
TOP_P = 1.0
FREQUENCY_PENALTY = 0.0
PRESENCE_PENALTY = 0.0

FALLBACK_TEXT = "Sorry, I couldn't generate a response."

# ---------------------------------------------------------------------------
# Replies
# ---------------------------------------------------------------------------

ACKNOWLEDGEMENT_TEXT = os.getenv("RELAY_ACKNOWLEDGEMENT", "Thinking... \U0001f914")
"""Interim reply sent before the completion call. Empty disables it."""


def load_project_id() -> str:
    """Load the Google Cloud project that owns the relay's secrets.

    WHY: Every secret is addressed as projects/<project>/secrets/<name>,
    so nothing can be resolved without it.

    RULES:
    - Raises ValueError if PROJECT_ID is missing or empty
    - Never returns a default/placeholder value
    """
    project_id = os.getenv("PROJECT_ID", "").strip()
    if not project_id:
        raise ValueError(
            "Google Cloud project not configured. "
            "Set PROJECT_ID in the environment or the .env file."
        )
    return project_id
