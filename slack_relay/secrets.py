"""Google Secret Manager lookups for the relay's startup credentials.

WHY: The bot token, signing secret and model API key are never stored in
local configuration. They are read once at startup from Secret Manager.

HOW: SecretProvider wraps an injected SecretManagerServiceAsyncClient and
reads the latest version of a named secret under a fixed project.
fetch_credentials() resolves the three required names.

RULES:
- resolve() never raises: failures are logged and return None
- Secret values are never logged
- The client is owned by the caller (bootstrap), not by this module
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from slack_relay.config import API_KEY_SECRET, BOT_TOKEN_SECRET, SIGNING_SECRET_SECRET
from slack_relay.models import Credentials

logger = logging.getLogger(__name__)


def secret_version_path(project_id: str, name: str, version: str = "latest") -> str:
    return "projects/{}/secrets/{}/versions/{}".format(project_id, name, version)


class SecretProvider:
    """Resolve named secrets to their current value.

    RULES:
    - client must expose an async access_secret_version(request=...)
    - Empty payloads count as unresolved
    """

    def __init__(self, client: Any, project_id: str) -> None:
        self._client = client
        self._project_id = project_id

    async def resolve(self, name: str) -> Optional[str]:
        """Return the decoded latest version of ``name``, or None on failure."""
        path = secret_version_path(self._project_id, name)
        try:
            response = await self._client.access_secret_version(request={"name": path})
            value = response.payload.data.decode("utf-8")
        except Exception:
            logger.exception("Error retrieving secret %s", name)
            return None

        if not value:
            logger.error("Secret %s resolved to an empty payload", name)
            return None

        logger.info("Resolved secret %s", name)
        return value


async def fetch_credentials(provider: SecretProvider) -> Credentials:
    """Resolve the bot token, signing secret, and model API key."""
    bot_token = await provider.resolve(BOT_TOKEN_SECRET)
    signing_secret = await provider.resolve(SIGNING_SECRET_SECRET)
    model_api_key = await provider.resolve(API_KEY_SECRET)
    return Credentials.from_values(bot_token, signing_secret, model_api_key)
