"""Process bootstrap for the relay: secrets, wiring, and the HTTP listener.

WHY: The relay must not accept traffic until the bot token, signing secret
and model API key are all available. This module owns that startup
sequence and every long-lived client the components share.

HOW: Parses flags with argparse, configures logging, resolves credentials
from Google Secret Manager via asyncio.run(), exits with code 1 if any are
missing, then builds the completion client, message handler, bolt app and
FastAPI server and hands the server to uvicorn.

RULES:
- Exit code 1 on missing PROJECT_ID, unusable Google credentials, or any
  missing secret
- uvicorn is never started when startup fails
- The Secret Manager client lives only for the duration of resolution
- The httpx client is closed by the server's lifespan on shutdown
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

import uvicorn
from fastapi import FastAPI
from google.auth.exceptions import GoogleAuthError
from google.cloud import secretmanager

from slack_relay.api.client import CompletionClient, create_http_client
from slack_relay.config import (
    ACKNOWLEDGEMENT_TEXT,
    HOST,
    LOG_LEVEL,
    PORT,
    VERIFY_SIGNATURES,
    load_project_id,
)
from slack_relay.models import Credentials
from slack_relay.secrets import SecretProvider, fetch_credentials
from slack_relay.server.app import create_server
from slack_relay.slack.bot import create_app
from slack_relay.slack.handler import MessageHandler

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


async def resolve_credentials(project_id: str) -> Credentials:
    """Open a Secret Manager client, resolve the three secrets, close it.

    RULES:
    - A client that cannot be created (no Application Default Credentials)
      yields all-unresolved Credentials instead of raising
    """
    try:
        client = secretmanager.SecretManagerServiceAsyncClient()
    except GoogleAuthError as exc:
        logger.error("Could not create Secret Manager client: %s", exc)
        return Credentials.from_values(None, None, None)

    try:
        return await fetch_credentials(SecretProvider(client, project_id))
    finally:
        await client.transport.close()


def build_application(
    credentials: Credentials,
    verify_signatures: bool = True,
    acknowledgement: Optional[str] = ACKNOWLEDGEMENT_TEXT,
) -> FastAPI:
    """Wire the completion client, handler, bolt app and server together.

    RULES:
    - credentials must be fully resolved (checked by the caller)
    """
    completion = CompletionClient(
        api_key=credentials.model_api_key.value or "",
        http_client=create_http_client(),
    )
    handler = MessageHandler(completion, acknowledgement=acknowledgement)
    slack_app = create_app(
        bot_token=credentials.bot_token.value or "",
        signing_secret=credentials.signing_secret.value or "",
        handler=handler,
    )
    return create_server(
        slack_app,
        signing_secret=credentials.signing_secret.value or "",
        verify_signatures=verify_signatures,
        completion=completion,
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the relay process."""
    parser = argparse.ArgumentParser(
        prog="slack_relay",
        description="Serve the Slack Events API endpoint and answer messages "
                    "with a chat-completion model.",
    )

    parser.add_argument(
        "--host",
        default=HOST,
        help="Interface to bind (default: %(default)s).",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=PORT,
        help="Port to listen on (default: %(default)s).",
    )

    parser.add_argument(
        "--verify-signatures",
        action=argparse.BooleanOptionalAction,
        default=VERIFY_SIGNATURES,
        help="Require a valid X-Slack-Signature on every delivery (default: %(default)s).",
    )

    parser.add_argument(
        "--log-level",
        default=LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: %(default)s).",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``python -m slack_relay`` and the slack-relay script.

    RULES:
    - argv=None means use sys.argv (normal invocation)
    - Explicit argv is for testing
    """
    args = build_parser().parse_args(argv)

    logging.basicConfig(level=args.log_level, format=LOG_FORMAT)

    try:
        project_id = load_project_id()
    except ValueError as exc:
        logger.error("%s", exc)
        sys.exit(1)

    credentials = asyncio.run(resolve_credentials(project_id))
    missing = credentials.missing()
    if missing:
        logger.error(
            "Missing one or more required secrets (%s). Exiting...", ", ".join(missing)
        )
        sys.exit(1)

    if not args.verify_signatures:
        logger.warning("Request signature verification is disabled")

    app = build_application(credentials, verify_signatures=args.verify_signatures)

    logger.info("Server starting on %s:%d", args.host, args.port)
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())


if __name__ == "__main__":
    main()
