"""FastAPI application that receives Slack Events API deliveries.

WHY: Slack's Events API pushes every event as an HTTP POST. The endpoint
has to answer url_verification handshakes itself, refuse unsigned or
forged deliveries, and hand everything else to the bolt app.

HOW: create_server() builds a FastAPI app around an already configured
AsyncApp. POST /slack/events reads the raw body once, checks the
signature, classifies the payload, echoes handshake challenges and
forwards real events through AsyncSlackRequestHandler. The lifespan
closes the completion client's HTTP pool on shutdown.

RULES:
- Signature check runs before anything else when verification is enabled
- Handshakes return 200 text/plain with the challenge verbatim
- Slack retry deliveries are acknowledged without dispatch
- GET / keeps the plain-text banner; GET /health returns JSON
"""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import PlainTextResponse, Response
from slack_bolt.adapter.fastapi.async_handler import AsyncSlackRequestHandler
from slack_bolt.async_app import AsyncApp

from slack_relay import __version__
from slack_relay.config import BANNER_TEXT, SLACK_EVENTS_PATH
from slack_relay.server.models import ErrorResponse, HealthResponse
from slack_relay.slack.events import classify, verify_signature

logger = logging.getLogger(__name__)

RETRY_HEADER = "x-slack-retry-num"


def create_server(
    slack_app: AsyncApp,
    signing_secret: str,
    verify_signatures: bool = True,
    completion: Optional[Any] = None,
) -> FastAPI:
    """Build the FastAPI app serving Slack deliveries.

    WHY: A factory keeps credentials out of module globals and lets tests
    supply a fake bolt app.

    RULES:
    - completion, when given, must expose an async aclose()
    - verify_signatures=False accepts unsigned deliveries (local dev only)
    """
    slack_handler = AsyncSlackRequestHandler(slack_app)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if completion is not None:
            await completion.aclose()

    app = FastAPI(
        lifespan=lifespan,
        title="Slack AI Relay",
        description=(
            "Receives Slack Events API deliveries, forwards message text to a "
            "chat-completion backend, and posts the reply to the originating "
            "conversation."
        ),
        version=__version__,
    )

    @app.post(
        SLACK_EVENTS_PATH,
        tags=["slack"],
        summary="Slack Events API endpoint",
        description=(
            "Answers url_verification handshakes with the challenge token and "
            "dispatches all other signed deliveries to the message handler."
        ),
        responses={401: {"model": ErrorResponse, "description": "Invalid signature"}},
    )
    async def slack_events(request: Request) -> Response:
        body = await request.body()

        if verify_signatures and not verify_signature(
            signing_secret,
            body,
            request.headers.get("x-slack-request-timestamp"),
            request.headers.get("x-slack-signature"),
        ):
            logger.warning("Rejected Slack delivery with invalid signature")
            raise HTTPException(status_code=401, detail="Invalid request signature")

        try:
            payload = json.loads(body) if body else None
        except ValueError:
            # Interactive payloads arrive form-encoded; bolt parses those
            payload = None

        classification = classify(payload)
        if classification.is_handshake:
            logger.info("Slack challenge verification received")
            return PlainTextResponse(classification.challenge_token or "", status_code=200)

        retry_num = request.headers.get(RETRY_HEADER)
        if retry_num is not None:
            logger.info(
                "Skipping Slack retry %s (%s)",
                retry_num, request.headers.get("x-slack-retry-reason", "unknown"),
            )
            return Response(status_code=200, headers={"X-Slack-No-Retry": "1"})

        return await slack_handler.handle(request)

    @app.get("/", tags=["health"], summary="Plain-text banner", response_class=PlainTextResponse)
    async def banner() -> str:
        return BANNER_TEXT

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["health"],
        summary="Health check",
        description="Liveness check for load balancers and orchestrators.",
    )
    async def health_check() -> HealthResponse:
        return HealthResponse(status="ok", version=__version__)

    return app
