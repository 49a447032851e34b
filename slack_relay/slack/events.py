"""Inbound delivery checks: request signatures and handshake detection.

WHY: Slack sends a one-time url_verification delivery when the event
subscription is configured; it must be answered by echoing the challenge
and must never reach the completion backend. Every delivery is also
signed with the app's signing secret.

HOW: classify() is a pure function over the parsed JSON payload.
verify_signature() delegates to slack_sdk's SignatureVerifier
(v0 HMAC-SHA256 over "v0:<timestamp>:<body>", 5 minute window).

RULES:
- classify() never mutates the payload and is idempotent
- Non-dict payloads are never handshakes
- Missing signature headers fail verification
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from slack_sdk.signature import SignatureVerifier

URL_VERIFICATION = "url_verification"


@dataclass(frozen=True)
class Classification:
    is_handshake: bool
    challenge_token: Optional[str] = None


NOT_HANDSHAKE = Classification(is_handshake=False)


def classify(payload: Any) -> Classification:
    """Tell a url_verification handshake apart from a real event delivery."""
    if not isinstance(payload, dict):
        return NOT_HANDSHAKE
    if payload.get("type") != URL_VERIFICATION:
        return NOT_HANDSHAKE
    challenge = payload.get("challenge")
    return Classification(
        is_handshake=True,
        challenge_token="" if challenge is None else str(challenge),
    )


def verify_signature(
    signing_secret: str,
    body: Union[str, bytes],
    timestamp: Optional[str],
    signature: Optional[str],
) -> bool:
    """Check the X-Slack-Signature of a delivery against the signing secret."""
    if not timestamp or not signature:
        return False
    verifier = SignatureVerifier(signing_secret)
    return verifier.is_valid(body=body, timestamp=timestamp, signature=signature)
