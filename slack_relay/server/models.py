"""Pydantic response models for the relay's HTTP endpoints.

WHY: FastAPI uses these for response serialization and the OpenAPI
schema shown at /docs.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- The handshake response is plain text and has no model
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Liveness payload for load balancers and orchestrators."""

    status: str = Field(description="Always 'ok' while the process is serving.")
    version: str = Field(description="Installed slack_relay version.")


class ErrorResponse(BaseModel):
    """Error body used by FastAPI's HTTPException handler."""

    detail: str = Field(description="Human-readable error message.")
