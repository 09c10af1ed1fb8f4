"""Health check endpoint."""

from __future__ import annotations

import time
from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel, Field

from statusgate import __version__
from statusgate.web.dependencies import Auth, Session

router = APIRouter(tags=["health"])

_start_time = time.time()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: Literal["ok", "degraded"]
    version: str
    uptime_seconds: float
    phase: str = Field(description="Messaging session phase")
    ready: bool
    password_configured: bool


@router.get("/health", response_model=HealthResponse)
async def health(session: Session, auth: Auth) -> HealthResponse:
    """Report liveness plus pairing and setup progress.

    Status is ``degraded`` until the session is linked and a password is set.
    """
    state = session.state
    healthy = state.is_ready and auth.is_configured
    return HealthResponse(
        status="ok" if healthy else "degraded",
        version=__version__,
        uptime_seconds=round(time.time() - _start_time, 2),
        phase=state.phase.value,
        ready=state.is_ready,
        password_configured=auth.is_configured,
    )
