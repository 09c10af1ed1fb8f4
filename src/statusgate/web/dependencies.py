"""Dependency injection helpers for FastAPI routes.

The application factory stores one instance of each component on
``app.state``; these helpers expose them to route handlers.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from statusgate.auth import AuthGate
from statusgate.session import SessionTracker
from statusgate.upload import UploadPipeline


def get_session_tracker(request: Request) -> SessionTracker:
    return request.app.state.session


def get_auth_gate(request: Request) -> AuthGate:
    return request.app.state.auth


def get_upload_pipeline(request: Request) -> UploadPipeline:
    return request.app.state.pipeline


Session = Annotated[SessionTracker, Depends(get_session_tracker)]
Auth = Annotated[AuthGate, Depends(get_auth_gate)]
Pipeline = Annotated[UploadPipeline, Depends(get_upload_pipeline)]
