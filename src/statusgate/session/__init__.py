"""Messaging session lifecycle."""

from __future__ import annotations

from statusgate.session.state import (
    ClientReady,
    PairingCodeIssued,
    PairingFailed,
    SessionEvent,
    SessionPhase,
    SessionState,
    SessionStatus,
    SessionTracker,
    transition,
)

__all__ = [
    "ClientReady",
    "PairingCodeIssued",
    "PairingFailed",
    "SessionEvent",
    "SessionPhase",
    "SessionState",
    "SessionStatus",
    "SessionTracker",
    "transition",
]
