"""Pairing/readiness state machine for the messaging session.

The messaging client pushes events; :func:`transition` folds them into a new
immutable :class:`SessionState`. :class:`SessionTracker` holds the current
state and is the only writer. HTTP handlers read it through ``status()``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class SessionPhase(str, Enum):
    """Lifecycle phase of the messaging session."""

    UNPAIRED = "unpaired"  # Client started, no pairing code yet
    PAIRING = "pairing"  # Pairing code issued, waiting for scan
    READY = "ready"  # Linked and able to send


@dataclass(frozen=True)
class SessionState:
    """Immutable snapshot of the session lifecycle."""

    phase: SessionPhase = SessionPhase.UNPAIRED
    pairing_code: str | None = None
    pairing_error: str | None = None

    @property
    def is_ready(self) -> bool:
        return self.phase is SessionPhase.READY


@dataclass(frozen=True)
class PairingCodeIssued:
    """The client produced a new pairing code to scan."""

    code: str


@dataclass(frozen=True)
class ClientReady:
    """The client finished pairing and can send messages."""


@dataclass(frozen=True)
class PairingFailed:
    """Pairing stopped for good; the last code can no longer link the account."""

    reason: str


SessionEvent = PairingCodeIssued | ClientReady | PairingFailed


@dataclass(frozen=True)
class SessionStatus:
    """Read model served to polling clients."""

    ready: bool
    pending_code: str | None
    error: str | None = None


def transition(state: SessionState, event: SessionEvent) -> SessionState:
    """Return the state that follows ``state`` after ``event``.

    A new pairing code always supersedes an unscanned one. A pairing failure
    drops the pending code and keeps the reason until the next code arrives.
    Once ready, the session stays ready; late pairing events are ignored.
    """
    if isinstance(event, ClientReady):
        return SessionState(phase=SessionPhase.READY)

    if isinstance(event, PairingCodeIssued):
        if state.is_ready:
            return state
        return SessionState(phase=SessionPhase.PAIRING, pairing_code=event.code)

    if isinstance(event, PairingFailed):
        if state.is_ready:
            return state
        return SessionState(phase=SessionPhase.UNPAIRED, pairing_error=event.reason)

    raise TypeError(f"Unknown session event: {event!r}")


class SessionTracker:
    """Holds the current :class:`SessionState`.

    State is replaced as a whole on every event, so readers on the same event
    loop never observe a half-applied transition.
    """

    def __init__(self, initial: SessionState | None = None) -> None:
        self._state = initial or SessionState()

    @property
    def state(self) -> SessionState:
        return self._state

    def apply(self, event: SessionEvent) -> SessionState:
        previous = self._state
        self._state = transition(previous, event)
        if self._state.phase is not previous.phase:
            logger.info(f"Session phase: {previous.phase.value} -> {self._state.phase.value}")
        elif isinstance(event, PairingCodeIssued) and not previous.is_ready:
            logger.debug("Pairing code refreshed")
        return self._state

    def on_pairing_code(self, code: str) -> None:
        """Callback for the client's pairing-code notification."""
        self.apply(PairingCodeIssued(code))

    def on_ready(self) -> None:
        """Callback for the client's ready notification."""
        self.apply(ClientReady())

    def on_pairing_failed(self, reason: str) -> None:
        """Callback for the client's pairing-failed notification."""
        self.apply(PairingFailed(reason))

    def status(self) -> SessionStatus:
        state = self._state
        return SessionStatus(
            ready=state.is_ready, pending_code=state.pairing_code, error=state.pairing_error
        )
