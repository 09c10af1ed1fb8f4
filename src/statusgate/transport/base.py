"""Messaging client contract.

The gateway never talks to a messaging protocol directly. It registers
listeners for pairing, readiness and pairing-failure notifications and hands
finished payloads to ``send_message``.
"""

from __future__ import annotations

import base64
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

PairingCodeListener = Callable[[str], None]
ReadyListener = Callable[[], None]
PairingFailedListener = Callable[[str], None]

logger = logging.getLogger(__name__)


class TransportConfigError(Exception):
    """Raised when the messaging client cannot be built from settings."""


@dataclass(frozen=True)
class MediaPayload:
    """One media attachment ready for delivery.

    Attributes:
        mime_type: Declared MIME type of the file
        data: Base64-encoded file content
        filename: Original file name
    """

    mime_type: str
    data: str
    filename: str

    @classmethod
    def from_bytes(cls, mime_type: str, raw: bytes, filename: str) -> MediaPayload:
        return cls(mime_type=mime_type, data=base64.b64encode(raw).decode("ascii"), filename=filename)

    def to_bytes(self) -> bytes:
        return base64.b64decode(self.data)

    @property
    def is_video(self) -> bool:
        return self.mime_type.startswith("video/")


@runtime_checkable
class StatusClient(Protocol):
    """Messaging client as seen by the gateway."""

    def on_pairing_code(self, listener: PairingCodeListener) -> None:
        """Call ``listener`` with every new pairing code."""

    def on_ready(self, listener: ReadyListener) -> None:
        """Call ``listener`` once the session is linked."""

    def on_pairing_failed(self, listener: PairingFailedListener) -> None:
        """Call ``listener`` with a reason when pairing stops without linking."""

    async def start(self) -> None:
        """Connect and begin pairing in the background."""

    async def stop(self) -> None:
        """Cancel pairing and disconnect."""

    async def send_message(
        self,
        target: str,
        content: MediaPayload | str,
        *,
        caption: str | None = None,
    ) -> None:
        """Deliver text or media to ``target``; raise on failure."""


class ListenerRegistry:
    """Fan-out of pairing/ready notifications to registered listeners."""

    def __init__(self) -> None:
        self._pairing_listeners: list[PairingCodeListener] = []
        self._ready_listeners: list[ReadyListener] = []
        self._failure_listeners: list[PairingFailedListener] = []

    def on_pairing_code(self, listener: PairingCodeListener) -> None:
        if listener not in self._pairing_listeners:
            self._pairing_listeners.append(listener)

    def on_ready(self, listener: ReadyListener) -> None:
        if listener not in self._ready_listeners:
            self._ready_listeners.append(listener)

    def on_pairing_failed(self, listener: PairingFailedListener) -> None:
        if listener not in self._failure_listeners:
            self._failure_listeners.append(listener)

    def emit_pairing_code(self, code: str) -> None:
        for listener in list(self._pairing_listeners):
            try:
                listener(code)
            except Exception:
                logger.exception(f"Pairing code listener {listener!r} failed")

    def emit_ready(self) -> None:
        for listener in list(self._ready_listeners):
            try:
                listener()
            except Exception:
                logger.exception(f"Ready listener {listener!r} failed")

    def emit_pairing_failed(self, reason: str) -> None:
        for listener in list(self._failure_listeners):
            try:
                listener(reason)
            except Exception:
                logger.exception(f"Pairing failure listener {listener!r} failed")
