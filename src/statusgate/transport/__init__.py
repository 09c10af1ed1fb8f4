"""Messaging transport: the client contract and its Telegram implementation."""

from __future__ import annotations

from statusgate.transport.base import (
    ListenerRegistry,
    MediaPayload,
    StatusClient,
    TransportConfigError,
)
from statusgate.transport.telegram import TelegramStatusClient, build_status_client

__all__ = [
    "ListenerRegistry",
    "MediaPayload",
    "StatusClient",
    "TelegramStatusClient",
    "TransportConfigError",
    "build_status_client",
]
