"""Telethon-backed status client.

Pairing uses Telegram's QR login: every login token is published as a
``tg://login?token=...`` pairing code, and a fresh token is requested each
time the previous one expires without being scanned.
"""

from __future__ import annotations

import asyncio
import contextlib
import io
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from telethon import TelegramClient
from telethon.errors import SessionPasswordNeededError

from statusgate.transport.base import (
    ListenerRegistry,
    MediaPayload,
    PairingCodeListener,
    PairingFailedListener,
    ReadyListener,
    TransportConfigError,
)

if TYPE_CHECKING:
    from statusgate.config import Settings

logger = logging.getLogger(__name__)

PAIRING_FAILED = "Pairing failed. Check the server log and restart the gateway."
TWO_FACTOR_REQUIRED = (
    "This account has two-step verification. "
    "Set STATUSGATE_TWO_FACTOR_PASSWORD and restart the gateway."
)


class TelegramStatusClient:
    """Status client that posts to a Telegram entity through Telethon.

    Example:
        ```python
        client = TelegramStatusClient(session_path, api_id, api_hash)
        client.on_pairing_code(lambda code: print("scan", code))
        client.on_ready(lambda: print("linked"))
        await client.start()
        await client.send_message("me", "Hello")
        ```
    """

    def __init__(
        self,
        session_path: Path,
        api_id: int,
        api_hash: str,
        *,
        two_factor_password: str | None = None,
        client: TelegramClient | None = None,
    ) -> None:
        self._two_factor_password = two_factor_password
        if client is None:
            # SQLiteSession opens its database file on construction
            session_path.parent.mkdir(parents=True, exist_ok=True)
            client = TelegramClient(str(session_path), api_id, api_hash)
        self._client = client
        self._listeners = ListenerRegistry()
        self._login_task: asyncio.Task[None] | None = None

    def on_pairing_code(self, listener: PairingCodeListener) -> None:
        self._listeners.on_pairing_code(listener)

    def on_ready(self, listener: ReadyListener) -> None:
        self._listeners.on_ready(listener)

    def on_pairing_failed(self, listener: PairingFailedListener) -> None:
        self._listeners.on_pairing_failed(listener)

    async def start(self) -> None:
        """Connect, then either report ready or start QR pairing in the background."""
        await self._client.connect()

        if await self._client.is_user_authorized():
            logger.info("Telegram session already authorized")
            self._listeners.emit_ready()
            return

        if self._login_task is None or self._login_task.done():
            self._login_task = asyncio.create_task(self._run_qr_login())
            self._login_task.add_done_callback(self._handle_login_done)

    async def _run_qr_login(self) -> None:
        qr_login = await self._client.qr_login()
        while True:
            self._listeners.emit_pairing_code(qr_login.url)
            try:
                await qr_login.wait()
            except asyncio.TimeoutError:
                logger.debug("Pairing code expired, requesting a new one")
                await qr_login.recreate()
                continue
            except SessionPasswordNeededError:
                if not self._two_factor_password:
                    logger.error(
                        "Account has two-step verification enabled; "
                        "set STATUSGATE_TWO_FACTOR_PASSWORD and restart"
                    )
                    self._listeners.emit_pairing_failed(TWO_FACTOR_REQUIRED)
                    return
                await self._client.sign_in(password=self._two_factor_password)
            break

        logger.info("Telegram session linked")
        self._listeners.emit_ready()

    def _handle_login_done(self, task: asyncio.Task[None]) -> None:
        """Log a crashed pairing task and withdraw its code."""
        if task.cancelled():
            logger.debug("Pairing task cancelled")
            return
        exc = task.exception()
        if exc is None:
            return
        logger.error(f"Pairing failed: {type(exc).__name__}: {exc}", exc_info=exc)
        self._listeners.emit_pairing_failed(PAIRING_FAILED)

    async def stop(self) -> None:
        if self._login_task and not self._login_task.done():
            self._login_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._login_task
        await self._client.disconnect()

    async def send_message(
        self,
        target: str,
        content: MediaPayload | str,
        *,
        caption: str | None = None,
    ) -> None:
        if isinstance(content, MediaPayload):
            file = io.BytesIO(content.to_bytes())
            file.name = content.filename
            await self._client.send_file(
                target,
                file,
                caption=caption or "",
                supports_streaming=content.is_video,
            )
            logger.debug(f"Sent {content.mime_type} '{content.filename}' to {target}")
        else:
            await self._client.send_message(target, content)
            logger.debug(f"Sent text ({len(content)} chars) to {target}")


def build_status_client(settings: Settings) -> TelegramStatusClient:
    """Create the Telegram client described by ``settings``.

    Raises:
        TransportConfigError: If API credentials are not configured
    """
    if settings.api_id is None or not settings.api_hash:
        raise TransportConfigError(
            "Telegram API credentials are missing: set STATUSGATE_API_ID and STATUSGATE_API_HASH"
        )
    return TelegramStatusClient(
        settings.session_path,
        settings.api_id,
        settings.api_hash,
        two_factor_password=settings.two_factor_password,
    )
