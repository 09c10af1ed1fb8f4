"""Upload admission, normalization and sequential dispatch.

Every admission check runs before the first send, so a rejected request
never posts anything. Dispatch is strictly sequential because the broadcast
feed shows items in arrival order.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TypeVar

from statusgate.errors import (
    DeliveryFailedError,
    EmptyContentError,
    FileTooLargeError,
    TooManyFilesError,
    UnsupportedMediaTypeError,
)
from statusgate.transport import MediaPayload, StatusClient
from statusgate.upload.models import RawUpload, UploadItem, UploadLimits, UploadResult

logger = logging.getLogger(__name__)

T = TypeVar("T")


def as_list(value: T | Sequence[T] | None) -> list[T]:
    """Treat a missing field as empty and a single value as a one-item list."""
    if value is None:
        return []
    if isinstance(value, list | tuple):
        return list(value)
    return [value]  # type: ignore[list-item]


def clean_caption(caption: object) -> str | None:
    """Trim a caption; blank captions count as absent."""
    if caption is None:
        return None
    text = str(caption).strip()
    return text or None


class UploadPipeline:
    """Validate an upload and post it to the broadcast target."""

    def __init__(self, client: StatusClient, target: str, limits: UploadLimits) -> None:
        self._client = client
        self._target = target
        self._limits = limits

    @property
    def limits(self) -> UploadLimits:
        return self._limits

    def admit(
        self,
        files: RawUpload | Sequence[RawUpload] | None,
        captions: str | Sequence[str] | None = None,
        text_status: str | None = None,
    ) -> tuple[list[UploadItem], str]:
        """Run every admission check and pair files with captions.

        Returns:
            Validated items in request order and the trimmed text status

        Raises:
            EmptyContentError: If there are no files and no text
            TooManyFilesError: If the file count exceeds the limit
            UnsupportedMediaTypeError: If a file is not an allowed type
            FileTooLargeError: If a file exceeds the size limit
        """
        file_list = as_list(files)
        caption_list = as_list(captions)
        text = (text_status or "").strip()

        if not file_list and not text:
            raise EmptyContentError("No text or media provided.")

        if len(file_list) > self._limits.max_files:
            raise TooManyFilesError(f"Too many files. Max is {self._limits.max_files}.")

        items: list[UploadItem] = []
        for index, upload in enumerate(file_list):
            if not self._limits.allows_mime(upload.mime_type):
                logger.info(f"Rejected '{upload.filename}': unsupported type {upload.mime_type}")
                raise UnsupportedMediaTypeError(
                    "Unsupported file type. Please upload an image or video."
                )
            if upload.byte_size > self._limits.max_file_bytes:
                logger.info(f"Rejected '{upload.filename}': {upload.byte_size} bytes")
                raise FileTooLargeError(
                    f"File too large. Max size is {self._limits.max_file_mb:g}MB."
                )
            caption = clean_caption(caption_list[index]) if index < len(caption_list) else None
            items.append(
                UploadItem(
                    filename=upload.filename,
                    mime_type=upload.mime_type,
                    byte_size=upload.byte_size,
                    raw_bytes=upload.data,
                    caption=caption,
                )
            )

        return items, text

    async def submit(
        self,
        files: RawUpload | Sequence[RawUpload] | None,
        captions: str | Sequence[str] | None = None,
        text_status: str | None = None,
    ) -> UploadResult:
        """Admit the upload, then send each file and the text in order.

        Raises:
            GatewayError: Any admission error from :meth:`admit`
            DeliveryFailedError: If a send fails; earlier sends are kept
        """
        items, text = self.admit(files, captions, text_status)

        delivered = 0
        try:
            for item in items:
                payload = MediaPayload.from_bytes(item.mime_type, item.raw_bytes, item.filename)
                await self._client.send_message(self._target, payload, caption=item.caption)
                delivered += 1
            if text:
                await self._client.send_message(self._target, text)
        except Exception as e:
            logger.error(
                f"Delivery failed after {delivered} of {len(items)} files: "
                f"{type(e).__name__}: {e}"
            )
            raise DeliveryFailedError(str(e) or type(e).__name__, delivered=delivered) from e

        logger.info(f"Posted {len(items)} media item(s){' and text' if text else ''}")
        return UploadResult(media_sent=len(items), text_sent=bool(text))
