"""Value types for the upload pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_MAX_FILES = 15
DEFAULT_MAX_FILE_BYTES = 16 * 1024 * 1024
DEFAULT_MIME_PREFIXES = ("image/", "video/")


@dataclass(frozen=True)
class UploadLimits:
    """Admission limits, fixed at process start."""

    max_files: int = DEFAULT_MAX_FILES
    max_file_bytes: int = DEFAULT_MAX_FILE_BYTES
    allowed_mime_prefixes: tuple[str, ...] = DEFAULT_MIME_PREFIXES

    @property
    def max_file_mb(self) -> float:
        return self.max_file_bytes / (1024 * 1024)

    def allows_mime(self, mime_type: str) -> bool:
        return any(mime_type.startswith(prefix) for prefix in self.allowed_mime_prefixes)


@dataclass(frozen=True)
class RawUpload:
    """A file exactly as received from the request.

    ``byte_size`` is the declared or measured size and may exceed
    ``len(data)`` when the reader stopped early on an oversized file.
    """

    filename: str
    mime_type: str
    byte_size: int
    data: bytes = field(repr=False)


@dataclass(frozen=True)
class UploadItem:
    """A validated file paired with its caption."""

    filename: str
    mime_type: str
    byte_size: int
    raw_bytes: bytes = field(repr=False)
    caption: str | None = None


@dataclass(frozen=True)
class UploadResult:
    """Outcome of a fully delivered upload."""

    media_sent: int
    text_sent: bool

    @property
    def total_sent(self) -> int:
        return self.media_sent + int(self.text_sent)
