"""Status upload pipeline."""

from __future__ import annotations

from statusgate.upload.models import RawUpload, UploadItem, UploadLimits, UploadResult
from statusgate.upload.pipeline import UploadPipeline, as_list, clean_caption

__all__ = [
    "RawUpload",
    "UploadItem",
    "UploadLimits",
    "UploadPipeline",
    "UploadResult",
    "as_list",
    "clean_caption",
]
