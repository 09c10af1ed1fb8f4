"""Pairing status endpoint polled by the setup page."""

from __future__ import annotations

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from statusgate.qr import QRRenderError, render_qr_data_url
from statusgate.web.dependencies import Session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pairing"])


class QRStatusResponse(BaseModel):
    """Pairing status: a QR image while pairing, empty once linked.

    ``error`` is only present after pairing failed for good.
    """

    model_config = ConfigDict(populate_by_name=True)

    ready: bool
    qr_data_url: str = Field(default="", serialization_alias="qrDataUrl")
    error: str | None = None


@router.get("/api/qr", response_model=None)
async def get_qr(session: Session) -> dict[str, object] | JSONResponse:
    current = session.status()

    if current.pending_code:
        try:
            data_url = render_qr_data_url(current.pending_code)
        except QRRenderError as e:
            logger.error(f"QR generation failed: {e}")
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"ready": False, "error": "QR generation failed"},
            )
        return QRStatusResponse(ready=False, qr_data_url=data_url).model_dump(
            by_alias=True, exclude_none=True
        )

    return QRStatusResponse(ready=current.ready, error=current.error).model_dump(
        by_alias=True, exclude_none=True
    )
