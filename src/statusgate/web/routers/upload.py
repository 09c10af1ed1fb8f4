"""Status upload endpoint and the upload form page."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import HTMLResponse, JSONResponse
from starlette.datastructures import FormData, UploadFile
from starlette.responses import Response

from statusgate.errors import NotReadyError, SetupRequiredError, UnauthorizedError
from statusgate.upload import RawUpload
from statusgate.web.dependencies import Auth, Pipeline, Session
from statusgate.web.template_helpers import accepts_html, render_page

logger = logging.getLogger(__name__)

router = APIRouter(tags=["upload"])

READ_CHUNK_SIZE = 64 * 1024


async def read_upload(upload: UploadFile, max_bytes: int) -> RawUpload:
    """Read an uploaded file, stopping once it is known to be oversized.

    The returned ``byte_size`` exceeds ``max_bytes`` for oversized files so the
    pipeline rejects them; their content is truncated and never sent.
    """
    chunks: list[bytes] = []
    total_size = 0

    while True:
        chunk = await upload.read(READ_CHUNK_SIZE)
        if not chunk:
            break
        total_size += len(chunk)
        if total_size > max_bytes:
            break
        chunks.append(chunk)

    return RawUpload(
        filename=upload.filename or "upload",
        mime_type=upload.content_type or "application/octet-stream",
        byte_size=max(total_size, upload.size or 0),
        data=b"".join(chunks),
    )


def _form_strings(form: FormData, key: str) -> list[str]:
    return [value for value in form.getlist(key) if isinstance(value, str)]


def _form_files(form: FormData, key: str) -> list[UploadFile]:
    # Browsers submit an empty, unnamed part when no file was picked
    return [
        value
        for value in form.getlist(key)
        if isinstance(value, UploadFile) and (value.filename or value.size)
    ]


@router.post("/upload", response_model=None)
async def upload_status(
    request: Request,
    session: Session,
    auth: Auth,
    pipeline: Pipeline,
) -> Response:
    if not session.state.is_ready:
        raise NotReadyError(
            "Messaging account not connected. Please scan the QR code first.",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    if not auth.is_configured:
        raise SetupRequiredError("Setup required. Please set a manager password first.")

    form = await request.form()
    try:
        password = form.get("password")
        if not auth.authorize_upload(password if isinstance(password, str) else None):
            logger.warning("Upload rejected: wrong password")
            raise UnauthorizedError("Wrong password.")

        max_bytes = pipeline.limits.max_file_bytes
        files = [await read_upload(upload, max_bytes) for upload in _form_files(form, "mediaFile")]
        captions = _form_strings(form, "captions") or _form_strings(form, "caption")
        text_values = _form_strings(form, "textStatus")

        result = await pipeline.submit(files, captions, text_values[0] if text_values else None)
    finally:
        await form.close()

    if accepts_html(request):
        return render_page(
            request,
            "result.html",
            success=True,
            title="Status Posted Successfully!",
            message=f"Posted {result.total_sent} item(s).",
        )
    return JSONResponse(
        content={"ok": True, "mediaSent": result.media_sent, "textSent": result.text_sent}
    )


@router.get("/", response_class=HTMLResponse)
async def index_page(request: Request, session: Session, auth: Auth) -> Response:
    return render_page(
        request,
        "index.html",
        ready=session.state.is_ready,
        password_configured=auth.is_configured,
    )
