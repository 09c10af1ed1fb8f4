"""Manager password setup."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator
from starlette.responses import Response

from statusgate.web.dependencies import Auth
from statusgate.web.template_helpers import render_page

router = APIRouter(tags=["setup"])


class SetupRequest(BaseModel):
    """Body of ``POST /api/setup``."""

    model_config = ConfigDict(populate_by_name=True)

    password: str = ""
    current_password: str = Field(default="", alias="currentPassword")

    @field_validator("password", "current_password", mode="before")
    @classmethod
    def coerce_scalar(cls, v: Any) -> Any:
        """Accept null, numbers and booleans the way form fields would send them.

        Anything else is left for normal validation to reject.
        """
        if v is None:
            return ""
        if isinstance(v, bool):
            return str(v).lower()
        if isinstance(v, int | float):
            return str(v)
        return v


class SetupResponse(BaseModel):
    ok: bool = True


@router.post("/api/setup", response_model=SetupResponse)
async def complete_setup(body: SetupRequest, auth: Auth) -> SetupResponse:
    auth.complete_setup(body.password, body.current_password)
    return SetupResponse()


@router.get("/setup", response_class=HTMLResponse)
async def setup_page(request: Request, auth: Auth) -> Response:
    return render_page(request, "setup.html", password_configured=auth.is_configured)
