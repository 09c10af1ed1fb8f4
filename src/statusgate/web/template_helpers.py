"""Template helper functions for rendering."""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING, Any

from fastapi.templating import Jinja2Templates

from statusgate.utils.paths import get_base_path

if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.responses import Response

TEMPLATES_DIR = get_base_path() / "templates"


@lru_cache
def get_templates() -> Jinja2Templates:
    """Get the shared Jinja2 templates instance."""
    if not TEMPLATES_DIR.exists():
        raise FileNotFoundError(f"Templates directory not found: {TEMPLATES_DIR}")
    return Jinja2Templates(directory=str(TEMPLATES_DIR))


def get_template_context(request: Request, **kwargs: Any) -> dict[str, Any]:
    """Common context for every page: version and configured limits."""
    from statusgate import __version__

    settings = getattr(request.app.state, "settings", None)
    return {
        "version": __version__,
        "max_files": settings.max_files if settings else None,
        "max_file_mb": settings.max_file_mb if settings else None,
        **kwargs,
    }


def render_page(request: Request, name: str, *, status_code: int = 200, **kwargs: Any) -> Response:
    return get_templates().TemplateResponse(
        request,
        name,
        context=get_template_context(request, **kwargs),
        status_code=status_code,
    )


def accepts_html(request: Request) -> bool:
    """True when the client prefers HTML (a browser form post) over JSON."""
    accept = request.headers.get("accept", "")
    return "text/html" in accept and "application/json" not in accept.split(",")[0]
