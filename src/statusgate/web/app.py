"""FastAPI application factory."""

from __future__ import annotations

import logging
import platform
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from statusgate.auth import AuthGate
from statusgate.config import Settings, get_settings
from statusgate.qr import print_pairing_code
from statusgate.session import SessionTracker
from statusgate.storage import ConfigStore
from statusgate.transport import StatusClient, build_status_client
from statusgate.upload import UploadLimits, UploadPipeline
from statusgate.web.exception_handlers import register_exception_handlers
from statusgate.web.middleware import (
    RequestIDMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from statusgate.web.routers.health import router as health_router
from statusgate.web.routers.pairing import router as pairing_router
from statusgate.web.routers.setup import router as setup_router
from statusgate.web.routers.upload import router as upload_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Start the messaging client on startup and disconnect it on shutdown."""
    from statusgate import __version__

    settings: Settings = app.state.settings
    client: StatusClient = app.state.client

    logger.info("=" * 60)
    logger.info(f"StatusGate v{__version__} starting up")
    logger.info(
        f"Python: {platform.python_version()}, OS: {platform.system()} {platform.release()}"
    )
    logger.info("=" * 60)
    logger.info(f"Data directory: {settings.data_dir}")
    logger.info(
        f"Upload limits: {settings.max_files} files, {settings.max_file_mb} MB each, "
        f"types {', '.join(settings.allowed_mime_prefixes)}"
    )

    if settings.debug:
        logger.warning(
            "DEBUG MODE ENABLED - error responses include exception details and tracebacks"
        )

    if not app.state.auth.is_configured:
        logger.warning("Manager password is not set. Complete setup in /setup.")

    try:
        await client.start()
    except Exception:
        # Keep serving /health and /setup; the session simply stays unpaired
        logger.exception("Messaging client failed to start")

    logger.info("Application startup complete")

    yield

    logger.info("Initiating graceful shutdown")
    try:
        await client.stop()
        logger.info("Messaging client disconnected")
    except Exception as e:
        logger.error(f"Error stopping messaging client during shutdown: {e}")
    logger.info("Graceful shutdown complete")


def create_app(
    *,
    settings: Settings | None = None,
    client: StatusClient | None = None,
    store: ConfigStore | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Components are built once here and injected through ``app.state``.

    Args:
        settings: Settings instance. If None, uses get_settings().
        client: Messaging client. If None, builds the Telegram client from settings.
        store: Config store. If None, uses ``settings.config_path``.

    Raises:
        TransportConfigError: If no client is given and credentials are missing

    Example:
        ```python
        app = create_app(settings=Settings(port=8080))
        uvicorn.run(app)
        ```
    """
    from statusgate import __version__

    if settings is None:
        settings = get_settings()
    if client is None:
        client = build_status_client(settings)
    if store is None:
        store = ConfigStore(settings.config_path)

    session = SessionTracker()
    client.on_pairing_code(session.on_pairing_code)
    client.on_ready(session.on_ready)
    client.on_pairing_failed(session.on_pairing_failed)
    if settings.print_qr_to_terminal:
        client.on_pairing_code(print_pairing_code)

    auth = AuthGate(store, session, initial_password=settings.manager_password)
    limits = UploadLimits(
        max_files=settings.max_files,
        max_file_bytes=settings.max_file_bytes,
        allowed_mime_prefixes=tuple(settings.allowed_mime_prefixes),
    )
    pipeline = UploadPipeline(client, settings.broadcast_target, limits)

    app = FastAPI(
        title="StatusGate",
        description="Password-protected gateway for posting status updates",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.client = client
    app.state.session = session
    app.state.auth = auth
    app.state.pipeline = pipeline

    register_exception_handlers(app)

    # First added = innermost; RequestID runs first so logs carry the correlation ID
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.include_router(health_router)
    app.include_router(pairing_router)
    app.include_router(setup_router)
    app.include_router(upload_router)

    return app
