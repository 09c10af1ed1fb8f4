"""Pairing code rendering."""

from __future__ import annotations

import io
import logging

import segno

logger = logging.getLogger(__name__)


class QRRenderError(Exception):
    """Raised when a pairing code cannot be encoded as a QR image."""


def render_qr_data_url(code: str, *, scale: int = 6, border: int = 1) -> str:
    """Encode ``code`` as a PNG ``data:`` URL for the setup page.

    Raises:
        QRRenderError: If the code cannot be encoded
    """
    try:
        return segno.make_qr(code, error="m").png_data_uri(scale=scale, border=border)
    except (segno.DataOverflowError, ValueError) as e:
        raise QRRenderError(f"Cannot encode pairing code: {e}") from e


def render_qr_terminal(code: str) -> str:
    """Render ``code`` as a compact text QR block for the console."""
    out = io.StringIO()
    segno.make_qr(code, error="l").terminal(out=out, compact=True, border=1)
    return out.getvalue()


def print_pairing_code(code: str) -> None:
    """Pairing listener that shows the code on the console."""
    try:
        block = render_qr_terminal(code)
    except (segno.DataOverflowError, ValueError) as e:
        logger.warning(f"Cannot print pairing code: {e}")
        return
    print("\nScan this QR code with Telegram (Settings > Devices > Link Desktop Device):")
    print(block, flush=True)
