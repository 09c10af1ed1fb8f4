"""Package resource paths."""

from __future__ import annotations

import sys
from pathlib import Path


def get_base_path() -> Path:
    """Get the directory holding bundled resources (templates).

    Returns the package directory in development, or the extracted
    ``statusgate`` directory when frozen with PyInstaller.
    """
    if getattr(sys, "frozen", False) and hasattr(sys, "_MEIPASS"):
        return Path(sys._MEIPASS) / "statusgate"  # type: ignore[attr-defined]
    return Path(__file__).parent.parent
