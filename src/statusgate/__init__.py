"""StatusGate: password-protected web gateway for posting status updates."""

from __future__ import annotations

__version__ = "0.3.0"

__all__ = ["__version__"]
