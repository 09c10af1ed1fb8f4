"""Utility functions and helpers."""

from __future__ import annotations

from statusgate.utils.paths import get_base_path

__all__ = ["get_base_path"]
