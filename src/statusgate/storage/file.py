"""File-based storage with atomic writes."""

from __future__ import annotations

import contextlib
import logging
import os
import tempfile
from pathlib import Path

from statusgate.storage.errors import (
    StorageError,
    StorageNotFoundError,
    StoragePermissionError,
)

logger = logging.getLogger(__name__)


class FileStorage:
    """File system storage that never leaves a half-written document.

    Writes go to a temporary file in the target directory which is then
    renamed over the destination, so readers see either the old or the new
    content.

    Example:
        ```python
        storage = FileStorage()
        storage.save(path, '{"managerPassword": "secret1"}')
        raw = storage.load(path)
        ```
    """

    def save(self, path: Path, content: bytes | str) -> None:
        """Save content with atomic write.

        Args:
            path: Destination path
            content: Content to save

        Raises:
            StoragePermissionError: If write permission denied
            StorageError: If operation fails (disk full, bad path, ...)
        """
        content_bytes = content.encode("utf-8") if isinstance(content, str) else content

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except PermissionError as e:
            raise StoragePermissionError(
                f"Cannot create directory {path.parent}: permission denied"
            ) from e
        except OSError as e:
            raise StorageError(f"Failed to create directory {path.parent}: {e}") from e

        tmp_path: Path | None = None
        try:
            # Same directory as target so the rename stays on one filesystem
            with tempfile.NamedTemporaryFile(
                mode="wb",
                dir=path.parent,
                delete=False,
                prefix=f".{path.name}.",
                suffix=".tmp",
            ) as tmp_file:
                tmp_path = Path(tmp_file.name)
                tmp_file.write(content_bytes)
                tmp_file.flush()
                os.fsync(tmp_file.fileno())

            tmp_path.replace(path)
            logger.debug(f"Saved {len(content_bytes)} bytes to {path}")

        except PermissionError as e:
            raise StoragePermissionError(f"Cannot write to {path}: permission denied") from e
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}") from e
        finally:
            if tmp_path is not None and tmp_path.exists():
                with contextlib.suppress(OSError):
                    tmp_path.unlink()

    def load(self, path: Path) -> bytes:
        """Load content from file.

        Raises:
            StorageNotFoundError: If file doesn't exist
            StoragePermissionError: If read permission denied
            StorageError: If operation fails
        """
        try:
            content = path.read_bytes()
        except FileNotFoundError as e:
            raise StorageNotFoundError(f"File not found: {path}") from e
        except PermissionError as e:
            raise StoragePermissionError(f"Cannot read {path}: permission denied") from e
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

        logger.debug(f"Loaded {len(content)} bytes from {path}")
        return content
