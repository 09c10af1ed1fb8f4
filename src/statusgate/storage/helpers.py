"""JSON helpers on top of :class:`FileStorage`."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from statusgate.storage.errors import StorageCorruptedError, StorageError
from statusgate.storage.file import FileStorage

_default_storage = FileStorage()


def save_json(
    path: Path,
    data: Any,
    *,
    indent: int = 2,
    storage: FileStorage | None = None,
) -> None:
    """Serialize ``data`` and write it atomically.

    Raises:
        StorageError: If data cannot be serialized or written
    """
    storage = storage or _default_storage

    try:
        content = json.dumps(data, indent=indent, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise StorageError(f"Cannot serialize to JSON: {e}") from e

    storage.save(path, content)


def load_json(path: Path, *, storage: FileStorage | None = None) -> Any:
    """Load and decode a JSON document.

    Raises:
        StorageNotFoundError: If file doesn't exist
        StorageCorruptedError: If content is not valid UTF-8 JSON
        StorageError: If the read fails
    """
    storage = storage or _default_storage

    content = storage.load(path)

    try:
        return json.loads(content.decode("utf-8"))
    except json.JSONDecodeError as e:
        raise StorageCorruptedError(f"Invalid JSON in {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise StorageCorruptedError(f"Invalid UTF-8 encoding in {path}: {e}") from e
