"""Storage layer for the manager config document.

Example:
    ```python
    from statusgate.storage import ConfigStore, ManagerConfig

    store = ConfigStore(settings.config_path)
    config = store.load()
    store.save(ManagerConfig(manager_password="secret1"))
    ```
"""

from __future__ import annotations

from statusgate.storage.config_store import ConfigStore, ManagerConfig
from statusgate.storage.errors import (
    StorageCorruptedError,
    StorageError,
    StorageNotFoundError,
    StoragePermissionError,
)
from statusgate.storage.file import FileStorage
from statusgate.storage.helpers import load_json, save_json

__all__ = [
    "ConfigStore",
    "ManagerConfig",
    "FileStorage",
    "save_json",
    "load_json",
    "StorageError",
    "StorageNotFoundError",
    "StoragePermissionError",
    "StorageCorruptedError",
]
