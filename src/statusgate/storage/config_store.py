"""Durable manager configuration.

The config file holds a single JSON document. Absence or corruption of the
file is treated as a first run, never as an error; only writes can fail.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from statusgate.storage.errors import StorageError, StorageNotFoundError
from statusgate.storage.file import FileStorage
from statusgate.storage.helpers import load_json, save_json

logger = logging.getLogger(__name__)


class ManagerConfig(BaseModel):
    """Persisted manager settings."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    manager_password: str = Field(default="", alias="managerPassword")


class ConfigStore:
    """Load and save the manager config document at a fixed path."""

    def __init__(self, path: Path, *, storage: FileStorage | None = None) -> None:
        self._path = path
        self._storage = storage or FileStorage()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> ManagerConfig:
        """Read the persisted config, falling back to an empty default."""
        try:
            data = load_json(self._path, storage=self._storage)
        except StorageNotFoundError:
            logger.debug(f"No config at {self._path}, using defaults")
            return ManagerConfig()
        except StorageError as e:
            logger.warning(f"Ignoring unreadable config {self._path}: {e}")
            return ManagerConfig()

        if not isinstance(data, dict):
            logger.warning(f"Ignoring config {self._path}: expected a JSON object")
            return ManagerConfig()

        try:
            return ManagerConfig.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Ignoring invalid config {self._path}: {e}")
            return ManagerConfig()

    def save(self, config: ManagerConfig) -> None:
        """Overwrite the whole document with ``config``.

        Raises:
            StorageError: If the document cannot be written
        """
        save_json(self._path, config.model_dump(by_alias=True), storage=self._storage)
        logger.info(f"Saved manager config to {self._path}")
