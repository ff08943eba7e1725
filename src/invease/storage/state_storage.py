"""
Durable key-value storage for store state

Each store persists one JSON document under its own key. Writes are
atomic (temp file + rename) but not flushed to disk on every call, so
the last write before a crash can be lost.
"""

import json
import logging
import os
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, Union

from invease.exceptions import StorageError

logger = logging.getLogger(__name__)


class StorageDefaults:
    """Default values for file storage"""
    FILE_SUFFIX = ".json"
    FILE_PERMISSIONS = 0o600


VALID_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


class StateStorage(ABC):
    """Backend interface used by the stores"""

    @abstractmethod
    def load(self, key: str) -> Optional[Dict[str, Any]]:
        """
        Load the document stored under ``key``

        Returns:
            The stored document, or None if nothing usable is stored
        """

    @abstractmethod
    def save(self, key: str, data: Dict[str, Any]) -> None:
        """
        Store a JSON-serialisable document under ``key``

        Raises:
            StorageError: If the document cannot be written
        """

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete the document stored under ``key``, if any"""


class MemoryStorage(StateStorage):
    """
    In-process storage

    Documents go through a JSON round trip, so what comes back is
    exactly what a file backend would return.
    """

    def __init__(self) -> None:
        self._documents: Dict[str, str] = {}

    def load(self, key: str) -> Optional[Dict[str, Any]]:
        content = self._documents.get(key)
        if content is None:
            return None
        return json.loads(content)

    def save(self, key: str, data: Dict[str, Any]) -> None:
        try:
            self._documents[key] = json.dumps(data)
        except (TypeError, ValueError) as e:
            raise StorageError.write_failed(key, e) from e

    def remove(self, key: str) -> None:
        self._documents.pop(key, None)

    def keys(self):
        return list(self._documents)


class JsonFileStorage(StateStorage):
    """
    One JSON file per key inside a directory

    Example:
        >>> storage = JsonFileStorage("./data")
        >>> storage.save("settings", {"version": 1, "state": {}})
        >>> storage.load("settings")
        {'version': 1, 'state': {}}
    """

    def __init__(self, directory: Union[str, Path]) -> None:
        if not directory:
            raise StorageError("Storage directory is required", code="STORE10")
        self._directory = Path(directory).resolve()

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: str) -> Path:
        if not VALID_KEY_RE.match(key):
            raise StorageError(f"Invalid storage key: {key!r}", code="STORE11", key=key)
        return self._directory / f"{key}{StorageDefaults.FILE_SUFFIX}"

    def load(self, key: str) -> Optional[Dict[str, Any]]:
        path = self.path_for(key)
        if not path.exists():
            return None

        try:
            data = json.loads(path.read_text("utf-8"))
        except (OSError, ValueError) as e:
            # Unreadable state is treated as absent so the store falls back to defaults
            logger.warning(f"Ignoring unreadable state file {path}: {e}")
            return None

        if not isinstance(data, dict):
            logger.warning(f"Ignoring state file {path}: expected a JSON object")
            return None
        return data

    def save(self, key: str, data: Dict[str, Any]) -> None:
        path = self.path_for(key)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)

            # Atomic write: write to temp file, then rename
            temp_path = path.with_suffix(".tmp")
            content = json.dumps(data, indent=2)

            temp_path.write_text(content, "utf-8")
            os.chmod(temp_path, StorageDefaults.FILE_PERMISSIONS)
            temp_path.replace(path)
        except (OSError, TypeError, ValueError) as e:
            raise StorageError.write_failed(key, e) from e

    def remove(self, key: str) -> None:
        path = self.path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageError.write_failed(key, e) from e
