"""
Storage module
"""

from invease.storage.state_storage import (
    StateStorage,
    MemoryStorage,
    JsonFileStorage,
    StorageDefaults,
)

__all__ = [
    "StateStorage",
    "MemoryStorage",
    "JsonFileStorage",
    "StorageDefaults",
]
