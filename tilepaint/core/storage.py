"""
Key-value persistence for editor state (history log, zones, exported maps).

Stores hold opaque string values under string keys. Writes may fail; a store
that runs out of room raises QuotaExceededError so callers can degrade what
they keep instead of losing the edit.
"""
from typing import Dict, Optional

from PyQt6 import QtCore


class StorageError(Exception):
    """A store could not complete a read or write"""


class QuotaExceededError(StorageError):
    """A write was rejected because the store is full"""


class KeyValueStore:
    """Interface for the opaque key-value store the editor persists into"""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError

    def contains(self, key: str) -> bool:
        return self.get(key) is not None


class MemoryStore(KeyValueStore):
    """
    In-memory store with an optional byte quota.

    The quota counts the characters of every stored value, mirroring the
    per-origin limit of browser storage.
    """

    def __init__(self, quota: Optional[int] = None):
        """
        Args:
            quota: Maximum total size of stored values, None for unlimited
        """
        self.quota = quota
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.quota is not None:
            used = sum(len(v) for k, v in self._data.items() if k != key)
            if used + len(value) > self.quota:
                raise QuotaExceededError(
                    f"Storing {len(value)} chars under '{key}' exceeds quota of {self.quota}"
                )
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def used(self) -> int:
        """Total size of all stored values"""
        return sum(len(v) for v in self._data.values())


class SettingsStore(KeyValueStore):
    """
    Store backed by a QSettings INI file.

    Keys may contain a group prefix ("Editor/ToolSize"); values are kept as
    strings so callers own the encoding.
    """

    def __init__(self, path: str):
        self.path = path
        self._settings = QtCore.QSettings(path, QtCore.QSettings.Format.IniFormat)

    def get(self, key: str) -> Optional[str]:
        if not self._settings.contains(key):
            return None
        value = self._settings.value(key)
        if value is None:
            return None
        return str(value)

    def set(self, key: str, value: str) -> None:
        self._settings.setValue(key, value)
        self._sync()

    def remove(self, key: str) -> None:
        self._settings.remove(key)
        self._sync()

    def _sync(self):
        self._settings.sync()
        status = self._settings.status()
        if status != QtCore.QSettings.Status.NoError:
            raise StorageError(f"QSettings write to {self.path} failed: {status.name}")
