"""
History Manager - linear undo/redo over document snapshots.

The log is an ordered list of snapshots with exactly one entry flagged current.
Taking a snapshot discards everything after the current entry, so history is a
line, never a tree. Undo, redo and navigation only move the current flag; the
snapshots themselves are never modified.

The whole log is persisted on every change. When the store is full the log is
cut to its most recent half and written again; if that also fails the write is
skipped. Editing never waits on, or fails because of, persistence.
"""
import json
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from PyQt6 import QtCore

from .document import Document
from .storage import KeyValueStore, QuotaExceededError, StorageError
from .logging import log_history


HISTORY_KEY = 'history'
DEFAULT_MAX_ENTRIES = 50


@dataclass
class HistoryEntry:
    """One snapshot in the log"""
    document: Dict
    label: str
    timestamp: str
    is_current: bool = False

    def to_json(self) -> Dict:
        return {
            'document': self.document,
            'label': self.label,
            'timestamp': self.timestamp,
            'isCurrent': self.is_current,
        }

    @classmethod
    def from_json(cls, data: Dict) -> 'HistoryEntry':
        """
        Deserialize an entry. Entries written by older editors keep the layers
        at the top level and use 'action' / 'current'.
        """
        if 'document' in data:
            document = data['document']
        else:
            document = {'layers': data['layers'], 'activeLayerIndex': 0}
        if not isinstance(document, dict) or not isinstance(document.get('layers'), list):
            raise ValueError("History entry has no layer list")

        return cls(
            document=document,
            label=str(data.get('label', data.get('action', 'Edit'))),
            timestamp=str(data.get('timestamp', '')),
            is_current=bool(data.get('isCurrent', data.get('current', False))),
        )


class HistoryManager(QtCore.QObject):
    """
    Snapshot log with a movable current pointer.

    Signals:
        history_changed: Emitted after any change to the log or pointer (current index)
    """

    history_changed = QtCore.pyqtSignal(int)

    def __init__(self, store: Optional[KeyValueStore] = None,
                 max_entries: int = DEFAULT_MAX_ENTRIES, key: str = HISTORY_KEY):
        super().__init__()

        self._store = store
        self._key = key
        self.max_entries = max(1, max_entries)
        self._entries: List[HistoryEntry] = []

    # =========================================================================
    # STATE
    # =========================================================================

    def __len__(self):
        return len(self._entries)

    @property
    def current_index(self) -> int:
        """Index of the current entry, -1 if the log is empty"""
        for i, entry in enumerate(self._entries):
            if entry.is_current:
                return i
        return -1

    def entries(self) -> List[HistoryEntry]:
        """Snapshot list for display, oldest first"""
        return list(self._entries)

    def can_undo(self) -> bool:
        return self.current_index > 0

    def can_redo(self) -> bool:
        index = self.current_index
        return 0 <= index < len(self._entries) - 1

    def current_document(self) -> Optional[Document]:
        index = self.current_index
        if index < 0:
            return None
        return Document.from_json(self._entries[index].document)

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    def snapshot(self, document: Document, label: str = 'Edit') -> HistoryEntry:
        """
        Record a copy of the document as the new current entry.

        Args:
            document: Document to copy
            label: Description shown in the history panel

        Returns:
            The new entry
        """
        index = self.current_index
        # Drop the redo future
        self._entries = self._entries[:index + 1]
        for entry in self._entries:
            entry.is_current = False

        entry = HistoryEntry(
            document=document.to_json(),
            label=label,
            timestamp=datetime.now().strftime('%H:%M:%S'),
            is_current=True,
        )
        self._entries.append(entry)

        # Rotate: drop the oldest entries past the limit
        if len(self._entries) > self.max_entries:
            excess = len(self._entries) - self.max_entries
            self._entries = self._entries[excess:]

        self._persist()
        self.history_changed.emit(self.current_index)
        return entry

    def undo(self) -> Optional[Document]:
        """
        Step back one entry.

        Returns:
            Document of the new current entry, or None at the start of the log
        """
        index = self.current_index
        if index <= 0:
            return None
        return self._move_to(index - 1)

    def redo(self) -> Optional[Document]:
        """
        Step forward one entry.

        Returns:
            Document of the new current entry, or None at the end of the log
        """
        index = self.current_index
        if index < 0 or index >= len(self._entries) - 1:
            return None
        return self._move_to(index + 1)

    def navigate_to(self, index: int) -> Optional[Document]:
        """
        Make an arbitrary entry current.

        Returns:
            Document of that entry, or None if the index is invalid or already current
        """
        if not isinstance(index, int) or not 0 <= index < len(self._entries):
            return None
        if index == self.current_index:
            return None
        return self._move_to(index)

    def clear(self):
        """Drop the whole log"""
        self._entries = []
        if self._store is not None:
            try:
                self._store.remove(self._key)
            except StorageError as e:
                log_history(f"Error clearing history: {e}")
        self.history_changed.emit(-1)

    def _move_to(self, index: int) -> Document:
        for i, entry in enumerate(self._entries):
            entry.is_current = (i == index)
        self._persist()
        self.history_changed.emit(index)
        return Document.from_json(self._entries[index].document)

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def _serialize(self, entries: List[HistoryEntry]) -> str:
        return json.dumps([entry.to_json() for entry in entries])

    def _persist(self) -> bool:
        """
        Write the log to the store, shrinking it once if the store is full.

        Returns:
            True if the log was written
        """
        if self._store is None:
            return False

        try:
            self._store.set(self._key, self._serialize(self._entries))
            return True
        except QuotaExceededError:
            log_history(f"Storage quota exceeded, reducing history size "
                        f"from {len(self._entries)} entries")
        except StorageError as e:
            log_history(f"Error saving history: {e}")
            return False

        reduced = self._reduced_entries()
        try:
            self._store.set(self._key, self._serialize(reduced))
        except StorageError as e:
            log_history(f"Cannot save history, storage full: {e}")
            return False

        self._entries = reduced
        return True

    def _reduced_entries(self) -> List[HistoryEntry]:
        """Most recent half of the log, always keeping the current entry"""
        keep = max(1, len(self._entries) // 2)
        start = len(self._entries) - keep
        index = self.current_index
        if 0 <= index < start:
            start = index
        return self._entries[start:start + keep]

    def load(self) -> Optional[Document]:
        """
        Load the log from the store.

        Missing or corrupt data gives an empty log. A log without a current
        entry makes its last entry current.

        Returns:
            Document of the current entry, or None if the log is empty
        """
        self._entries = []
        if self._store is not None:
            raw = self._store.get(self._key)
            if raw:
                try:
                    data = json.loads(raw)
                    if not isinstance(data, list):
                        raise ValueError("History is not a list")
                    self._entries = [HistoryEntry.from_json(item) for item in data]
                except (json.JSONDecodeError, KeyError, TypeError, ValueError,
                        AttributeError) as e:
                    log_history(f"Corrupt history, starting empty: {e}")
                    self._entries = []

        if len(self._entries) > self.max_entries:
            self._entries = self._entries[-self.max_entries:]

        if self._entries:
            # Exactly one current entry: the first flagged one, else the last
            index = next((i for i, e in enumerate(self._entries) if e.is_current),
                         len(self._entries) - 1)
            for i, entry in enumerate(self._entries):
                entry.is_current = (i == index)

        index = self.current_index
        self.history_changed.emit(index)
        if index < 0:
            return None
        return Document.from_json(self._entries[index].document)
