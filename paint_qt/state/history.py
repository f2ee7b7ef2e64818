# paint_qt/state/history.py
"""
History Manager - lịch sử Undo/Redo theo snapshot toàn bộ raster
Tuyến tính, giới hạn dung lượng, gộp (debounce) các thay đổi liên tiếp
"""
from __future__ import annotations
import logging
from typing import List

from PySide6 import QtCore
from PySide6.QtCore import Signal

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 50
DEFAULT_DEBOUNCE_MS = 100


class HistoryManager(QtCore.QObject):
    """Bounded undo/redo stack of encoded raster snapshots.

    `surface` must provide encode() -> bytes and restore(bytes).
    Entries after the cursor are the redo future; a new snapshot drops them.
    """

    changed = Signal(bool, bool)   # can_undo, can_redo

    def __init__(self, surface, capacity: int = DEFAULT_CAPACITY,
                 debounce_ms: int = DEFAULT_DEBOUNCE_MS, parent=None):
        super().__init__(parent)
        self.surface = surface
        self.capacity = max(1, int(capacity))
        self._entries: List[bytes] = []
        self._index = -1

        self._timer = QtCore.QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(max(0, int(debounce_ms)))
        self._timer.timeout.connect(self._commit)

    # ---- state ----
    @property
    def index(self) -> int: return self._index

    @property
    def entries(self) -> List[bytes]: return list(self._entries)

    def __len__(self) -> int: return len(self._entries)

    @property
    def debounce_ms(self) -> int: return self._timer.interval()

    def pending(self) -> bool:
        return self._timer.isActive()

    def can_undo(self) -> bool:
        return self._index > 0

    def can_redo(self) -> bool:
        return 0 <= self._index < len(self._entries) - 1

    # ---- recording ----
    def snapshot(self) -> None:
        """Schedule a snapshot; calls inside the debounce window restart the timer."""
        self._timer.start()

    def flush(self) -> bool:
        """Record a pending snapshot immediately."""
        if not self._timer.isActive():
            return False
        self._timer.stop()
        return self._commit()

    def snapshot_now(self) -> bool:
        self._timer.stop()
        return self._commit()

    def _commit(self) -> bool:
        data = self.surface.encode()
        del self._entries[self._index + 1:]
        if self._entries and self._entries[-1] == data:
            self._emit()
            return False
        self._entries.append(data)
        self._index += 1
        if len(self._entries) > self.capacity:
            self._entries.pop(0)
            self._index -= 1
        logger.debug("History push: %d/%d (cursor %d)", len(self._entries), self.capacity, self._index)
        self._emit()
        return True

    def clear(self) -> None:
        self._timer.stop()
        self._entries.clear()
        self._index = -1
        self._emit()

    # ---- navigation ----
    def undo(self) -> bool:
        self.flush()
        if self._index <= 0:
            return False
        self._index -= 1
        self.surface.restore(self._entries[self._index])
        self._emit()
        return True

    def redo(self) -> bool:
        self.flush()
        if self._index >= len(self._entries) - 1:
            return False
        self._index += 1
        self.surface.restore(self._entries[self._index])
        self._emit()
        return True

    def _emit(self):
        self.changed.emit(self.can_undo(), self.can_redo())
