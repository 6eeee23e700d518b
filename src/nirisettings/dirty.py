"""Thread-safe set of categories with unsaved changes."""

from __future__ import annotations

import threading
from typing import Iterable

from nirisettings.categories import SettingsCategory


class DirtyTracker:
    """Coalesces marks per category until the next :meth:`take`.

    ``mark`` may be called from any thread while ``take`` drains the set:
    the set is swapped out under the lock, so a mark lands either in the
    current drain or in the next one, never in neither.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._dirty: set[SettingsCategory] = set()

    def mark(self, category: SettingsCategory) -> None:
        with self._lock:
            self._dirty.add(category)

    def mark_many(self, categories: Iterable[SettingsCategory]) -> None:
        with self._lock:
            self._dirty.update(categories)

    def mark_all(self) -> None:
        self.mark_many(SettingsCategory)

    def take(self) -> set[SettingsCategory]:
        with self._lock:
            taken, self._dirty = self._dirty, set()
        return taken

    def pending(self) -> set[SettingsCategory]:
        with self._lock:
            return set(self._dirty)

    def is_dirty(self, category: SettingsCategory | None = None) -> bool:
        with self._lock:
            if category is None:
                return bool(self._dirty)
            return category in self._dirty

    def __len__(self) -> int:
        with self._lock:
            return len(self._dirty)
